"""
Request and response schemas for the summarize endpoint.
"""

from typing import Literal, Optional
from pydantic import BaseModel


class SummarizeRequest(BaseModel):
    """
    Summarization request.

    ``type="document"`` summarizes ``text`` (already extracted from a
    document), optionally following ``custom_prompt``. ``type="audio"``
    downloads ``file_id`` from Drive and sends the raw audio.
    """
    type: Literal["document", "audio"] = "audio"
    text: Optional[str] = None
    custom_prompt: Optional[str] = None
    file_id: Optional[str] = None
    mime_type: str = "audio/webm"
    stream: bool = False


class SummarizeResponse(BaseModel):
    summary: str
