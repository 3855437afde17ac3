"""
Summarization router.

``type="document"`` summarizes text the client already extracted (see
GET /api/files/{id}/text). ``type="audio"`` fetches a recording from Drive
and sends it to the model as-is.

With ``stream=true`` the answer arrives as server-sent events:

    data: {"content": "..."}
    ...
    data: [DONE]

A failure mid-stream is reported as ``data: {"error": "..."}`` before
``[DONE]``, since the status line has already been sent by then.
"""

import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import StreamingResponse

from drive import slots
from drive.client import DriveClient
from errors import AdapterError
from llm.summarizer import Summarizer
from models.summary import SummarizeRequest, SummarizeResponse
from routers.auth import get_access_token
from routers.deps import get_drive_client, get_summarizer

logger = logging.getLogger(__name__)
router = APIRouter()


def _sse(chunks: AsyncIterator[str]) -> StreamingResponse:
    async def _generator():
        try:
            async for piece in chunks:
                yield f"data: {json.dumps({'content': piece}, ensure_ascii=False)}\n\n"
        except AdapterError as e:
            yield f"data: {json.dumps({'error': e.message})}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(_generator(), media_type="text/event-stream")


@router.post("")
async def summarize(
    data: SummarizeRequest,
    token: str = Depends(get_access_token),
    client: DriveClient = Depends(get_drive_client),
    summarizer: Summarizer = Depends(get_summarizer),
):
    """Summarize document text or an audio recording."""
    if data.type == "document":
        if not data.text or not data.text.strip():
            raise HTTPException(status_code=400, detail="Text is required")
        logger.info(f"Summarizing document text ({len(data.text)} chars)")
        if data.stream:
            return _sse(summarizer.stream_text(data.text, data.custom_prompt))
        summary = await summarizer.summarize_text(data.text, data.custom_prompt)
        return SummarizeResponse(summary=summary)

    if not data.file_id:
        raise HTTPException(status_code=400, detail="file_id is required")
    audio = await slots.read_binary(client, token, data.file_id)
    logger.info(f"Summarizing audio {data.file_id} ({len(audio)} bytes)")
    try:
        if data.stream:
            return _sse(summarizer.stream_audio(audio, data.mime_type))
        summary = await summarizer.summarize_audio(audio, data.mime_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SummarizeResponse(summary=summary)
