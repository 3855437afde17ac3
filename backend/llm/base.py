"""
Abstract base class for LLM providers.
All providers must implement this interface.

Requests are lists of content parts rather than chat messages, because
summarization sends audio as well as text:

    [{"text": "..."}]
    [{"inline_data": {"mime_type": "audio/webm", "data": "<base64>"}}, {"text": "..."}]
"""

import base64
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, AsyncGenerator
from pydantic import BaseModel
from dataclasses import dataclass


@dataclass
class StreamChunk:
    """A single chunk from streaming response."""
    content: str
    is_done: bool = False
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


class LLMResponse(BaseModel):
    """Complete response from LLM."""
    content: str
    model: str
    provider: str
    usage: Dict[str, int] = {}
    finish_reason: Optional[str] = None


def text_part(text: str) -> Dict[str, Any]:
    """Build a text content part."""
    return {"text": text}


def inline_part(data: bytes, mime_type: str) -> Dict[str, Any]:
    """Build an inline binary content part (audio, images)."""
    return {
        "inline_data": {
            "mime_type": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        }
    }


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Each provider implementation must:
    1. Implement generate() for non-streaming responses
    2. Implement stream() for SSE streaming responses

    Providers let transport and HTTP errors propagate; callers decide how
    to report them.
    """

    provider_name: str = "base"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize provider with credentials.

        Args:
            api_key: API key for authentication (if required)
            base_url: Base URL for API requests
        """
        self.api_key = api_key
        self.base_url = base_url

    @abstractmethod
    async def generate(
        self,
        parts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Generate a complete response (non-streaming).

        Args:
            parts: Content parts (see text_part / inline_part)
            model: Model identifier to use
            temperature: Sampling temperature, provider default if None
            max_tokens: Maximum tokens in response
            **kwargs: Provider-specific options

        Returns:
            LLMResponse with complete generated text
        """
        pass

    @abstractmethod
    async def stream(
        self,
        parts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        """
        Stream response chunks via SSE.

        Yields:
            StreamChunk objects with partial content, ending with one
            whose is_done is True
        """
        pass
