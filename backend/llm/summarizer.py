"""
Summarization on top of an LLM provider.

Two inputs:
  - document text, with an optional extra instruction from the user
  - raw audio bytes (recordings are sent inline, not transcribed first)

Either can be answered in one piece or streamed. Whatever goes wrong
talking to the model surfaces as AdapterError; nothing is retried here.
"""

import json
import logging
from typing import AsyncIterator, Optional

import httpx

from errors import AdapterError
from llm.base import LLMProvider, inline_part, text_part

logger = logging.getLogger(__name__)

DOCUMENT_INSTRUCTION = (
    "以下の文書テキストを詳細に要約してください。"
    "重要なポイントを箇条書きで出力すること。日本語で回答してください。"
)
CUSTOM_INSTRUCTION_HEADER = "また、以下の追加指示にも対応してください:"
AUDIO_INSTRUCTION = (
    "以下の音声を詳細に要約してください。"
    "重要なポイントを箇条書きで出力すること。日本語で回答してください。"
)

# Errors a provider call can raise for a failed or unusable response
_PROVIDER_ERRORS = (httpx.HTTPError, json.JSONDecodeError, KeyError, IndexError, ValueError)


def build_text_prompt(text: str, instruction: Optional[str] = None) -> str:
    """
    Compose the document prompt.

    The fixed instruction comes first, then the user's extra instruction if
    any, then the document text after a ``---`` separator.
    """
    prompt = DOCUMENT_INSTRUCTION
    if instruction and instruction.strip():
        prompt = f"{prompt}\n\n{CUSTOM_INSTRUCTION_HEADER}\n{instruction.strip()}"
    return f"{prompt}\n\n---\n{text}"


class Summarizer:
    """
    Summarize documents and recordings with a generative model.

    Args:
        provider: LLM provider to call.
        model: Model identifier passed to the provider.
    """

    def __init__(self, provider: LLMProvider, model: str):
        self.provider = provider
        self.model = model

    @staticmethod
    def _text_parts(text: str, instruction: Optional[str]) -> list:
        if not text or not text.strip():
            raise ValueError("Text is required")
        return [text_part(build_text_prompt(text, instruction))]

    @staticmethod
    def _audio_parts(audio: bytes, mime_type: str) -> list:
        if not audio:
            raise ValueError("Audio is empty")
        return [inline_part(audio, mime_type), text_part(AUDIO_INSTRUCTION)]

    async def _generate(self, parts: list) -> str:
        try:
            response = await self.provider.generate(parts, self.model)
        except _PROVIDER_ERRORS as e:
            logger.error(f"Summarization failed ({self.provider.provider_name}): {e}")
            raise AdapterError("Summarization failed") from e
        return response.content

    async def _stream(self, parts: list) -> AsyncIterator[str]:
        try:
            async for chunk in self.provider.stream(parts, self.model):
                if chunk.is_done:
                    break
                if chunk.content:
                    yield chunk.content
        except _PROVIDER_ERRORS as e:
            logger.error(f"Summarization stream failed ({self.provider.provider_name}): {e}")
            raise AdapterError("Summarization failed") from e

    async def summarize_text(self, text: str, instruction: Optional[str] = None) -> str:
        """
        Summarize extracted document text.

        Raises:
            ValueError: If ``text`` is blank.
            AdapterError: If the model call fails.
        """
        return await self._generate(self._text_parts(text, instruction))

    def stream_text(self, text: str, instruction: Optional[str] = None) -> AsyncIterator[str]:
        """Like summarize_text, yielding the summary in pieces."""
        return self._stream(self._text_parts(text, instruction))

    async def summarize_audio(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        """Summarize a recording sent inline to the model."""
        return await self._generate(self._audio_parts(audio, mime_type))

    def stream_audio(self, audio: bytes, mime_type: str = "audio/webm") -> AsyncIterator[str]:
        """Like summarize_audio, yielding the summary in pieces."""
        return self._stream(self._audio_parts(audio, mime_type))
