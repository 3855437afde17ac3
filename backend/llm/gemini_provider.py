"""
Google Gemini LLM provider implementation.
Talks to the Generative Language REST API (generateContent and
streamGenerateContent with SSE).
"""

import json
import logging
from typing import List, Dict, Any, Optional, AsyncGenerator
import httpx

from llm.base import LLMProvider, LLMResponse, StreamChunk

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Gemini API provider.

    Args:
        api_key: Google AI Studio API key.
        base_url: API root, ``.../v1beta`` by default.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests).
    """

    provider_name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, base_url)
        self.base_url = (base_url or "https://generativelanguage.googleapis.com/v1beta").rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """Build request headers with authentication."""
        if not self.api_key:
            raise ValueError("Gemini API key is not configured")
        return {
            "X-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

    def _model_url(self, model: str) -> str:
        if not model.startswith("models/"):
            model = f"models/{model}"
        return f"{self.base_url}/{model}"

    @staticmethod
    def _build_payload(
        parts: List[Dict[str, Any]],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        generation_config: Dict[str, Any] = {}
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_tokens:
            generation_config["maxOutputTokens"] = max_tokens
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    @staticmethod
    def _candidate_text(data: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        if block := data.get("promptFeedback", {}).get("blockReason"):
            raise ValueError(f"Prompt blocked: {block}")
        candidates = data.get("candidates")
        if not candidates:
            raise ValueError("Response has no candidates")
        candidate = candidates[0]
        parts = candidate.get("content", {}).get("parts", [])
        # thought parts carry reasoning, not answer text
        return "".join(p.get("text", "") for p in parts if not p.get("thought"))

    async def generate(
        self,
        parts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a complete response from Gemini."""
        payload = self._build_payload(parts, temperature, max_tokens)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self._model_url(model)}:generateContent",
                headers=self._get_headers(),
                json=payload
            )
            response.raise_for_status()
            data = response.json()

        usage = data.get("usageMetadata", {})
        content = self._candidate_text(data)
        logger.debug(f"Gemini {model} returned {len(content)} chars, usage={usage}")
        return LLMResponse(
            content=content,
            model=model,
            provider=self.provider_name,
            usage={k: v for k, v in usage.items() if isinstance(v, int)},
            finish_reason=data["candidates"][0].get("finishReason")
        )

    async def stream(
        self,
        parts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        """Stream response chunks from Gemini."""
        payload = self._build_payload(parts, temperature, max_tokens)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            async with client.stream(
                "POST",
                f"{self._model_url(model)}:streamGenerateContent",
                params={"alt": "sse"},
                headers=self._get_headers(),
                json=payload
            ) as response:
                response.raise_for_status()

                async for line in response.aiter_lines():
                    if not line or not line.startswith("data: "):
                        continue

                    data = json.loads(line[6:])  # Remove "data: " prefix
                    content = self._candidate_text(data)
                    if content:
                        yield StreamChunk(content=content)

        yield StreamChunk(content="", is_done=True)
