"""
LLM providers package.
Summarization backed by a generative model endpoint.
"""

from llm.base import LLMProvider, LLMResponse, StreamChunk
from llm.gemini_provider import GeminiProvider
from llm.summarizer import Summarizer

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "StreamChunk",
    "GeminiProvider",
    "Summarizer",
]
