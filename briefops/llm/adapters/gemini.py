"""Gemini provider adapter using langchain-google-genai."""

from langchain_google_genai import ChatGoogleGenerativeAI

from briefops.llm.adapters.base import LangChainAdapter
from briefops.llm.types import LLMProvider


class GeminiAdapter(LangChainAdapter):
    """Gemini provider adapter using langchain-google-genai."""

    provider = LLMProvider.GEMINI

    def _build_client(self) -> ChatGoogleGenerativeAI:
        if not self.config.api_key:
            raise ValueError("Google API key required")

        decoding = self.config.decoding
        return ChatGoogleGenerativeAI(
            model=self.config.model,
            google_api_key=self.config.api_key,
            temperature=decoding.temperature,
            top_p=decoding.top_p,
            top_k=decoding.top_k,
            max_output_tokens=decoding.max_output_tokens,
            timeout=self.config.timeout_seconds,
            max_retries=1,  # single attempt
        )
