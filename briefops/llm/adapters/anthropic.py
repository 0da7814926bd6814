"""Anthropic provider adapter using langchain-anthropic."""

from langchain_anthropic import ChatAnthropic

from briefops.llm.adapters.base import LangChainAdapter
from briefops.llm.types import LLMProvider


class AnthropicAdapter(LangChainAdapter):
    """Anthropic provider adapter using langchain-anthropic.

    ChatAnthropic lifts a leading SystemMessage into the separate ``system``
    parameter, so the shared message conversion works unchanged.
    """

    provider = LLMProvider.ANTHROPIC

    def _build_client(self) -> ChatAnthropic:
        if not self.config.api_key:
            raise ValueError("Anthropic API key required")

        decoding = self.config.decoding
        return ChatAnthropic(
            model=self.config.model,
            api_key=self.config.api_key,
            temperature=decoding.temperature,
            top_p=decoding.top_p,
            top_k=decoding.top_k,
            max_tokens=decoding.max_output_tokens,
            timeout=self.config.timeout_seconds,
            max_retries=0,
        )
