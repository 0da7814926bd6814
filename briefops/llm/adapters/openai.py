"""OpenAI provider adapter using langchain-openai."""

from langchain_openai import ChatOpenAI

from briefops.llm.adapters.base import LangChainAdapter
from briefops.llm.types import LLMProvider


class OpenAIAdapter(LangChainAdapter):
    """OpenAI provider adapter using langchain-openai.

    OpenAI has no top-k sampling, so ``decoding.top_k`` is ignored.
    """

    provider = LLMProvider.OPENAI

    def _build_client(self) -> ChatOpenAI:
        if not self.config.api_key:
            raise ValueError("OpenAI API key required")

        decoding = self.config.decoding
        return ChatOpenAI(
            model=self.config.model,
            api_key=self.config.api_key,
            temperature=decoding.temperature,
            top_p=decoding.top_p,
            max_tokens=decoding.max_output_tokens,
            timeout=self.config.timeout_seconds,
            max_retries=0,
        )
