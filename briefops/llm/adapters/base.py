"""Base adapter interface for LLM providers."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
)

from briefops.llm.types import (
    FinishReason,
    LLMConfig,
    LLMProvider,
    LLMResult,
    Message,
    MessageRole,
    TokenUsage,
)

logger = logging.getLogger(__name__)

# Provider stop reasons, lower-cased, mapped onto the canonical enum
_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "max_tokens": FinishReason.LENGTH,
    "safety": FinishReason.CONTENT_FILTER,
    "content_filter": FinishReason.CONTENT_FILTER,
}


class BaseAdapter(ABC):
    """Abstract base for LLM provider adapters."""

    def __init__(self, config: LLMConfig):
        self.config = config

    @abstractmethod
    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages to LLM and get unified result."""
        pass

    @abstractmethod
    def convert_messages(self, messages: list[Message]) -> Any:
        """Convert canonical messages to provider format."""
        pass

    @abstractmethod
    def parse_response(self, response: Any, latency_ms: float) -> LLMResult:
        """Parse provider response to unified format."""
        pass


class LangChainAdapter(BaseAdapter):
    """Adapter for any LangChain chat model.

    Subclasses set ``provider`` and build the provider client in
    ``_build_client``. Errors never escape ``invoke``; they come back as an
    ``LLMResult`` with ``FinishReason.ERROR`` and the detail in ``error``.
    """

    provider: LLMProvider

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self.client = self._build_client()

    @abstractmethod
    def _build_client(self) -> BaseChatModel:
        """Create the LangChain chat model for ``self.config``."""

    def convert_messages(self, messages: list[Message]) -> list[BaseMessage]:
        """Convert canonical messages to LangChain format."""
        result = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                result.append(SystemMessage(content=msg.content))
            elif msg.role == MessageRole.USER:
                result.append(HumanMessage(content=msg.content))
            elif msg.role == MessageRole.ASSISTANT:
                result.append(AIMessage(content=msg.content))
        return result

    def parse_response(self, response: Any, latency_ms: float) -> LLMResult:
        """Parse LangChain response to unified format.

        Only the first text part is kept. A response whose content is neither
        a string nor a list of content blocks is reported as MALFORMED.
        """
        content = getattr(response, "content", None)
        finish_reason = FinishReason.STOP
        text = ""

        if isinstance(content, str):
            text = content
        elif isinstance(content, list):
            # Content blocks format: [{'type': 'text', 'text': '...'}]
            for block in content:
                if isinstance(block, dict) and block.get("type") == "text":
                    text = block.get("text") or ""
                    break
                if isinstance(block, str):
                    text = block
                    break
        else:
            finish_reason = FinishReason.MALFORMED

        metadata = getattr(response, "response_metadata", None) or {}
        raw_reason = metadata.get("finish_reason") or metadata.get("stop_reason")
        if finish_reason != FinishReason.MALFORMED and isinstance(raw_reason, str):
            finish_reason = _FINISH_REASONS.get(raw_reason.lower(), FinishReason.STOP)

        usage = TokenUsage()
        um = getattr(response, "usage_metadata", None)
        if um:
            usage = TokenUsage(
                prompt_tokens=um.get("input_tokens", 0),
                completion_tokens=um.get("output_tokens", 0),
                total_tokens=um.get("total_tokens", 0),
            )

        return LLMResult(
            text=text,
            finish_reason=finish_reason,
            provider=self.provider,
            model=self.config.model,
            latency_ms=latency_ms,
            usage=usage,
            raw=response,
        )

    async def invoke(self, messages: list[Message]) -> LLMResult:
        """Send messages to the provider and get unified result."""
        start_time = time.perf_counter()

        try:
            lc_messages = self.convert_messages(messages)
            response = await self.client.ainvoke(lc_messages)

            latency_ms = (time.perf_counter() - start_time) * 1000
            result = self.parse_response(response, latency_ms)

            logger.info(
                f"{self.provider.value} request completed",
                extra={
                    "request_id": result.request_id,
                    "provider": result.provider.value,
                    "model": result.model,
                    "latency_ms": result.latency_ms,
                    "finish_reason": result.finish_reason.value,
                },
            )
            return result

        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{self.provider.value} request failed: {e}",
                extra={"model": self.config.model, "latency_ms": latency_ms},
                exc_info=True,
            )
            return LLMResult(
                text="",
                finish_reason=FinishReason.ERROR,
                error=str(e),
                provider=self.provider,
                model=self.config.model,
                latency_ms=latency_ms,
            )
