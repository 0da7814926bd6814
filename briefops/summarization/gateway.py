"""Single choke point between BriefOps and the summarization backend.

Every summary in the bot, whether of a thread, a channel window, a document
chunk or a set of search results, goes through ``SummarizationGateway``.
The gateway sends exactly one request per call, decodes the backend reply
once into ``BackendReply`` and hands callers a ``SummaryResult`` they can
render without ever seeing raw provider errors.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from briefops.llm import (
    DecodingConfig,
    FinishReason,
    LLMResult,
    Message,
    MessageRole,
    UnifiedChatClient,
)

logger = logging.getLogger(__name__)


SUMMARY_SYSTEM_INSTRUCTION = (
    "You are an assistant that summarizes Slack messages and documents. "
    "Please provide a concise summary of the provided content."
)

GENERIC_FAILURE_MESSAGE = "An error occurred while generating the summary."
EMPTY_SUMMARY_MESSAGE = "The model did not generate a summary."


class SummaryStatus(str, Enum):
    """Outcome of a summarization call."""
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


class SummaryResult(BaseModel):
    """Result handed back to callers: ``ok(text)``, ``empty()`` or ``failed(reason)``."""

    model_config = ConfigDict(frozen=True)

    status: SummaryStatus
    text: str = ""
    reason: Optional[str] = None

    @classmethod
    def ok(cls, text: str) -> "SummaryResult":
        return cls(status=SummaryStatus.OK, text=text)

    @classmethod
    def empty(cls) -> "SummaryResult":
        return cls(status=SummaryStatus.EMPTY)

    @classmethod
    def failed(cls, reason: str = GENERIC_FAILURE_MESSAGE) -> "SummaryResult":
        return cls(status=SummaryStatus.FAILED, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == SummaryStatus.OK

    def render(self) -> str:
        """User-facing text for any outcome."""
        if self.status == SummaryStatus.OK:
            return self.text
        if self.status == SummaryStatus.EMPTY:
            return EMPTY_SUMMARY_MESSAGE
        return self.reason or GENERIC_FAILURE_MESSAGE


class SummaryRequest(BaseModel):
    """One backend request. Built fresh per call."""

    content: str
    decoding: DecodingConfig
    system_instruction: str = SUMMARY_SYSTEM_INSTRUCTION

    def to_messages(self) -> list[Message]:
        return [
            Message(role=MessageRole.SYSTEM, content=self.system_instruction),
            Message(role=MessageRole.USER, content=self.content),
        ]


# -----------------------------------------------------------------------------
# Backend reply sum type
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Ok:
    text: str


@dataclass(frozen=True)
class NoCandidate:
    pass


@dataclass(frozen=True)
class MalformedResponse:
    detail: str


@dataclass(frozen=True)
class TransportFailure:
    detail: str


BackendReply = Union[Ok, NoCandidate, MalformedResponse, TransportFailure]


def decode_reply(result: LLMResult) -> BackendReply:
    """Decode an adapter result into exactly one ``BackendReply`` variant."""
    if result.finish_reason == FinishReason.ERROR:
        return TransportFailure(detail=result.error or "unknown error")
    if result.finish_reason == FinishReason.MALFORMED:
        return MalformedResponse(detail=f"undecodable response from {result.provider.value}")
    text = result.text.strip()
    if not text:
        return NoCandidate()
    return Ok(text=text)


class SummarizationGateway:
    """Calls the LLM with a fixed system instruction and decoding config.

    Args:
        llm: Provider-agnostic chat client.
        decoding: Default decoding parameters, overridable per call.
        system_instruction: Instruction sent as the system message.
    """

    def __init__(
        self,
        llm: UnifiedChatClient,
        decoding: DecodingConfig | None = None,
        system_instruction: str = SUMMARY_SYSTEM_INSTRUCTION,
    ):
        self.llm = llm
        self.decoding = decoding or DecodingConfig()
        self.system_instruction = system_instruction

    async def summarize(
        self,
        content: str,
        decoding: DecodingConfig | None = None,
    ) -> SummaryResult:
        """Summarize ``content`` with a single backend request.

        Returns:
            ``SummaryResult.ok`` with the first text part of the first
            candidate, ``SummaryResult.empty`` when the backend produced no
            candidate, or ``SummaryResult.failed`` with a generic message on
            any backend or transport error.
        """
        request = SummaryRequest(
            content=content,
            decoding=decoding or self.decoding,
            system_instruction=self.system_instruction,
        )

        try:
            result = await self.llm.invoke(request.to_messages(), decoding=request.decoding)
        except Exception as e:
            logger.error(
                f"Summarization backend call raised: {e}",
                extra={"content_chars": len(content)},
                exc_info=True,
            )
            return SummaryResult.failed()

        reply = decode_reply(result)

        if isinstance(reply, Ok):
            logger.info(
                "Summary generated",
                extra={
                    "request_id": result.request_id,
                    "content_chars": len(content),
                    "summary_chars": len(reply.text),
                    "latency_ms": result.latency_ms,
                },
            )
            return SummaryResult.ok(reply.text)

        if isinstance(reply, NoCandidate):
            logger.warning(
                "No summary generated by the model",
                extra={"request_id": result.request_id, "finish_reason": result.finish_reason.value},
            )
            return SummaryResult.empty()

        logger.error(
            f"Summarization failed: {reply.detail}",
            extra={"request_id": result.request_id, "provider": result.provider.value},
        )
        return SummaryResult.failed()
