"""Types shared by the summarization backend adapters."""

import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LLMProvider(str, Enum):
    """Backends a summary can be generated with."""
    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Provider-neutral chat message."""
    role: MessageRole
    content: str


class FinishReason(str, Enum):
    """Why generation ended, normalized across providers.

    ``MALFORMED`` means a response arrived but carried no decodable text
    part; ``ERROR`` means no response arrived at all.
    """
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    MALFORMED = "malformed"
    ERROR = "error"


class DecodingConfig(BaseModel):
    """Sampling parameters sent with every summarization request.

    Frozen so it can key the per-config adapter cache.
    """
    model_config = ConfigDict(frozen=True)

    temperature: float = 0.7
    top_p: float = 0.9
    top_k: int = 40
    max_output_tokens: int = 1000


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResult(BaseModel):
    """What an adapter hands back for one request.

    Adapters never raise; transport and provider failures are reported with
    ``finish_reason=ERROR`` and the provider's message in ``error``. That
    message is for logs and must not reach users.
    """
    text: str = ""
    finish_reason: FinishReason = FinishReason.STOP
    error: Optional[str] = None

    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    provider: LLMProvider
    model: str

    latency_ms: float = 0
    usage: TokenUsage = Field(default_factory=TokenUsage)
    raw: Optional[Any] = None


class LLMConfig(BaseModel):
    """Everything needed to build one provider adapter."""
    provider: LLMProvider
    model: str
    decoding: DecodingConfig = Field(default_factory=DecodingConfig)
    timeout_seconds: float = 60.0
    api_key: Optional[str] = None
