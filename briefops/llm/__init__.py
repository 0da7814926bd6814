"""Summarization backend access across Gemini, OpenAI and Anthropic.

Usage:
    from briefops.llm import UnifiedChatClient, Message, MessageRole

    llm = UnifiedChatClient(model="gemini-1.5-flash-002", api_key=key)
    result = await llm.invoke([Message(role=MessageRole.USER, content=text)])
"""

from briefops.llm.client import UnifiedChatClient
from briefops.llm.factory import create_adapter, detect_provider, get_default_model
from briefops.llm.types import (
    DecodingConfig,
    FinishReason,
    LLMConfig,
    LLMProvider,
    LLMResult,
    Message,
    MessageRole,
    TokenUsage,
)

__all__ = [
    "UnifiedChatClient",
    "create_adapter",
    "detect_provider",
    "get_default_model",
    "DecodingConfig",
    "FinishReason",
    "LLMConfig",
    "LLMProvider",
    "LLMResult",
    "Message",
    "MessageRole",
    "TokenUsage",
]
