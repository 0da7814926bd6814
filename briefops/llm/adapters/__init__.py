"""Provider adapters for the LLM abstraction layer."""

from briefops.llm.adapters.base import BaseAdapter, LangChainAdapter

__all__ = ["BaseAdapter", "LangChainAdapter"]
