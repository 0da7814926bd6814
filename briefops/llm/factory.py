"""Provider selection and adapter construction.

The summarization model is configured by name only (``DEFAULT_LLM_MODEL``);
the provider is inferred from the name's prefix.
"""

from importlib import import_module

from briefops.llm.adapters.base import BaseAdapter
from briefops.llm.types import LLMConfig, LLMProvider

# Checked in order; the first matching prefix wins
_MODEL_PREFIXES: list[tuple[tuple[str, ...], LLMProvider]] = [
    (("gemini",), LLMProvider.GEMINI),
    (("gpt", "o1", "o3", "o4"), LLMProvider.OPENAI),
    (("claude",), LLMProvider.ANTHROPIC),
]

# Imported lazily so only the configured provider's SDK is loaded
_ADAPTERS: dict[LLMProvider, str] = {
    LLMProvider.GEMINI: "briefops.llm.adapters.gemini:GeminiAdapter",
    LLMProvider.OPENAI: "briefops.llm.adapters.openai:OpenAIAdapter",
    LLMProvider.ANTHROPIC: "briefops.llm.adapters.anthropic:AnthropicAdapter",
}

DEFAULT_MODELS: dict[LLMProvider, str] = {
    LLMProvider.GEMINI: "gemini-1.5-flash-002",
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.ANTHROPIC: "claude-3-5-sonnet-latest",
}


def detect_provider(model: str) -> LLMProvider:
    """Infer the provider from a model name; unknown names fall back to Gemini.

    Examples:
        >>> detect_provider("gemini-1.5-flash-002")
        <LLMProvider.GEMINI: 'gemini'>
        >>> detect_provider("gpt-4o")
        <LLMProvider.OPENAI: 'openai'>
    """
    name = model.lower()
    for prefixes, provider in _MODEL_PREFIXES:
        if name.startswith(prefixes):
            return provider
    return LLMProvider.GEMINI


def create_adapter(config: LLMConfig) -> BaseAdapter:
    """Instantiate the adapter for ``config.provider``.

    Raises:
        ValueError: Unknown provider, or the provider's API key is missing
    """
    target = _ADAPTERS.get(config.provider)
    if target is None:
        raise ValueError(f"Unknown provider: {config.provider}")

    module_name, class_name = target.split(":")
    adapter_cls = getattr(import_module(module_name), class_name)
    return adapter_cls(config)


def get_default_model(provider: LLMProvider) -> str:
    return DEFAULT_MODELS[provider]
