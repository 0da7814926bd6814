"""Provider-agnostic client used by the summarization gateway.

Usage:
    llm = UnifiedChatClient(model="gemini-1.5-flash-002", api_key=key)
    result = await llm.invoke(messages, decoding=DecodingConfig(temperature=0.2))
"""

from briefops.llm.adapters.base import BaseAdapter
from briefops.llm.factory import create_adapter, detect_provider, get_default_model
from briefops.llm.types import DecodingConfig, LLMConfig, LLMProvider, LLMResult, Message


class UnifiedChatClient:
    """Sends canonical messages to whichever provider the model belongs to.

    LangChain chat models fix their sampling parameters at construction, so
    one adapter is built per distinct ``DecodingConfig`` and reused. Adapters
    are created on first use, which also defers API key validation until a
    summary is actually requested.

    Args:
        model: Model name; the provider default when omitted.
        provider: Provider; inferred from ``model`` when omitted.
        decoding: Decoding used when a call passes none.
        timeout_seconds: Per-request timeout.
        api_key: Key for the selected provider.
    """

    def __init__(
        self,
        model: str | None = None,
        provider: LLMProvider | None = None,
        decoding: DecodingConfig | None = None,
        timeout_seconds: float = 60.0,
        api_key: str | None = None,
    ):
        if provider is None:
            provider = detect_provider(model) if model else LLMProvider.GEMINI
        model = model or get_default_model(provider)

        self.config = LLMConfig(
            provider=provider,
            model=model,
            decoding=decoding or DecodingConfig(),
            timeout_seconds=timeout_seconds,
            api_key=api_key,
        )
        self._adapters: dict[DecodingConfig, BaseAdapter] = {}

    @property
    def provider(self) -> LLMProvider:
        return self.config.provider

    @property
    def model(self) -> str:
        return self.config.model

    def adapter_for(self, decoding: DecodingConfig | None = None) -> BaseAdapter:
        decoding = decoding or self.config.decoding
        adapter = self._adapters.get(decoding)
        if adapter is None:
            adapter = create_adapter(self.config.model_copy(update={"decoding": decoding}))
            self._adapters[decoding] = adapter
        return adapter

    async def invoke(
        self,
        messages: list[Message],
        decoding: DecodingConfig | None = None,
    ) -> LLMResult:
        """Send one request.

        Raises:
            ValueError: The provider's API key is missing (first use only)
        """
        return await self.adapter_for(decoding).invoke(messages)
