"""Tests for the LangChain adapter layer and provider detection."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from briefops.llm import (
    DecodingConfig,
    FinishReason,
    LLMConfig,
    LLMProvider,
    Message,
    MessageRole,
    UnifiedChatClient,
    detect_provider,
    get_default_model,
)
from briefops.llm.adapters.base import LangChainAdapter


class FakeAdapter(LangChainAdapter):
    provider = LLMProvider.GEMINI

    def _build_client(self):
        client = MagicMock()
        client.ainvoke = AsyncMock(return_value=AIMessage(content="Summary text"))
        return client


@pytest.fixture
def adapter():
    return FakeAdapter(LLMConfig(provider=LLMProvider.GEMINI, model="gemini-1.5-flash-002"))


class TestParseResponse:
    """LangChain responses mapped onto LLMResult."""

    def test_string_content(self, adapter):
        result = adapter.parse_response(AIMessage(content="hello"), 12.0)

        assert result.text == "hello"
        assert result.finish_reason == FinishReason.STOP
        assert result.latency_ms == 12.0

    def test_first_text_block(self, adapter):
        response = AIMessage(content=[
            {"type": "text", "text": "first"},
            {"type": "text", "text": "second"},
        ])

        assert adapter.parse_response(response, 0).text == "first"

    def test_no_content_is_malformed(self, adapter):
        result = adapter.parse_response(SimpleNamespace(content=None), 0)

        assert result.finish_reason == FinishReason.MALFORMED

    def test_finish_reason_mapping(self, adapter):
        response = AIMessage(content="cut", response_metadata={"finish_reason": "MAX_TOKENS"})

        assert adapter.parse_response(response, 0).finish_reason == FinishReason.LENGTH

    def test_usage(self, adapter):
        response = AIMessage(
            content="x",
            usage_metadata={"input_tokens": 10, "output_tokens": 5, "total_tokens": 15},
        )

        assert adapter.parse_response(response, 0).usage.total_tokens == 15


class TestInvoke:

    @pytest.mark.asyncio
    async def test_converts_messages(self, adapter):
        result = await adapter.invoke([
            Message(role=MessageRole.SYSTEM, content="sys"),
            Message(role=MessageRole.USER, content="hi"),
        ])

        sent = adapter.client.ainvoke.await_args.args[0]
        assert sent == [SystemMessage(content="sys"), HumanMessage(content="hi")]
        assert result.text == "Summary text"

    @pytest.mark.asyncio
    async def test_errors_become_results(self, adapter):
        adapter.client.ainvoke.side_effect = TimeoutError("deadline")

        result = await adapter.invoke([Message(role=MessageRole.USER, content="hi")])

        assert result.finish_reason == FinishReason.ERROR
        assert result.error == "deadline"


class TestProviderSelection:

    def test_detect_provider(self):
        assert detect_provider("gemini-1.5-flash-002") == LLMProvider.GEMINI
        assert detect_provider("gpt-4o-mini") == LLMProvider.OPENAI
        assert detect_provider("claude-3-5-sonnet-latest") == LLMProvider.ANTHROPIC

    def test_adapter_per_decoding(self, monkeypatch):
        created = []

        def fake_create(config):
            created.append(config)
            return MagicMock()

        monkeypatch.setattr("briefops.llm.client.create_adapter", fake_create)
        client = UnifiedChatClient(model="gpt-4o-mini", api_key="k")

        first = client.adapter_for()
        assert client.adapter_for() is first
        client.adapter_for(DecodingConfig(temperature=0.1))

        assert len(created) == 2
        assert created[1].decoding.temperature == 0.1

    def test_unknown_model_falls_back_to_gemini(self):
        assert detect_provider("my-custom-model") == LLMProvider.GEMINI

    def test_provider_default_model(self, monkeypatch):
        monkeypatch.setattr("briefops.llm.client.create_adapter", lambda config: MagicMock())
        client = UnifiedChatClient(provider=LLMProvider.ANTHROPIC, api_key="k")

        assert client.model == get_default_model(LLMProvider.ANTHROPIC)
        assert client.provider == LLMProvider.ANTHROPIC
