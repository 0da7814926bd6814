"""Tests for settings and the narrow config objects derived from them."""

from briefops.config import Settings
from briefops.llm import DecodingConfig, LLMProvider


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDerivedConfig:
    """Helpers that turn flat settings into component config."""

    def test_search_budget_from_model_input(self):
        limits = make_settings().search_limits()

        assert limits.max_total_length == 21333
        assert limits.max_results == 7
        assert limits.max_sources == 5
        assert limits.max_content_per_source == 5000

    def test_decoding_defaults(self):
        assert make_settings().decoding_config() == DecodingConfig(
            temperature=0.7, top_p=0.9, top_k=40, max_output_tokens=1000
        )

    def test_usage_limits(self):
        limits = make_settings(free_tier_daily_limit=0, free_tier_max_days=30).usage_limits()

        assert limits.daily_limit == 0
        assert limits.max_days == 30

    def test_api_key_for_provider(self):
        settings = make_settings(google_api_key="g", openai_api_key="o", anthropic_api_key="a")

        assert settings.api_key_for(LLMProvider.GEMINI) == "g"
        assert settings.api_key_for(LLMProvider.OPENAI) == "o"
        assert settings.api_key_for(LLMProvider.ANTHROPIC) == "a"


class TestEnvironment:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("FREE_TIER_DAILY_LIMIT", "3")
        monkeypatch.setenv("DEFAULT_LLM_MODEL", "gpt-4o-mini")

        settings = make_settings()

        assert settings.free_tier_daily_limit == 3
        assert settings.default_llm_model == "gpt-4o-mini"
