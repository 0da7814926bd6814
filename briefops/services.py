"""Wiring of the summarization components.

``build_services`` is the only place that turns ``Settings`` into component
configuration. Handlers receive the resulting ``Services`` and never read
settings themselves.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from briefops.config import Settings
from briefops.db import PooledUsageStore
from briefops.documents import ObjectStorage, TranscriptSource
from briefops.llm import UnifiedChatClient, detect_provider
from briefops.summarization import (
    ChunkedSummarizer,
    IngestionService,
    SearchSummarizer,
    SummarizationGateway,
    SummaryPipeline,
    UsageLimiter,
)
from briefops.summarization.usage import UsageBackend
from briefops.web import GoogleSearchClient, WebFetcher

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Long-lived components shared by every Slack handler."""
    pipeline: SummaryPipeline
    ingestion: IngestionService
    limiter: UsageLimiter
    search: Optional[SearchSummarizer]
    model_name: str


def build_services(
    settings: Settings,
    usage_store: Optional[UsageBackend] = None,
    storage: Optional[ObjectStorage] = None,
) -> Services:
    """Build all components from settings.

    Args:
        settings: Process settings.
        usage_store: Usage backend; defaults to the pooled PostgreSQL store.
        storage: Object storage client; defaults to GCS.
    """
    provider = detect_provider(settings.default_llm_model)
    llm = UnifiedChatClient(
        model=settings.default_llm_model,
        provider=provider,
        decoding=settings.decoding_config(),
        timeout_seconds=settings.llm_timeout_seconds,
        api_key=settings.api_key_for(provider),
    )
    gateway = SummarizationGateway(llm, decoding=settings.decoding_config())
    search_limits = settings.search_limits()
    chunked = ChunkedSummarizer(
        gateway,
        chunk_word_count=settings.transcript_chunk_words,
        max_chars=search_limits.max_total_length,
    )
    limiter = UsageLimiter(usage_store or PooledUsageStore(), settings.usage_limits())

    web_fetcher = WebFetcher(
        timeout=settings.web_fetch_timeout_seconds,
        max_length=search_limits.max_content_per_source,
    )
    transcripts = TranscriptSource(timeout=settings.io_timeout_seconds)
    storage = storage or ObjectStorage(timeout=settings.io_timeout_seconds)

    pipeline = SummaryPipeline(
        gateway=gateway,
        chunked=chunked,
        limiter=limiter,
        web_fetcher=web_fetcher,
        transcripts=transcripts,
        storage=storage,
        bucket=settings.gcs_bucket_name,
        bot_token=settings.slack_bot_token,
        download_timeout=settings.io_timeout_seconds,
        max_input_chars=search_limits.max_total_length,
    )
    ingestion = IngestionService(
        chunked=chunked,
        storage=storage,
        bucket=settings.gcs_bucket_name,
        transcripts=transcripts,
        bot_token=settings.slack_bot_token,
        download_timeout=settings.io_timeout_seconds,
    )

    search = None
    if settings.google_search_api_key and settings.google_search_engine_id:
        search = SearchSummarizer(
            GoogleSearchClient(settings.google_search_api_key, settings.google_search_engine_id),
            web_fetcher,
            gateway,
            search_limits,
        )
    else:
        logger.warning("Google Search is not configured; /briefops-search is disabled")

    logger.info(
        "Services built",
        extra={
            "model": llm.model,
            "provider": provider.value,
            "daily_limit": limiter.limits.daily_limit,
            "max_days": limiter.limits.max_days,
        },
    )
    return Services(
        pipeline=pipeline,
        ingestion=ingestion,
        limiter=limiter,
        search=search,
        model_name=llm.model,
    )
