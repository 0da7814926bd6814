"""Content aggregation and summarization pipeline."""

from briefops.summarization.aggregator import (
    AggregationResult,
    ContentSource,
    SourceRef,
    aggregate,
)
from briefops.summarization.chunking import ChunkedSummarizer, split_into_chunks
from briefops.summarization.gateway import (
    SummarizationGateway,
    SummaryRequest,
    SummaryResult,
    SummaryStatus,
)
from briefops.summarization.ingest import IngestionOutcome, IngestionService
from briefops.summarization.pipeline import SummaryPipeline
from briefops.summarization.replies import Reply
from briefops.summarization.search import SearchSummarizer
from briefops.summarization.usage import UsageDecision, UsageLimiter

__all__ = [
    # Aggregation
    "aggregate",
    "AggregationResult",
    "ContentSource",
    "SourceRef",
    # Chunking
    "ChunkedSummarizer",
    "split_into_chunks",
    # Gateway
    "SummarizationGateway",
    "SummaryRequest",
    "SummaryResult",
    "SummaryStatus",
    # Usage
    "UsageDecision",
    "UsageLimiter",
    # Flows
    "SummaryPipeline",
    "IngestionService",
    "IngestionOutcome",
    "SearchSummarizer",
    "Reply",
]
