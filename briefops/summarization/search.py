"""Web search, optionally summarized across the top results."""

import logging
from functools import partial

from briefops.config import SearchLimits
from briefops.summarization.aggregator import AggregationResult, ContentSource, SourceRef, aggregate
from briefops.summarization.gateway import SummarizationGateway, SummaryStatus
from briefops.summarization.replies import Reply
from briefops.web import GoogleSearchClient, SearchResult, WebFetcher

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "Could not fetch content from the top results to summarize."
SUMMARY_FAILED_MESSAGE = "An error occurred during summarization."


def search_segment(ref: SourceRef, text: str) -> str:
    """Frame one source's text for the combined search payload."""
    return f"\n\nTitle: {ref.title}\n{text}"


def format_results(query: str, results: list[SearchResult]) -> str:
    """Numbered result list: title, snippet and link."""
    if not results:
        return f"No results found for *{query}*."

    text = f"Here are the top results for *{query}*:\n"
    for index, item in enumerate(results, start=1):
        text += f"\n{index}. *{item.title}*\n{item.snippet}\n<{item.link}>\n"
    return text


def format_search_summary(query: str, summary: str, aggregation: AggregationResult) -> str:
    """Summary with truncation notice, stats, failed sources and citations."""
    included = aggregation.included_sources
    failed = aggregation.failed_sources

    notice = ""
    if aggregation.truncated:
        notice = (
            f"\n\n*Note:* Only {len(included)} sources could be included "
            "due to content length limitations."
        )

    stats = f"*Search Summary Stats:*\n- Sources Used: {len(included)}\n- Failed Sources: {len(failed)}"
    if failed:
        stats += "\n- Failed Sources:\n" + "\n".join(ref.to_slack_link() for ref in failed)

    cited = "\n".join(ref.to_slack_link() for ref in included)
    return f"*Summary for:* {query}\n\n{summary}{notice}\n\n{stats}\n\n*Sources Cited:*\n{cited}"


class SearchSummarizer:
    """Search the web and summarize the top pages in one backend call.

    Args:
        search_client: Web search API client.
        web_fetcher: Fetches each result page.
        gateway: Summarizer for the combined payload.
        limits: Result count and content budget.
    """

    def __init__(
        self,
        search_client: GoogleSearchClient,
        web_fetcher: WebFetcher,
        gateway: SummarizationGateway,
        limits: SearchLimits,
    ):
        self.search_client = search_client
        self.web_fetcher = web_fetcher
        self.gateway = gateway
        self.limits = limits

    async def search(self, query: str) -> list[SearchResult]:
        return await self.search_client.search(query, self.limits.max_results)

    def sources_for(self, results: list[SearchResult]) -> list[ContentSource]:
        return [
            ContentSource(
                title=item.title or item.link,
                url=item.link,
                fetch=partial(self.web_fetcher.fetch_text, item.link, self.limits.max_content_per_source),
            )
            for item in results
            if item.link
        ]

    async def summarize_results(self, query: str, results: list[SearchResult]) -> Reply:
        """Aggregate result pages within budget and summarize them.

        Nothing is sent to the backend when no page yielded text.
        """
        aggregation = await aggregate(
            self.sources_for(results),
            max_sources=self.limits.max_sources,
            max_total_length=self.limits.max_total_length,
            per_source_length=self.limits.max_content_per_source,
            formatter=search_segment,
        )
        logger.info(
            "Search results aggregated",
            extra={
                "query": query,
                "included": len(aggregation.included_sources),
                "failed": len(aggregation.failed_sources),
                "truncated": aggregation.truncated,
            },
        )

        if aggregation.is_empty:
            return Reply(NO_CONTENT_MESSAGE)

        result = await self.gateway.summarize(aggregation.combined_text)
        if result.status == SummaryStatus.FAILED:
            return Reply(SUMMARY_FAILED_MESSAGE)
        if not result.is_ok:
            return Reply(result.render())

        return Reply(
            format_search_summary(query, result.text, aggregation),
            summarized=True,
            unfurl=False,
        )
