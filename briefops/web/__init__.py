"""Web page fetching and web search."""

from briefops.web.fetcher import WebFetcher, WebFetchError, html_to_text
from briefops.web.search import GoogleSearchClient, SearchResult, WebSearchError

__all__ = [
    "WebFetcher",
    "WebFetchError",
    "html_to_text",
    "GoogleSearchClient",
    "SearchResult",
    "WebSearchError",
]
