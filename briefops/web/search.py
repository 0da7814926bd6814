"""Google Programmable Search (Custom Search JSON API) client."""

import logging

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
DEFAULT_TIMEOUT = 10.0
# The API rejects num > 10
MAX_RESULTS_PER_REQUEST = 10


class WebSearchError(Exception):
    """The search API call failed or is not configured."""

    pass


class SearchResult(BaseModel):
    title: str = ""
    link: str = ""
    snippet: str = ""


class GoogleSearchClient:
    """Google Custom Search client.

    Args:
        api_key: Google API key with Custom Search enabled.
        engine_id: Programmable Search Engine id (``cx``).
        timeout: Request timeout in seconds.
    """

    def __init__(self, api_key: str, engine_id: str, timeout: float = DEFAULT_TIMEOUT):
        if not api_key or not engine_id:
            raise WebSearchError(
                "Google Search API key and engine id are required. "
                "Set GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID in your environment."
            )
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout

    async def search(self, query: str, num_results: int = 7) -> list[SearchResult]:
        """Run a web search and return up to ``num_results`` results."""
        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": max(1, min(num_results, MAX_RESULTS_PER_REQUEST)),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(SEARCH_ENDPOINT, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error performing Google Search: {e}", extra={"query": query})
            raise WebSearchError(f"Web search failed: {e}") from e

        items = data.get("items") or []
        results = [SearchResult.model_validate(item) for item in items[:num_results]]
        logger.info("Search completed", extra={"query": query, "results": len(results)})
        return results
