"""Web page fetcher that reduces HTML to readable text."""

import ipaddress
import logging
import re
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = "briefops/1.0"
DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_LENGTH = 5000

_ALLOWED_SCHEMES = {"http", "https"}
_STRIPPED_TAGS = ["script", "style", "noscript", "meta", "link", "header", "footer", "nav"]
_CONTENT_TAGS = ["h1", "h2", "h3", "p"]
_WHITESPACE = re.compile(r"\s+")


class WebFetchError(Exception):
    """A web page could not be fetched or parsed."""

    pass


def _validate_url(url: str) -> Optional[str]:
    """Return an error message for URLs we refuse to fetch, else None."""
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        return f"Blocked URL scheme: {parsed.scheme or 'none'}. Only http/https allowed."

    hostname = parsed.hostname
    if not hostname:
        return "URL has no hostname"
    if hostname == "localhost":
        return "Blocked: localhost access not allowed"

    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return None
    if ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_unspecified:
        return f"Blocked: private/internal address ({ip})"
    return None


def html_to_text(html: str, max_length: Optional[int] = DEFAULT_MAX_LENGTH) -> str:
    """Keep heading and paragraph text, collapse whitespace, truncate.

    Example:
        >>> html_to_text("<nav>menu</nav><h1>Title</h1><p>Body  text</p>")
        'Title Body text'
    """
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(_STRIPPED_TAGS):
        element.decompose()

    content = "".join(el.get_text() + "\n" for el in soup.find_all(_CONTENT_TAGS))
    cleaned = _WHITESPACE.sub(" ", content).strip()
    return cleaned if max_length is None else cleaned[:max_length]


class WebFetcher:
    """Fetch pages over HTTP(S) and extract their readable text.

    Args:
        timeout: Per-request timeout in seconds.
        max_length: Maximum characters returned per page.
        user_agent: User-Agent header sent with each request.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_length: int = DEFAULT_MAX_LENGTH,
        user_agent: str = USER_AGENT,
    ):
        self.timeout = timeout
        self.max_length = max_length
        self.user_agent = user_agent

    async def fetch_html(self, url: str) -> str:
        """GET a URL and return the body.

        Raises:
            WebFetchError: Blocked URL, transport error or non-2xx status
        """
        error = _validate_url(url)
        if error:
            raise WebFetchError(error)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers={"User-Agent": self.user_agent})
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Error fetching web page content from {url}: {e}")
            raise WebFetchError(f"Fetch failed: {e}") from e

        return response.text

    async def fetch_text(self, url: str, max_length: Optional[int] = None) -> str:
        """Fetch a page and return its cleaned heading/paragraph text."""
        html = await self.fetch_html(url)
        text = html_to_text(html, max_length or self.max_length)
        logger.debug("Fetched web page", extra={"url": url, "chars": len(text)})
        return text
