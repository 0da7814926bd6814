"""Budgeted multi-source aggregation.

Concatenates text from several independent sources into one summarization
payload while keeping it under the model's input budget. Sources are
fetched one at a time, in order; one failing source never stops the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

FetchContentFn = Callable[[], Awaitable[str]]
SegmentFormatter = Callable[["SourceRef", str], str]


@dataclass(frozen=True)
class SourceRef:
    """Identifies a source in the aggregation report."""
    title: str
    url: str = ""

    def to_slack_link(self) -> str:
        """Render as Slack link markup, or the bare title when there is no URL."""
        if not self.url:
            return self.title
        return f"<{self.url}|{self.title}>"


@dataclass
class ContentSource:
    """A titled source whose text is produced lazily by ``fetch``."""
    title: str
    fetch: FetchContentFn
    url: str = ""

    @property
    def ref(self) -> SourceRef:
        return SourceRef(title=self.title, url=self.url)


@dataclass
class AggregationResult:
    """What made it into the payload and what did not.

    Attributes:
        combined_text: Concatenated segments, never longer than the budget
        included_sources: Sources whose text is in ``combined_text``, in input order
        failed_sources: Sources whose fetch raised
        excluded_sources: Sources that returned no text or did not fit the budget
        truncated: True when aggregation stopped because of the length budget
    """
    combined_text: str = ""
    included_sources: list[SourceRef] = field(default_factory=list)
    failed_sources: list[SourceRef] = field(default_factory=list)
    excluded_sources: list[SourceRef] = field(default_factory=list)
    truncated: bool = False

    @property
    def is_empty(self) -> bool:
        """No source contributed text; callers must not summarize."""
        return not self.included_sources


async def aggregate(
    sources: list[ContentSource],
    max_sources: int,
    max_total_length: int,
    per_source_length: int,
    formatter: Optional[SegmentFormatter] = None,
) -> AggregationResult:
    """Fetch sources in order and concatenate them within budget.

    Each source's text is cut to ``per_source_length`` characters and then
    passed through ``formatter`` (if given); the formatted segment is what
    counts toward ``max_total_length``. A segment that would push the total
    over budget is not included, and aggregation stops with
    ``truncated=True``. Aggregation also stops once ``max_sources`` sources
    are included. Fetch errors are recorded in ``failed_sources``.

    Args:
        sources: Candidate sources, in priority order
        max_sources: Maximum number of sources to include
        max_total_length: Maximum length of ``combined_text``
        per_source_length: Maximum characters taken from one source
        formatter: Optional ``(ref, text) -> segment`` framing function

    Returns:
        AggregationResult; this function does not raise for source errors.
    """
    result = AggregationResult()
    total_length = 0
    parts: list[str] = []

    for source in sources:
        if len(result.included_sources) >= max_sources:
            break

        try:
            text = await source.fetch()
        except Exception as e:
            logger.warning(
                f"Failed to fetch source {source.title}: {e}",
                extra={"source_url": source.url},
            )
            result.failed_sources.append(source.ref)
            continue

        if not text:
            result.excluded_sources.append(source.ref)
            continue

        text = text[:per_source_length]
        segment = formatter(source.ref, text) if formatter else text

        if total_length + len(segment) > max_total_length:
            logger.info(
                "Content budget reached",
                extra={
                    "included": len(result.included_sources),
                    "total_length": total_length,
                    "max_total_length": max_total_length,
                },
            )
            result.excluded_sources.append(source.ref)
            result.truncated = True
            break

        parts.append(segment)
        total_length += len(segment)
        result.included_sources.append(source.ref)

    result.combined_text = "".join(parts)
    return result
