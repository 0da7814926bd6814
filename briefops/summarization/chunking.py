"""Map-reduce summarization for text that does not fit one backend call."""

import logging
import re
from typing import Optional

from briefops.llm import DecodingConfig
from briefops.summarization.gateway import (
    SummarizationGateway,
    SummaryResult,
    SummaryStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_WORDS = 2000

# Reduce passes before the joined partials are cut to fit
MAX_REDUCE_ROUNDS = 3

_WORD = re.compile(r"\S+")


def split_into_chunks(text: str, chunk_word_count: int = DEFAULT_CHUNK_WORDS) -> list[str]:
    """Split text into groups of at most ``chunk_word_count`` words.

    Whitespace between words inside a chunk is kept as it appears in the
    source, so a text shorter than one chunk comes back as ``text.strip()``.

    Raises:
        ValueError: If ``chunk_word_count`` is not positive.
    """
    if chunk_word_count < 1:
        raise ValueError("chunk_word_count must be at least 1")

    words = list(_WORD.finditer(text))
    chunks = []
    for start in range(0, len(words), chunk_word_count):
        group = words[start:start + chunk_word_count]
        chunks.append(text[group[0].start():group[-1].end()])
    return chunks


def split_by_length(chunk: str, max_chars: int) -> list[str]:
    """Cut ``chunk`` into consecutive slices of at most ``max_chars`` characters."""
    return [chunk[start:start + max_chars] for start in range(0, len(chunk), max_chars)]


class ChunkedSummarizer:
    """Summarize each chunk, then summarize the joined partial summaries.

    Args:
        gateway: Gateway used for every backend call.
        chunk_word_count: Maximum words sent in one chunk call.
        decoding: Optional decoding override for both passes.
        max_chars: Upper bound on the characters sent in any one call;
            unbounded when None.
    """

    def __init__(
        self,
        gateway: SummarizationGateway,
        chunk_word_count: int = DEFAULT_CHUNK_WORDS,
        decoding: DecodingConfig | None = None,
        max_chars: Optional[int] = None,
    ):
        if chunk_word_count < 1:
            raise ValueError("chunk_word_count must be at least 1")
        if max_chars is not None and max_chars < 1:
            raise ValueError("max_chars must be at least 1")
        self.gateway = gateway
        self.chunk_word_count = chunk_word_count
        self.decoding = decoding
        self.max_chars = max_chars

    def chunks_for(self, text: str) -> list[str]:
        chunks = split_into_chunks(text, self.chunk_word_count)
        if self.max_chars is None:
            return chunks
        return [piece for chunk in chunks for piece in split_by_length(chunk, self.max_chars)]

    async def summarize_long(self, text: str) -> SummaryResult:
        """Summarize arbitrarily long text in two passes.

        Chunks are summarized sequentially and in order. A failed chunk
        fails the whole operation; chunks that produce no candidate are left
        out of the final pass. Empty input returns ``empty`` without calling
        the backend. When ``max_chars`` is set and the joined partials are
        still too long, they are summarized again in chunks.
        """
        return await self._reduce(text, rounds=0)

    async def _reduce(self, text: str, rounds: int) -> SummaryResult:
        chunks = self.chunks_for(text)
        if not chunks:
            return SummaryResult.empty()

        logger.info(
            "Summarizing long text",
            extra={"chunks": len(chunks), "chunk_word_count": self.chunk_word_count, "round": rounds},
        )

        partials = []
        for index, chunk in enumerate(chunks):
            result = await self.gateway.summarize(chunk, decoding=self.decoding)
            if result.status == SummaryStatus.FAILED:
                logger.error(
                    "Chunk summarization failed, aborting",
                    extra={"chunk_index": index, "chunks": len(chunks)},
                )
                return result
            if result.is_ok:
                partials.append(result.text)

        if not partials:
            return SummaryResult.empty()

        combined = "\n\n".join(partials)
        if self.max_chars is not None and len(combined) > self.max_chars:
            if len(partials) > 1 and rounds + 1 < MAX_REDUCE_ROUNDS:
                return await self._reduce(combined, rounds + 1)
            logger.warning(
                "Partial summaries over budget, truncating",
                extra={"chars": len(combined), "max_chars": self.max_chars},
            )
            combined = combined[: self.max_chars]

        return await self.gateway.summarize(combined, decoding=self.decoding)
