"""YouTube transcript retrieval."""

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from briefops.slack.classifier import extract_youtube_video_id

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPT_TIMEOUT = 15.0


class InvalidVideoUrlError(Exception):
    """The URL does not contain a YouTube video id."""

    pass


class NoTranscriptAvailableError(Exception):
    """The video has no transcript we can read."""

    def __init__(self, video_id: str, detail: str = ""):
        self.video_id = video_id
        super().__init__(f"No transcript available for video {video_id}{': ' + detail if detail else ''}")


class TranscriptSegment(BaseModel):
    text: str
    start: float = 0.0


def transcript_object_key(video_id: str) -> str:
    return f"youtube_transcript_{video_id}.txt"


def join_segments(segments: list[TranscriptSegment]) -> str:
    return " ".join(s.text.strip() for s in segments if s.text.strip())


class TranscriptSource:
    """Fetches transcripts through youtube-transcript-api.

    Args:
        api: Preconfigured ``YouTubeTranscriptApi`` (e.g. with a proxy config).
        timeout: Fetch timeout in seconds.
    """

    def __init__(
        self,
        api: Optional[YouTubeTranscriptApi] = None,
        timeout: float = DEFAULT_TRANSCRIPT_TIMEOUT,
    ):
        self.api = api or YouTubeTranscriptApi()
        self.timeout = timeout

    def _fetch(self, video_id: str) -> list[TranscriptSegment]:
        fetched = self.api.fetch(video_id)
        return [TranscriptSegment(text=s.text, start=s.start) for s in fetched]

    async def fetch_transcript(self, video_id: str) -> list[TranscriptSegment]:
        """Return the transcript as ordered segments.

        Raises:
            NoTranscriptAvailableError: Transcript missing, disabled, empty or
                the request failed or timed out
        """
        try:
            segments = await asyncio.wait_for(
                asyncio.to_thread(self._fetch, video_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Transcript fetch timed out", extra={"video_id": video_id})
            raise NoTranscriptAvailableError(video_id, "timed out") from e
        except CouldNotRetrieveTranscript as e:
            logger.warning(
                f"Could not retrieve transcript: {type(e).__name__}",
                extra={"video_id": video_id},
            )
            raise NoTranscriptAvailableError(video_id) from e

        if not segments:
            raise NoTranscriptAvailableError(video_id, "empty transcript")

        logger.info(
            "Fetched transcript",
            extra={"video_id": video_id, "segments": len(segments)},
        )
        return segments

    async def fetch_transcript_text(self, url: str) -> tuple[str, str]:
        """Resolve a video URL and return ``(video_id, transcript_text)``.

        Raises:
            InvalidVideoUrlError: No video id in the URL
            NoTranscriptAvailableError: See ``fetch_transcript``
        """
        video_id = extract_youtube_video_id(url)
        if not video_id:
            raise InvalidVideoUrlError(f"Invalid YouTube URL: {url}")
        segments = await self.fetch_transcript(video_id)
        return video_id, join_segments(segments)
