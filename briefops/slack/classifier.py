"""Decide what a thread is about: an attached file, a YouTube video or a link.

The scan is a small state machine over the messages in the order given.
Per message the precedence is file, then video, then generic URL. A file or
a video ends the scan. A generic URL is remembered (first one wins) and the
scan moves on, since a later file or video still takes precedence.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from briefops.slack.models import SlackFile, SlackMessage

ACCEPTED_FILE_MIME_PREFIXES = ("application/pdf", "image/", "application/")

YOUTUBE_URL_PATTERN = re.compile(
    r"https?://(?:www\.|m\.)?(?:youtube\.com|youtu\.be)/[^\s<>|]+",
    re.IGNORECASE,
)
YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?|shorts)/|.*[?&]v=)|youtu\.be/)"
    r"([a-zA-Z0-9_-]{11})"
)
URL_PATTERN = re.compile(r"https?://[^\s<>|]+", re.IGNORECASE)


class ScanState(str, Enum):
    SCANNING = "scanning"
    FOUND_FILE = "found_file"
    FOUND_VIDEO = "found_video"


@dataclass(frozen=True)
class ClassifiedContent:
    """At most one of each kind of content found in a message list."""
    file: Optional[SlackFile] = None
    video_url: Optional[str] = None
    url: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.file is None and self.video_url is None and self.url is None


def is_accepted_file(file: SlackFile) -> bool:
    return file.mimetype.startswith(ACCEPTED_FILE_MIME_PREFIXES)


def find_youtube_url(text: str) -> Optional[str]:
    match = YOUTUBE_URL_PATTERN.search(text or "")
    return match.group(0) if match else None


def find_url(text: str) -> Optional[str]:
    match = URL_PATTERN.search(text or "")
    return match.group(0) if match else None


def extract_youtube_video_id(url: str) -> Optional[str]:
    """Return the 11 character video id from a YouTube URL, or None."""
    match = YOUTUBE_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def classify_messages(messages: Iterable[SlackMessage]) -> ClassifiedContent:
    """Scan messages in order and pick the content to summarize.

    Example:
        A link in message 1 and a YouTube link in message 2 give
        ``video_url`` from message 2 and ``url`` from message 1.
    """
    state = ScanState.SCANNING
    file: Optional[SlackFile] = None
    video_url: Optional[str] = None
    url: Optional[str] = None

    for message in messages:
        if state != ScanState.SCANNING:
            break

        accepted = next((f for f in message.files if is_accepted_file(f)), None)
        if accepted is not None:
            file = accepted
            state = ScanState.FOUND_FILE
            continue

        found_video = find_youtube_url(message.text)
        if found_video:
            video_url = found_video
            state = ScanState.FOUND_VIDEO
            continue

        if url is None:
            url = find_url(message.text)

    return ClassifiedContent(file=file, video_url=video_url, url=url)
