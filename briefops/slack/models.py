"""Typed views over Slack API payloads."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SlackFile(BaseModel):
    """File attached to a Slack message."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    name: str = "unknown"
    mimetype: str = ""
    size: Optional[int] = None
    url_private: Optional[str] = None
    url_private_download: Optional[str] = None

    @property
    def download_url(self) -> Optional[str]:
        return self.url_private_download or self.url_private


class SlackMessage(BaseModel):
    """Message from conversations.history or conversations.replies."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ts: str
    user: Optional[str] = None
    text: str = ""
    files: tuple[SlackFile, ...] = ()
    thread_ts: Optional[str] = None

    @property
    def timestamp(self) -> float:
        return float(self.ts)

    @classmethod
    def from_api(cls, payload: dict) -> "SlackMessage":
        """Build from a raw Slack message dict; bot messages fall back to bot_id."""
        return cls(
            ts=payload.get("ts", "0"),
            user=payload.get("user") or payload.get("bot_id"),
            text=payload.get("text") or "",
            files=tuple(SlackFile.model_validate(f) for f in payload.get("files") or []),
            thread_ts=payload.get("thread_ts"),
        )


class FetchPage(BaseModel):
    """One page of a cursor-paginated Slack listing."""

    items: list[SlackMessage] = Field(default_factory=list)
    cursor: Optional[str] = None
    has_more: bool = False
