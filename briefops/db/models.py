"""Pydantic models for database records.

These are data transfer objects, not ORM models. SQL operations live in the
store modules.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class UsageRecord(BaseModel):
    """Per-user daily summary counter.

    One row per user. The row is reset when the first use of a new day is
    committed; rows from earlier days are never deleted.
    """

    user_id: str = Field(description="Slack user ID")
    date_key: str = Field(description="Calendar day (UTC) the count belongs to, YYYY-MM-DD")
    count: int = Field(default=0, ge=0, description="Summaries committed on date_key")


class IngestionRecord(BaseModel):
    """A document or video transcript ingested as grounding material."""

    id: int = Field(description="Row identifier")
    kind: Literal["document", "youtube"] = Field(description="Ingested content type")
    source_id: str = Field(description="Slack file ID or YouTube video ID")
    name: str = Field(description="File name or video URL")
    source_url: Optional[str] = Field(default=None, description="Locator the user supplied")
    storage_uri: Optional[str] = Field(default=None, description="Object storage locator (gs://...)")
    summary: Optional[str] = Field(default=None, description="Summary once generated")
    created_at: datetime = Field(description="When the ingestion was recorded")
