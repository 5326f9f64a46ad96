"""Pydantic data models for the entire pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, model_validator

Category = Literal["tech", "finance", "lifestyle", "education", "general"]
Competition = Literal["low", "medium", "high"]

MAX_TAGS = 5
MAX_KEYWORDS = 10
META_TITLE_CHARS = 60
META_DESCRIPTION_CHARS = 160


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Topics ---


class TopicCandidate(BaseModel):
    """Raw item returned by a source adapter, before normalization."""

    title: str
    keyword: str | None = None
    search_volume: float | None = None
    competition: str | None = None
    url: str | None = None


class Topic(BaseModel):
    id: int
    title: str = Field(min_length=1)
    keyword: str = Field(min_length=1)
    search_volume: float | None = None
    competition: Competition = "medium"
    source: str
    url: str | None = None
    processed: bool = False
    created_at: datetime = Field(default_factory=utcnow)


# --- Articles ---


class ArticleDraft(BaseModel):
    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    content: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    category: Category = "general"
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    keywords: list[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    meta_title: str = Field(default="", max_length=META_TITLE_CHARS)
    meta_description: str = Field(default="", max_length=META_DESCRIPTION_CHARS)
    image_url: str | None = None
    source_url: str | None = None
    source_type: str | None = None
    word_count: int = Field(default=0, ge=0)


class Article(ArticleDraft):
    id: int
    view_count: int = Field(default=0, ge=0)
    published: bool = False
    published_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_publish_state(self) -> Article:
        if self.published != (self.published_at is not None):
            raise ValueError("published and published_at must be set together")
        return self


# --- Store file ---


class StoreFile(BaseModel):
    topics: list[Topic] = Field(default_factory=list)
    articles: list[Article] = Field(default_factory=list)
    next_topic_id: int = 1
    next_article_id: int = 1


class StoreStats(BaseModel):
    total_articles: int = 0
    published_articles: int = 0
    total_views: int = 0
    total_topics: int = 0
    unprocessed_topics: int = 0


# --- Stage runs ---


class StageReport(BaseModel):
    stage: str
    selected: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
