"""Durable topic and article store backed by a single JSON file."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import unicodedata
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from autopress.config import Settings
from autopress.errors import PersistenceError, RecordValidationError
from autopress.models import (
    Article,
    ArticleDraft,
    StoreFile,
    StoreStats,
    Topic,
    TopicCandidate,
    utcnow,
)

logger = logging.getLogger(__name__)

_COMPETITION_TIERS = ("low", "medium", "high")
_IMMUTABLE_ARTICLE_FIELDS = frozenset({"id", "slug", "word_count", "created_at"})


def normalize_title(title: str) -> str:
    """Dedup form of a topic title: NFKC, casefolded, whitespace collapsed."""
    return " ".join(unicodedata.normalize("NFKC", title).casefold().split())


def topic_key(title: str, source: str) -> tuple[str, str]:
    return normalize_title(title), source


class ContentStore:
    """Topics and articles persisted together in one JSON document.

    Every mutation runs load-modify-save under one re-entrant lock, and the
    file is replaced atomically, so "insert if absent" and "mark processed /
    published" are atomic within the process.
    """

    def __init__(self, settings: Settings) -> None:
        self._path = Path(settings.store_path)
        self._lock = threading.RLock()
        self._data: StoreFile | None = None

    @property
    def path(self) -> Path:
        return self._path

    # --- file handling ---

    def load(self) -> StoreFile:
        with self._lock:
            if not self._path.exists():
                self._data = StoreFile()
                return self._data
            try:
                raw = self._path.read_text(encoding="utf-8")
                self._data = StoreFile.model_validate_json(raw)
            except OSError as exc:
                raise PersistenceError(f"cannot read store {self._path}") from exc
            except ValidationError as exc:
                raise PersistenceError(f"store file {self._path} is corrupt") from exc
            return self._data

    def _current(self) -> StoreFile:
        if self._data is None:
            return self.load()
        return self._data

    def _save(self, data: StoreFile) -> None:
        payload = data.model_dump_json(indent=2) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"cannot write store {self._path}") from exc

    @contextmanager
    def _mutate(self) -> Iterator[StoreFile]:
        """Yield a working copy; commit it only if the save succeeds."""
        with self._lock:
            working = self._current().model_copy(deep=True)
            yield working
            self._save(working)
            self._data = working

    # --- topics ---

    def insert_topic_if_absent(self, candidate: TopicCandidate, source: str) -> Topic | None:
        """Insert a normalized topic unless (normalized title, source) already exists."""
        title = candidate.title.strip()
        keyword = (candidate.keyword or "").strip() or title
        competition = candidate.competition if candidate.competition in _COMPETITION_TIERS else "medium"
        key = topic_key(title, source)

        with self._lock:
            if any(topic_key(t.title, t.source) == key for t in self._current().topics):
                logger.debug("Topic already stored: %s (%s)", title, source)
                return None
            with self._mutate() as data:
                try:
                    topic = Topic(
                        id=data.next_topic_id,
                        title=title,
                        keyword=keyword,
                        search_volume=candidate.search_volume,
                        competition=competition,
                        source=source,
                        url=candidate.url or None,
                    )
                except ValidationError as exc:
                    raise RecordValidationError(
                        f"invalid topic {title!r} from {source}"
                    ) from exc
                data.topics.append(topic)
                data.next_topic_id += 1
                return topic.model_copy(deep=True)

    def list_unprocessed_topics(self, limit: int) -> list[Topic]:
        """Unprocessed topics by search volume descending (unranked last), then id."""
        with self._lock:
            pending = [t for t in self._current().topics if not t.processed]
            pending.sort(
                key=lambda t: (
                    t.search_volume is None,
                    -(t.search_volume or 0.0),
                    t.id,
                )
            )
            return [t.model_copy(deep=True) for t in pending[:limit]]

    def mark_topic_processed(self, topic_id: int) -> None:
        with self._mutate() as data:
            topic = _find(data.topics, topic_id, "topic")
            topic.processed = True

    def get_topic(self, topic_id: int) -> Topic:
        with self._lock:
            return _find(self._current().topics, topic_id, "topic").model_copy(deep=True)

    def list_topics(self) -> list[Topic]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._current().topics]

    # --- articles ---

    def create_article(self, draft: ArticleDraft) -> Article:
        with self._mutate() as data:
            return _append_article(data, draft).model_copy(deep=True)

    def create_article_for_topic(self, topic_id: int, draft: ArticleDraft) -> Article:
        """Store the article and mark its topic processed in one write.

        A topic that is already processed is refused, so one topic never
        ends up with two articles.
        """
        with self._mutate() as data:
            topic = _find(data.topics, topic_id, "topic")
            if topic.processed:
                raise PersistenceError(f"topic {topic_id} is already processed")
            article = _append_article(data, draft)
            topic.processed = True
            return article.model_copy(deep=True)

    def update_article(self, article_id: int, **fields: Any) -> Article:
        """Apply field updates to one article.

        slug, word_count and the identity fields are fixed; published_at is
        kept from the first publish even if a later update passes a new one.
        """
        frozen = _IMMUTABLE_ARTICLE_FIELDS.intersection(fields)
        if frozen:
            raise RecordValidationError(f"immutable article fields: {sorted(frozen)}")

        with self._mutate() as data:
            index = _index_of(data.articles, article_id, "article")
            current = data.articles[index]
            if current.published_at is not None and "published_at" in fields:
                fields["published_at"] = current.published_at
            merged = current.model_dump()
            merged.update(fields)
            merged["updated_at"] = utcnow()
            try:
                updated = Article.model_validate(merged)
            except ValidationError as exc:
                raise RecordValidationError(f"invalid update for article {article_id}") from exc
            data.articles[index] = updated
            return updated.model_copy(deep=True)

    def list_unpublished_articles(self, limit: int) -> list[Article]:
        """Unpublished articles, oldest first."""
        with self._lock:
            drafts = [a for a in self._current().articles if not a.published]
            drafts.sort(key=lambda a: (a.created_at, a.id))
            return [a.model_copy(deep=True) for a in drafts[:limit]]

    def list_published_articles(self, limit: int) -> list[Article]:
        """Published articles, newest publish first."""
        with self._lock:
            return [a.model_copy(deep=True) for a in self._published()[:limit]]

    def list_related_articles(self, article_id: int, tags: list[str], limit: int) -> list[Article]:
        """Published articles other than article_id sharing at least one tag."""
        if not tags:
            return []
        wanted = set(tags)
        with self._lock:
            related = [
                a
                for a in self._published()
                if a.id != article_id and wanted.intersection(a.tags)
            ]
            return [a.model_copy(deep=True) for a in related[:limit]]

    def _published(self) -> list[Article]:
        published = [a for a in self._current().articles if a.published]
        published.sort(key=lambda a: (a.published_at, a.id), reverse=True)
        return published

    # --- serving-side reads ---

    def get_article(self, article_id: int) -> Article:
        with self._lock:
            return _find(self._current().articles, article_id, "article").model_copy(deep=True)

    def get_article_by_slug(self, slug: str) -> Article | None:
        with self._lock:
            for article in self._current().articles:
                if article.slug == slug:
                    return article.model_copy(deep=True)
        return None

    def list_articles_by_category(self, category: str, limit: int = 20) -> list[Article]:
        with self._lock:
            matches = [a for a in self._published() if a.category == category]
            return [a.model_copy(deep=True) for a in matches[:limit]]

    def list_articles_by_tag(self, tag: str, limit: int = 20) -> list[Article]:
        with self._lock:
            matches = [a for a in self._published() if tag in a.tags]
            return [a.model_copy(deep=True) for a in matches[:limit]]

    def increment_view_count(self, article_id: int) -> None:
        with self._mutate() as data:
            article = _find(data.articles, article_id, "article")
            article.view_count += 1

    def stats(self) -> StoreStats:
        with self._lock:
            data = self._current()
            return StoreStats(
                total_articles=len(data.articles),
                published_articles=sum(1 for a in data.articles if a.published),
                total_views=sum(a.view_count for a in data.articles),
                total_topics=len(data.topics),
                unprocessed_topics=sum(1 for t in data.topics if not t.processed),
            )


def _index_of(records: list, record_id: int, kind: str) -> int:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    raise PersistenceError(f"{kind} {record_id} not found")


def _find(records: list, record_id: int, kind: str):
    return records[_index_of(records, record_id, kind)]


def _append_article(data: StoreFile, draft: ArticleDraft) -> Article:
    if any(a.slug == draft.slug for a in data.articles):
        raise PersistenceError(f"slug already exists: {draft.slug}")
    now = utcnow()
    try:
        article = Article(
            **draft.model_dump(),
            id=data.next_article_id,
            created_at=now,
            updated_at=now,
        )
    except ValidationError as exc:
        raise RecordValidationError(f"invalid article {draft.slug!r}") from exc
    data.articles.append(article)
    data.next_article_id += 1
    return article
