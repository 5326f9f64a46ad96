"""Publish stage: enrich unpublished articles with related links and publish them."""

from __future__ import annotations

import logging
from datetime import datetime
from html import escape
from typing import Callable

from autopress.config import Settings
from autopress.generator import CONTENT_END_MARKER
from autopress.models import Article, StageReport, utcnow
from autopress.ratelimit import MinIntervalLimiter
from autopress.store import ContentStore

logger = logging.getLogger(__name__)


def build_related_block(related: list[Article]) -> str:
    items = "\n".join(
        f'    <li><a href="/article/{escape(r.slug)}">{escape(r.title)}</a></li>'
        for r in related
    )
    return (
        '<div class="related-articles">\n'
        "  <h3>Related reading</h3>\n"
        "  <ul>\n"
        f"{items}\n"
        "  </ul>\n"
        "</div>\n"
    )


def insert_related_block(content: str, related: list[Article]) -> str:
    """Insert the related-reading block before the closing content marker."""
    if not related:
        return content
    block = build_related_block(related)
    if CONTENT_END_MARKER in content:
        return content.replace(CONTENT_END_MARKER, block + CONTENT_END_MARKER, 1)
    return content + "\n" + block


class PublishStage:
    def __init__(
        self,
        store: ContentStore,
        settings: Settings,
        *,
        limiter: MinIntervalLimiter | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._batch_size = settings.publish_batch_size
        self._related_limit = settings.related_links_limit
        self._limiter = limiter or MinIntervalLimiter(settings.publish_delay_seconds)
        self._clock = clock

    def add_internal_links(self, article: Article) -> str:
        related = self._store.list_related_articles(article.id, article.tags, self._related_limit)
        return insert_related_block(article.content, related)

    def publish_scheduled(self) -> StageReport:
        logger.info("Checking for scheduled articles to publish...")
        articles = self._store.list_unpublished_articles(self._batch_size)
        report = StageReport(stage="publish", selected=len(articles))

        if not articles:
            logger.info("No articles to publish")
            return report

        for article in articles:
            self._limiter.wait()
            try:
                logger.info("Publishing article: %s", article.title)
                content = self.add_internal_links(article)
                self._store.update_article(
                    article.id,
                    content=content,
                    published=True,
                    published_at=self._clock(),
                )
                logger.info("Article published: %s", article.slug)
                report.succeeded += 1
            except Exception:
                logger.warning("Failed to publish article %s", article.id, exc_info=True)
                report.failed += 1

        logger.info("Published %d of %d articles", report.succeeded, len(articles))
        return report
