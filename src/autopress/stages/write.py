"""Write stage: turn a bounded batch of unprocessed topics into articles."""

from __future__ import annotations

import logging

from autopress.config import Settings
from autopress.generator import ContentGenerator
from autopress.models import StageReport
from autopress.ratelimit import MinIntervalLimiter
from autopress.store import ContentStore

logger = logging.getLogger(__name__)


class WriteStage:
    def __init__(
        self,
        store: ContentStore,
        generator: ContentGenerator,
        settings: Settings,
        *,
        limiter: MinIntervalLimiter | None = None,
    ) -> None:
        self._store = store
        self._generator = generator
        self._batch_size = settings.write_batch_size
        self._limiter = limiter or MinIntervalLimiter(settings.write_delay_seconds)

    def run(self) -> StageReport:
        """Generate one article per topic, sequentially.

        The article is stored and its topic marked processed in one store
        write; any failure leaves the topic unprocessed for the next run.
        """
        logger.info("Starting AI writing process...")
        topics = self._store.list_unprocessed_topics(self._batch_size)
        logger.info("Found %d unprocessed topics", len(topics))
        report = StageReport(stage="write", selected=len(topics))

        for topic in topics:
            self._limiter.wait()
            try:
                logger.info("Generating article for: %s", topic.title)
                draft = self._generator.generate(topic)
                saved = self._store.create_article_for_topic(topic.id, draft)
                logger.info("Article saved: %s", saved.slug)
                report.succeeded += 1
            except Exception:
                logger.warning(
                    "Failed to generate article for %s", topic.title, exc_info=True
                )
                report.failed += 1

        logger.info(
            "AI writing completed: %d written, %d failed", report.succeeded, report.failed
        )
        return report
