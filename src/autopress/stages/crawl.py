"""Crawl stage: fan out over trending sources and persist new topics."""

from __future__ import annotations

import logging

from autopress.models import StageReport, TopicCandidate
from autopress.ratelimit import MinIntervalLimiter
from autopress.sources.base import TrendingSource
from autopress.store import ContentStore

logger = logging.getLogger(__name__)


class CrawlStage:
    def __init__(
        self,
        store: ContentStore,
        sources: list[TrendingSource],
        *,
        limiter: MinIntervalLimiter | None = None,
    ) -> None:
        self._store = store
        self._sources = sources
        self._limiter = limiter

    def _save(self, source: TrendingSource, candidates: list[TopicCandidate]) -> int:
        saved = 0
        for candidate in candidates:
            if not candidate.title.strip():
                continue
            if self._store.insert_topic_if_absent(candidate, source.name) is not None:
                saved += 1
        return saved

    def run(self) -> StageReport:
        """Visit every source in order; one failing source never stops the rest."""
        logger.info("Starting trending topics crawl over %d sources", len(self._sources))
        report = StageReport(stage="crawl", selected=len(self._sources))

        for source in self._sources:
            if self._limiter is not None:
                self._limiter.wait()
            try:
                logger.info("Crawling %s...", source.name)
                candidates = source.collect()
                saved = self._save(source, candidates)
                logger.info(
                    "Saved %d new topics from %s (%d candidates)",
                    saved,
                    source.name,
                    len(candidates),
                )
                report.succeeded += 1
            except Exception:
                logger.warning("Failed to crawl %s", source.name, exc_info=True)
                report.failed += 1

        logger.info(
            "Crawl completed: %d sources ok, %d failed", report.succeeded, report.failed
        )
        return report
