"""DuckDuckGo news search source."""

from __future__ import annotations

import logging

from duckduckgo_search import DDGS

from autopress.errors import SourceError
from autopress.models import TopicCandidate
from autopress.sources.base import TrendingSource

logger = logging.getLogger(__name__)


class DuckDuckGoSource(TrendingSource):
    """Recent headlines for a fixed list of seed queries.

    The seed query becomes the topic keyword so categorization follows the
    query rather than the headline wording.
    """

    name = "duckduckgo"

    def __init__(
        self,
        queries: list[str],
        *,
        timeout: float = 10.0,
        results_per_query: int = 5,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.queries = queries
        self.timeout = timeout
        self.results_per_query = results_per_query

    def fetch(self) -> list[TopicCandidate]:
        if not self.queries:
            return []

        candidates: list[TopicCandidate] = []
        failures = 0
        for query in self.queries:
            try:
                results = list(
                    DDGS(timeout=int(self.timeout)).news(query, max_results=self.results_per_query)
                )
            except Exception:
                failures += 1
                logger.warning("DuckDuckGo news failed for query=%s", query, exc_info=True)
                continue

            for item in results:
                title = (item.get("title") or "").strip()
                if not title:
                    continue
                candidates.append(
                    TopicCandidate(title=title, keyword=query, url=item.get("url") or None)
                )

        if failures == len(self.queries):
            raise SourceError(self.name, "every query failed")

        logger.info("DuckDuckGo: %d topics for %d queries", len(candidates), len(self.queries))
        return candidates
