"""Google Trends daily trending-searches RSS source."""

from __future__ import annotations

import logging

import feedparser
import httpx

from autopress.errors import SourceError
from autopress.models import TopicCandidate
from autopress.sources.base import TrendingSource, parse_hot_number, strip_html

logger = logging.getLogger(__name__)

_TRENDS_RSS = "https://trends.google.com/trending/rss?geo={geo}"


def _competition_for(volume: float | None) -> str:
    if volume is None:
        return "medium"
    if volume >= 1_000_000:
        return "high"
    if volume < 10_000:
        return "low"
    return "medium"


class GoogleTrendsSource(TrendingSource):
    name = "google_trends"

    def __init__(self, geo: str = "US", *, timeout: float = 10.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.geo = geo
        self.timeout = timeout

    def fetch(self) -> list[TopicCandidate]:
        url = _TRENDS_RSS.format(geo=self.geo)
        try:
            with httpx.Client(follow_redirects=True, timeout=self.timeout) as client:
                response = client.get(url)
                response.raise_for_status()
                content = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SourceError(self.name, f"request failed: {exc}") from exc

        feed = feedparser.parse(content)
        if feed.bozo and not feed.entries:
            raise SourceError(self.name, f"unparsable feed: {feed.bozo_exception}")

        candidates = []
        for entry in feed.entries:
            title = strip_html(entry.get("title", ""))
            if not title:
                continue
            volume = parse_hot_number(entry.get("ht_approx_traffic"))
            candidates.append(
                TopicCandidate(
                    title=title,
                    keyword=title,
                    search_volume=volume,
                    competition=_competition_for(volume),
                    url=entry.get("ht_news_item_url") or entry.get("link") or None,
                )
            )

        logger.info("Google Trends: %d topics for geo=%s", len(candidates), self.geo)
        return candidates
