"""Custom RSS feed source."""

from __future__ import annotations

import logging
from pathlib import Path

import feedparser
import httpx

from autopress.errors import SourceError
from autopress.models import TopicCandidate
from autopress.sources.base import TrendingSource, strip_html

logger = logging.getLogger(__name__)


def load_feed_urls(feeds_path: str) -> list[str]:
    """Load RSS feed URLs from a text file (one per line, # comments)."""
    path = Path(feeds_path)
    if not path.exists():
        return []
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            urls.append(stripped)
    return urls


class RssFeedsSource(TrendingSource):
    name = "rss"

    def __init__(self, feeds_path: str, *, timeout: float = 10.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.feeds_path = feeds_path
        self.timeout = timeout

    def fetch(self) -> list[TopicCandidate]:
        try:
            feed_urls = load_feed_urls(self.feeds_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceError(self.name, f"cannot read {self.feeds_path}: {exc}") from exc
        if not feed_urls:
            logger.info("RSS: no feeds configured in %s", self.feeds_path)
            return []

        candidates: list[TopicCandidate] = []
        failures = 0
        with httpx.Client(follow_redirects=True, timeout=self.timeout) as client:
            for feed_url in feed_urls:
                try:
                    response = client.get(feed_url)
                    response.raise_for_status()
                except (httpx.HTTPError, httpx.InvalidURL):
                    failures += 1
                    logger.warning("Failed to fetch RSS feed: %s", feed_url, exc_info=True)
                    continue

                feed = feedparser.parse(response.text)
                if feed.bozo and not feed.entries:
                    failures += 1
                    logger.warning("RSS parse error for %s: %s", feed_url, feed.bozo_exception)
                    continue

                count = 0
                for entry in feed.entries:
                    title = strip_html(entry.get("title", ""))
                    if not title:
                        continue
                    candidates.append(TopicCandidate(title=title, url=entry.get("link") or None))
                    count += 1
                logger.info("RSS %s: %d items", feed_url, count)

        if failures == len(feed_urls):
            raise SourceError(self.name, "every feed failed")
        return candidates
