"""Google News top-stories RSS source."""

from __future__ import annotations

import logging

import feedparser
import httpx

from autopress.errors import SourceError
from autopress.models import TopicCandidate
from autopress.sources.base import TrendingSource, strip_html

logger = logging.getLogger(__name__)

_GOOGLE_NEWS_RSS = "https://news.google.com/rss?hl={lang}&gl=US&ceid=US:{lang}"


class GoogleNewsSource(TrendingSource):
    name = "google_news"

    def __init__(self, lang: str = "en", *, timeout: float = 10.0, **kwargs) -> None:
        super().__init__(**kwargs)
        self.lang = lang
        self.timeout = timeout

    def fetch(self) -> list[TopicCandidate]:
        url = _GOOGLE_NEWS_RSS.format(lang=self.lang)

        # Google News answers with a redirect
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
            # Headlines end with " - Publisher"
            if " - " in title:
                title = title.rsplit(" - ", 1)[0].strip()
            if not title:
                continue
            candidates.append(TopicCandidate(title=title, url=entry.get("link") or None))

        logger.info("Google News: %d topics for lang=%s", len(candidates), self.lang)
        return candidates
