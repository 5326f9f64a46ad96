"""Common behaviour of trending-topic source adapters."""

from __future__ import annotations

import logging
import re
from html import unescape

from autopress.errors import SourceError
from autopress.models import TopicCandidate
from autopress.sources.fixtures import fallback_topics

logger = logging.getLogger(__name__)


def strip_html(text: str) -> str:
    """Remove HTML tags and unescape entities."""
    clean = re.sub(r"<[^>]+>", "", text)
    return unescape(clean).strip()


def parse_hot_number(value: str | None) -> float | None:
    """Parse traffic figures like "200K+", "1.5M", "50,000+", "3.2万" into a number."""
    if not value:
        return None
    text = value.strip().replace(",", "")
    match = re.search(r"\d+(?:\.\d+)?", text)
    if not match:
        return None
    number = float(match.group())
    suffix = text[match.end():].strip().upper()
    if suffix.startswith("K"):
        number *= 1_000
    elif suffix.startswith("M"):
        number *= 1_000_000
    elif suffix.startswith("B"):
        number *= 1_000_000_000
    elif "万" in text:
        number *= 10_000
    elif "亿" in text:
        number *= 100_000_000
    return number


class TrendingSource:
    """One external origin of trending topics.

    Subclasses implement ``fetch`` and raise SourceError when the origin is
    unreachable or unparsable. ``collect`` is what the crawl stage calls: it
    never comes back empty-handed because of an outage, it substitutes the
    source's fixture topics instead.
    """

    name: str = "source"

    def __init__(self, *, offline: bool = False, max_items: int = 20) -> None:
        self.offline = offline
        self.max_items = max_items

    def fetch(self) -> list[TopicCandidate]:
        raise NotImplementedError

    def fallback(self) -> list[TopicCandidate]:
        return fallback_topics(self.name)

    def collect(self) -> list[TopicCandidate]:
        if self.offline:
            logger.info("%s: offline mode, using fallback topics", self.name)
            return self.fallback()
        try:
            candidates = self.fetch()
        except SourceError:
            logger.warning("%s unavailable, using fallback topics", self.name, exc_info=True)
            return self.fallback()
        return candidates[: self.max_items]
