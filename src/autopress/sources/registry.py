"""The statically configured, ordered list of sources the crawl stage visits."""

from __future__ import annotations

from autopress.config import Settings
from autopress.sources.base import TrendingSource
from autopress.sources.duckduckgo import DuckDuckGoSource
from autopress.sources.google_news import GoogleNewsSource
from autopress.sources.google_trends import GoogleTrendsSource
from autopress.sources.rss_feeds import RssFeedsSource


def build_sources(settings: Settings) -> list[TrendingSource]:
    common = {"offline": settings.sources_offline, "max_items": settings.source_max_items}
    timeout = settings.source_timeout_seconds
    return [
        GoogleTrendsSource(settings.trends_geo, timeout=timeout, **common),
        GoogleNewsSource(settings.news_language, timeout=timeout, **common),
        DuckDuckGoSource(settings.ddg_queries, timeout=timeout, **common),
        RssFeedsSource(settings.feeds_path, timeout=timeout, **common),
    ]
