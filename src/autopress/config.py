"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    model_id: str = "gemini-2.5-flash"
    backend_timeout_seconds: float = 60.0
    backend_max_retries: int = 3
    backend_min_interval_seconds: float = 2.0
    backend_temperature: float = 0.7

    store_path: str = "data/store.json"
    sitemap_path: str = "public/sitemap.xml"
    site_url: str = "http://localhost:3000"
    site_name: str = "Autopress"

    write_batch_size: int = 10
    publish_batch_size: int = 5
    related_links_limit: int = 3
    sitemap_limit: int = 1000
    write_delay_seconds: float = 2.0
    publish_delay_seconds: float = 1.0
    min_word_count: int = 1500
    max_word_count: int = 3000

    source_timeout_seconds: float = 10.0
    source_max_items: int = 20
    sources_offline: bool = False
    trends_geo: str = "US"
    news_language: str = "en"
    ddg_queries: list[str] = field(
        default_factory=lambda: ["artificial intelligence", "personal finance", "productivity"]
    )
    feeds_path: str = "data/feeds.txt"

    indexer_timeout_seconds: float = 10.0
    google_search_console_url: str = ""
    bing_submit_url: str = ""
    indexnow_key: str = ""

    enable_auto_generation: bool = False
    crawl_interval: str = "4h"
    write_interval: str = "6h"
    publish_interval: str = "1h"
    seo_interval: str = "1d"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        queries_raw = os.environ.get(
            "DDG_QUERIES", "artificial intelligence,personal finance,productivity"
        )
        return cls(
            gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
            model_id=os.environ.get("GEMINI_MODEL_ID", "gemini-2.5-flash"),
            backend_timeout_seconds=float(os.environ.get("BACKEND_TIMEOUT_SECONDS", "60")),
            backend_max_retries=int(os.environ.get("BACKEND_MAX_RETRIES", "3")),
            backend_min_interval_seconds=float(
                os.environ.get("BACKEND_MIN_INTERVAL_SECONDS", "2.0")
            ),
            backend_temperature=float(os.environ.get("BACKEND_TEMPERATURE", "0.7")),
            store_path=os.environ.get("STORE_PATH", "data/store.json"),
            sitemap_path=os.environ.get("SITEMAP_PATH", "public/sitemap.xml"),
            site_url=os.environ.get("SITE_URL", "http://localhost:3000").rstrip("/"),
            site_name=os.environ.get("SITE_NAME", "Autopress"),
            write_batch_size=int(os.environ.get("WRITE_BATCH_SIZE", "10")),
            publish_batch_size=int(os.environ.get("PUBLISH_BATCH_SIZE", "5")),
            related_links_limit=int(os.environ.get("RELATED_LINKS_LIMIT", "3")),
            sitemap_limit=int(os.environ.get("SITEMAP_LIMIT", "1000")),
            write_delay_seconds=float(os.environ.get("WRITE_DELAY_SECONDS", "2.0")),
            publish_delay_seconds=float(os.environ.get("PUBLISH_DELAY_SECONDS", "1.0")),
            min_word_count=int(os.environ.get("MIN_WORD_COUNT", "1500")),
            max_word_count=int(os.environ.get("MAX_WORD_COUNT", "3000")),
            source_timeout_seconds=float(os.environ.get("SOURCE_TIMEOUT_SECONDS", "10")),
            source_max_items=int(os.environ.get("SOURCE_MAX_ITEMS", "20")),
            sources_offline=_env_bool("SOURCES_OFFLINE"),
            trends_geo=os.environ.get("TRENDS_GEO", "US"),
            news_language=os.environ.get("NEWS_LANGUAGE", "en"),
            ddg_queries=[q.strip() for q in queries_raw.split(",") if q.strip()],
            feeds_path=os.environ.get("FEEDS_PATH", "data/feeds.txt"),
            indexer_timeout_seconds=float(os.environ.get("INDEXER_TIMEOUT_SECONDS", "10")),
            google_search_console_url=os.environ.get("GOOGLE_SEARCH_CONSOLE_URL", ""),
            bing_submit_url=os.environ.get("BING_SUBMIT_URL", ""),
            indexnow_key=os.environ.get("INDEXNOW_KEY", ""),
            enable_auto_generation=_env_bool("ENABLE_AUTO_GENERATION"),
            crawl_interval=os.environ.get("CRAWL_INTERVAL", "4h"),
            write_interval=os.environ.get("WRITE_INTERVAL", "6h"),
            publish_interval=os.environ.get("PUBLISH_INTERVAL", "1h"),
            seo_interval=os.environ.get("SEO_INTERVAL", "1d"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
