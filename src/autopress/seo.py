"""SEO maintenance: sitemap artifact, search-engine notification, page metadata."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable
from urllib.parse import quote
from xml.sax.saxutils import escape

import httpx

from autopress.config import Settings
from autopress.models import Article, utcnow
from autopress.store import ContentStore

logger = logging.getLogger(__name__)

_PING_URLS = (
    ("google_ping", "https://www.google.com/webmasters/sitemaps/ping?sitemap={sitemap}"),
    ("bing_ping", "https://www.bing.com/webmaster/ping.aspx?siteMap={sitemap}"),
)
_INDEXNOW_URL = "https://api.indexnow.org/indexnow"


def _url_entry(loc: str, lastmod: str | None, priority: str, changefreq: str) -> str:
    lines = ["  <url>", f"    <loc>{escape(loc)}</loc>"]
    if lastmod:
        lines.append(f"    <lastmod>{lastmod}</lastmod>")
    lines.append(f"    <priority>{priority}</priority>")
    lines.append(f"    <changefreq>{changefreq}</changefreq>")
    lines.append("  </url>")
    return "\n".join(lines)


def render_sitemap(site_url: str, articles: list[Article], today: str) -> str:
    """One root entry plus one entry per published article."""
    entries = [_url_entry(f"{site_url}/", None, "1.0", "daily")]
    for article in articles:
        if not article.published:
            continue
        lastmod = article.published_at.date().isoformat() if article.published_at else today
        entries.append(
            _url_entry(f"{site_url}/article/{quote(article.slug)}", lastmod, "0.8", "weekly")
        )
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{body}\n"
        "</urlset>\n"
    )


class SeoMaintenance:
    def __init__(
        self,
        store: ContentStore,
        settings: Settings,
        *,
        http_client_factory: Callable[[], httpx.Client] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._settings = settings
        self._path = Path(settings.sitemap_path)
        self._clock = clock
        self._client_factory = http_client_factory or (
            lambda: httpx.Client(
                follow_redirects=True, timeout=settings.indexer_timeout_seconds
            )
        )

    @property
    def sitemap_url(self) -> str:
        return f"{self._settings.site_url}/sitemap.xml"

    def generate_sitemap(self) -> Path:
        """Write the sitemap atomically and return its path."""
        logger.info("Generating sitemap...")
        articles = self._store.list_published_articles(self._settings.sitemap_limit)
        today = self._clock().date().isoformat()
        xml = render_sitemap(self._settings.site_url, articles, today)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(xml)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Sitemap generated with %d URLs", len(articles))
        return self._path

    def read_sitemap(self) -> str:
        """Return the sitemap, regenerating it first when it is missing."""
        if not self._path.exists():
            self.generate_sitemap()
        return self._path.read_text(encoding="utf-8")

    def _attempts(self) -> list[tuple[str, str, str, dict[str, Any]]]:
        """(name, method, url, request kwargs) for every configured endpoint."""
        settings = self._settings
        sitemap = self.sitemap_url
        attempts: list[tuple[str, str, str, dict[str, Any]]] = []
        if settings.google_search_console_url:
            attempts.append(
                (
                    "google_search_console",
                    "GET",
                    settings.google_search_console_url,
                    {"params": {"sitemap": sitemap}},
                )
            )
        if settings.bing_submit_url:
            attempts.append(
                (
                    "bing_submit",
                    "POST",
                    settings.bing_submit_url,
                    {"json": {"siteUrl": settings.site_url, "sitemap": sitemap}},
                )
            )
        if settings.indexnow_key:
            attempts.append(
                (
                    "indexnow",
                    "GET",
                    _INDEXNOW_URL,
                    {"params": {"url": sitemap, "key": settings.indexnow_key}},
                )
            )
        for name, template in _PING_URLS:
            attempts.append((name, "GET", template.format(sitemap=quote(sitemap, safe="")), {}))
        return attempts

    def notify_indexers(self) -> dict[str, bool]:
        """Tell search engines about the sitemap; each endpoint is tried on its own."""
        results: dict[str, bool] = {}
        with self._client_factory() as client:
            for name, method, url, kwargs in self._attempts():
                try:
                    response = client.request(method, url, **kwargs)
                    response.raise_for_status()
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    logger.warning("Indexer notification failed for %s: %s", name, exc)
                    results[name] = False
                    continue
                logger.info("Notified %s", name)
                results[name] = True
        return results

    def submit(self) -> dict[str, bool]:
        """Regenerate the sitemap, then notify indexers."""
        self.generate_sitemap()
        return self.notify_indexers()

    # --- page metadata for the serving layer ---

    def build_meta_tags(self, article: Article) -> dict[str, str]:
        site_url = self._settings.site_url
        url = f"{site_url}/article/{quote(article.slug)}"
        return {
            "title": article.meta_title or article.title,
            "description": article.meta_description or article.summary,
            "keywords": ", ".join(article.keywords),
            "og_title": article.title,
            "og_description": article.summary,
            "og_image": article.image_url or f"{site_url}/default-og.jpg",
            "og_url": url,
            "canonical": url,
        }

    def build_schema_org(self, article: Article) -> dict[str, Any]:
        site_name = self._settings.site_name
        return {
            "@context": "https://schema.org",
            "@type": "Article",
            "headline": article.title,
            "description": article.summary,
            "image": article.image_url,
            "datePublished": article.published_at.isoformat() if article.published_at else None,
            "dateModified": article.updated_at.isoformat(),
            "author": {"@type": "Organization", "name": site_name},
            "publisher": {
                "@type": "Organization",
                "name": site_name,
                "logo": {"@type": "ImageObject", "url": f"{self._settings.site_url}/logo.png"},
            },
        }
