"""Service wiring and command-line entry point."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass

from autopress.config import Settings
from autopress.gemini import GeminiClient
from autopress.generator import ContentGenerator
from autopress.ratelimit import MinIntervalLimiter
from autopress.scheduler import ScheduledJob, Scheduler, parse_interval
from autopress.seo import SeoMaintenance
from autopress.sources.registry import build_sources
from autopress.stages.crawl import CrawlStage
from autopress.stages.publish import PublishStage
from autopress.stages.write import WriteStage
from autopress.store import ContentStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a stage needs, built once at process start."""

    settings: Settings
    store: ContentStore
    client: GeminiClient
    generator: ContentGenerator
    crawl: CrawlStage
    write: WriteStage
    publish: PublishStage
    seo: SeoMaintenance

    @classmethod
    def from_settings(cls, settings: Settings) -> Services:
        store = ContentStore(settings)
        client = GeminiClient(
            settings, limiter=MinIntervalLimiter(settings.backend_min_interval_seconds)
        )
        generator = ContentGenerator(client, settings)
        return cls(
            settings=settings,
            store=store,
            client=client,
            generator=generator,
            crawl=CrawlStage(store, build_sources(settings)),
            write=WriteStage(
                store, generator, settings,
                limiter=MinIntervalLimiter(settings.write_delay_seconds),
            ),
            publish=PublishStage(
                store, settings,
                limiter=MinIntervalLimiter(settings.publish_delay_seconds),
            ),
            seo=SeoMaintenance(store, settings),
        )


def build_scheduler(services: Services) -> Scheduler:
    settings = services.settings
    jobs = [
        ScheduledJob("crawl", parse_interval(settings.crawl_interval), services.crawl.run),
        ScheduledJob("write", parse_interval(settings.write_interval), services.write.run),
        ScheduledJob(
            "publish",
            parse_interval(settings.publish_interval),
            services.publish.publish_scheduled,
        ),
        ScheduledJob("seo", parse_interval(settings.seo_interval), services.seo.submit),
    ]
    return Scheduler(jobs, enabled=settings.enable_auto_generation)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autopress", description="Trending topic to published article pipeline."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("crawl", help="Fetch trending topics from every source")
    sub.add_parser("write", help="Generate articles for unprocessed topics")
    sub.add_parser("publish", help="Publish the oldest unpublished articles")
    sub.add_parser("sitemap", help="Regenerate the sitemap")
    sub.add_parser("submit", help="Regenerate the sitemap and notify search engines")
    sub.add_parser("stats", help="Print store statistics")
    sub.add_parser("schedule", help="Run all stages on their intervals")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level, format="%(levelname)s %(name)s: %(message)s"
    )

    if not settings.gemini_api_key and args.command in ("write", "schedule"):
        logger.warning("GEMINI_API_KEY is not set, articles will use placeholder content")

    services = Services.from_settings(settings)

    if args.command == "crawl":
        services.crawl.run()
    elif args.command == "write":
        services.write.run()
    elif args.command == "publish":
        services.publish.publish_scheduled()
    elif args.command == "sitemap":
        path = services.seo.generate_sitemap()
        print(path)
    elif args.command == "submit":
        services.seo.submit()
    elif args.command == "stats":
        print(services.store.stats().model_dump_json(indent=2))
    elif args.command == "schedule":
        if not settings.enable_auto_generation:
            raise SystemExit("ENABLE_AUTO_GENERATION is not enabled")
        build_scheduler(services).run_forever()
