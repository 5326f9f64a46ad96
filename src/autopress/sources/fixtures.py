"""Deterministic topics used when a source cannot be reached."""

from __future__ import annotations

from autopress.models import TopicCandidate

FALLBACK_TOPICS: dict[str, list[dict]] = {
    "google_trends": [
        {"title": "ChatGPT latest feature release", "keyword": "ChatGPT", "search_volume": 5_000_000},
        {"title": "Best AI art tools", "keyword": "AI art", "search_volume": 2_000_000},
        {"title": "Side hustles that make money in 2025", "keyword": "side hustle", "search_volume": 1_800_000},
        {"title": "Python tutorial for beginners", "keyword": "Python tutorial", "search_volume": 1_500_000},
        {"title": "Productivity methods that work", "keyword": "productivity tools", "search_volume": 1_200_000},
    ],
    "google_news": [
        {"title": "Which jobs will AI replace", "keyword": "AI jobs", "search_volume": 3_000_000},
        {"title": "Growing an audience as a creator", "keyword": "creator economy", "search_volume": 2_500_000},
        {"title": "Gadget reviews roundup", "keyword": "gadget reviews", "search_volume": 2_000_000},
    ],
    "duckduckgo": [
        {"title": "How to learn programming", "keyword": "learn programming", "search_volume": 2_800_000},
        {"title": "Useful software recommendations", "keyword": "software recommendations", "search_volume": 2_200_000},
        {"title": "Where artificial intelligence is heading", "keyword": "AI trends", "search_volume": 1_900_000},
    ],
    "rss": [
        {"title": "Smartphone photography tips", "keyword": "phone photography", "search_volume": 1_600_000},
        {"title": "How to make short videos", "keyword": "short video", "search_volume": 1_400_000},
        {"title": "Healthy lifestyle habits", "keyword": "healthy living", "search_volume": 1_100_000},
    ],
}

_GENERIC_TOPICS: list[dict] = [
    {"title": "Everyday productivity tools", "keyword": "productivity tools"},
    {"title": "Investing basics", "keyword": "investing"},
]


def fallback_topics(source: str) -> list[TopicCandidate]:
    """Canned candidates for a source; unknown sources get a generic list."""
    raw = FALLBACK_TOPICS.get(source) or _GENERIC_TOPICS
    return [TopicCandidate(**item) for item in raw]
