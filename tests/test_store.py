"""Tests for the JSON-backed content store."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from autopress.errors import PersistenceError, RecordValidationError
from autopress.models import TopicCandidate
from autopress.store import ContentStore, normalize_title

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _publish(store, article_id, when=T0):
    return store.update_article(article_id, published=True, published_at=when)


def test_load_empty(store):
    data = store.load()
    assert data.topics == []
    assert data.articles == []


def test_normalize_title():
    assert normalize_title("  ChatGPT   New  Features ") == "chatgpt new features"
    assert normalize_title("ＡＩ Tools") == "ai tools"


def test_insert_topic_normalizes(store):
    topic = store.insert_topic_if_absent(TopicCandidate(title="  Quiet mornings "), "rss")
    assert topic is not None
    assert topic.id == 1
    assert topic.title == "Quiet mornings"
    assert topic.keyword == "Quiet mornings"
    assert topic.competition == "medium"
    assert topic.source == "rss"
    assert topic.processed is False


def test_insert_topic_invalid_competition_defaults_to_medium(store):
    topic = store.insert_topic_if_absent(
        TopicCandidate(title="A", competition="extreme"), "rss"
    )
    assert topic.competition == "medium"


def test_insert_topic_dedups_by_title_and_source(store):
    assert store.insert_topic_if_absent(TopicCandidate(title="AI Tools"), "rss") is not None
    assert store.insert_topic_if_absent(TopicCandidate(title="ai  tools"), "rss") is None
    assert store.insert_topic_if_absent(TopicCandidate(title="AI Tools"), "google_news") is not None
    assert len(store.list_topics()) == 2


def test_insert_topic_rejects_empty_title(store):
    with pytest.raises(RecordValidationError):
        store.insert_topic_if_absent(TopicCandidate(title="   "), "rss")


def test_unprocessed_topics_ordered_by_volume_nulls_last(store):
    store.insert_topic_if_absent(TopicCandidate(title="unranked"), "rss")
    store.insert_topic_if_absent(TopicCandidate(title="small", search_volume=10), "rss")
    store.insert_topic_if_absent(TopicCandidate(title="big", search_volume=100), "rss")
    store.insert_topic_if_absent(TopicCandidate(title="unranked two"), "rss")

    titles = [t.title for t in store.list_unprocessed_topics(10)]
    assert titles == ["big", "small", "unranked", "unranked two"]
    assert len(store.list_unprocessed_topics(2)) == 2


def test_mark_topic_processed(store):
    topic = store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    store.mark_topic_processed(topic.id)
    assert store.list_unprocessed_topics(10) == []
    assert store.get_topic(topic.id).processed is True


def test_mark_unknown_topic_raises(store):
    with pytest.raises(PersistenceError):
        store.mark_topic_processed(99)


def test_data_survives_reload(store, sample_settings, draft_factory):
    store.insert_topic_if_absent(TopicCandidate(title="A", search_volume=5), "rss")
    store.create_article(draft_factory("a-1"))

    reopened = ContentStore(sample_settings)
    assert [t.title for t in reopened.list_topics()] == ["A"]
    assert reopened.get_article_by_slug("a-1") is not None
    raw = json.loads(Path(sample_settings.store_path).read_text())
    assert raw["next_topic_id"] == 2
    assert raw["next_article_id"] == 2


def test_corrupt_file_raises(store, sample_settings):
    path = Path(sample_settings.store_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{not json")
    with pytest.raises(PersistenceError):
        ContentStore(sample_settings).load()


def test_returned_records_are_copies(store):
    topic = store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    topic.processed = True
    assert store.get_topic(topic.id).processed is False


def test_create_article_assigns_id_and_state(store, draft_factory):
    article = store.create_article(draft_factory("first-1"))
    assert article.id == 1
    assert article.published is False
    assert article.published_at is None
    assert article.view_count == 0


def test_create_article_rejects_duplicate_slug(store, draft_factory):
    store.create_article(draft_factory("same-1"))
    with pytest.raises(PersistenceError):
        store.create_article(draft_factory("same-1"))
    assert store.stats().total_articles == 1


def test_update_article_publishes(store, draft_factory):
    article = store.create_article(draft_factory("a-1"))
    updated = _publish(store, article.id)
    assert updated.published is True
    assert updated.published_at == T0
    assert updated.updated_at >= article.updated_at


def test_published_at_is_set_once(store, draft_factory):
    article = store.create_article(draft_factory("a-1"))
    _publish(store, article.id, T0)
    again = _publish(store, article.id, T0 + timedelta(days=1))
    assert again.published_at == T0


def test_update_rejects_immutable_fields(store, draft_factory):
    article = store.create_article(draft_factory("a-1"))
    with pytest.raises(RecordValidationError):
        store.update_article(article.id, slug="other")
    with pytest.raises(RecordValidationError):
        store.update_article(article.id, word_count=99)


def test_update_rejects_publish_without_timestamp(store, draft_factory):
    article = store.create_article(draft_factory("a-1"))
    with pytest.raises(RecordValidationError):
        store.update_article(article.id, published=True)
    assert store.get_article(article.id).published is False


def test_update_unknown_article_raises(store):
    with pytest.raises(PersistenceError):
        store.update_article(42, content="x")


def test_unpublished_oldest_first(store, draft_factory):
    for slug in ("one", "two", "three"):
        store.create_article(draft_factory(slug))
    _publish(store, 2)
    assert [a.slug for a in store.list_unpublished_articles(5)] == ["one", "three"]
    assert [a.slug for a in store.list_unpublished_articles(1)] == ["one"]


def test_published_newest_first(store, draft_factory):
    for slug in ("one", "two", "three"):
        store.create_article(draft_factory(slug))
    _publish(store, 1, T0)
    _publish(store, 2, T0 + timedelta(hours=2))
    _publish(store, 3, T0 + timedelta(hours=1))
    assert [a.slug for a in store.list_published_articles(10)] == ["two", "three", "one"]
    assert len(store.list_published_articles(2)) == 2


def test_related_articles(store, draft_factory):
    base = store.create_article(draft_factory("base", tags=["ai", "tools"]))
    shares = store.create_article(draft_factory("shares", tags=["tools"]))
    other = store.create_article(draft_factory("other", tags=["money"]))
    draft = store.create_article(draft_factory("draft", tags=["ai"]))
    _publish(store, base.id)
    _publish(store, shares.id)
    _publish(store, other.id)

    related = store.list_related_articles(base.id, ["ai", "tools"], 5)
    assert [a.slug for a in related] == ["shares"]
    assert draft.id not in {a.id for a in related}
    assert store.list_related_articles(base.id, [], 5) == []


def test_serving_reads(store, draft_factory):
    a = store.create_article(draft_factory("a", tags=["ai"]))
    store.create_article(draft_factory("b", tags=["money"]))
    _publish(store, a.id)

    assert [x.slug for x in store.list_articles_by_category("tech")] == ["a"]
    assert [x.slug for x in store.list_articles_by_tag("ai")] == ["a"]
    assert store.list_articles_by_tag("money") == []
    assert store.get_article_by_slug("missing") is None

    store.increment_view_count(a.id)
    store.increment_view_count(a.id)
    assert store.get_article(a.id).view_count == 2


def test_stats(store, draft_factory):
    store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    topic = store.insert_topic_if_absent(TopicCandidate(title="B"), "rss")
    store.mark_topic_processed(topic.id)
    article = store.create_article(draft_factory("a"))
    store.create_article(draft_factory("b"))
    _publish(store, article.id)
    store.increment_view_count(article.id)

    stats = store.stats()
    assert stats.total_topics == 2
    assert stats.unprocessed_topics == 1
    assert stats.total_articles == 2
    assert stats.published_articles == 1
    assert stats.total_views == 1


def test_create_article_for_topic_marks_processed(store, draft_factory):
    topic = store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    article = store.create_article_for_topic(topic.id, draft_factory("a-1"))

    assert article.id == 1
    assert store.get_topic(topic.id).processed is True
    assert store.list_unprocessed_topics(10) == []


def test_create_article_for_processed_topic_is_refused(store, draft_factory):
    topic = store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    store.create_article_for_topic(topic.id, draft_factory("a-1"))

    with pytest.raises(PersistenceError):
        store.create_article_for_topic(topic.id, draft_factory("a-2"))
    assert store.stats().total_articles == 1


def test_create_article_for_topic_rolls_back_on_slug_conflict(store, draft_factory):
    store.create_article(draft_factory("taken"))
    topic = store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")

    with pytest.raises(PersistenceError):
        store.create_article_for_topic(topic.id, draft_factory("taken"))
    assert store.get_topic(topic.id).processed is False


def test_duplicate_topic_does_not_rewrite_file(store):
    store.insert_topic_if_absent(TopicCandidate(title="A"), "rss")
    with patch.object(store, "_save") as save:
        assert store.insert_topic_if_absent(TopicCandidate(title="a"), "rss") is None
    save.assert_not_called()
