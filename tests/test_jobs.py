"""Tests for the batch jobs."""

import orjson
import pytest

from newshub.config import Settings
from newshub.exceptions import StoreError
from newshub.ingest.cache import load_cache
from newshub.jobs import (
    apply_social_boost,
    attach_citations,
    persist_social_boost,
    social_keywords,
    update_importance_scores,
)
from newshub.processing.scoring import ContentScorer, ScoringPolicy
from newshub.store import JsonContentStore


class FlakyStore:
    """In-memory store whose writes fail for selected ids."""

    def __init__(self, items, failing=(), fail_times=None):
        self.items = {str(item.get("id")): dict(item) for item in items if isinstance(item, dict)}
        self.order = [dict(item) if isinstance(item, dict) else item for item in items]
        self.failing = set(failing)
        self.fail_times = fail_times
        self.attempts = {}

    async def fetch_items(self):
        return [dict(item) if isinstance(item, dict) else item for item in self.order]

    async def update_importance(self, item_id, score, **fields):
        self.attempts[item_id] = self.attempts.get(item_id, 0) + 1
        if item_id in self.failing:
            if self.fail_times is None or self.attempts[item_id] <= self.fail_times:
                raise StoreError("Write rejected", item_id=item_id)
        self.items[item_id].update(importance_score=score, **fields)


@pytest.fixture
def scorer(small_lexicon):
    return ContentScorer(small_lexicon, ScoringPolicy())


class TestUpdateImportanceScores:
    @pytest.mark.asyncio
    async def test_updates_every_item(self, store_file, scorer):
        report = await update_importance_scores(
            JsonContentStore(store_file), scorer=scorer, settings=Settings(retry_attempts=0)
        )

        assert (report.total, report.updated, report.failed) == (3, 3, 0)
        assert report.top[0]["id"] == "1"

        scores = {item["id"]: item["importance_score"] for item in orjson.loads(store_file.read_bytes())["items"]}
        assert scores == {"1": 315, "2": 120, "3": 0}

    @pytest.mark.asyncio
    async def test_dry_run(self, store_file, scorer):
        before = store_file.read_bytes()
        report = await update_importance_scores(JsonContentStore(store_file), scorer=scorer, dry_run=True)

        assert report.updated == 0
        assert len(report.details) == 3
        assert store_file.read_bytes() == before

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, store_items, scorer):
        store = FlakyStore(store_items, failing={"2"})

        report = await update_importance_scores(store, scorer=scorer, settings=Settings(retry_attempts=0))

        assert (report.updated, report.failed) == (2, 1)
        assert report.failures[0]["id"] == "2"
        assert store.items["1"]["importance_score"] == 315

    @pytest.mark.asyncio
    async def test_record_without_id(self, scorer):
        store = FlakyStore([{"title": "OpenAI"}, {"id": "9", "title": "Weather"}])

        report = await update_importance_scores(store, scorer=scorer, settings=Settings(retry_attempts=0))

        assert (report.total, report.updated, report.failed) == (2, 1, 1)

    @pytest.mark.asyncio
    async def test_unreadable_record_does_not_abort_batch(self, scorer):
        store = FlakyStore([{"id": "1", "title": "OpenAI deal"}, None, {"id": "2", "title": "OpenAI"}])

        report = await update_importance_scores(store, scorer=scorer, settings=Settings(retry_attempts=0))

        assert (report.total, report.updated, report.failed) == (3, 2, 1)
        assert report.failures[0]["id"] is None
        assert "importance_score" in store.items["1"]
        assert "importance_score" in store.items["2"]

    @pytest.mark.asyncio
    async def test_write_is_retried(self, store_items, scorer):
        store = FlakyStore(store_items, failing={"3"}, fail_times=1)

        report = await update_importance_scores(
            store, scorer=scorer, settings=Settings(retry_attempts=2, backoff_factor=1.0)
        )

        assert report.failed == 0
        assert store.attempts["3"] == 2

    @pytest.mark.asyncio
    async def test_batches(self, scorer):
        items = [{"id": str(i), "title": "OpenAI"} for i in range(7)]
        store = FlakyStore(items)

        report = await update_importance_scores(
            store, scorer=scorer, settings=Settings(batch_size=3, retry_attempts=0)
        )

        assert report.updated == 7


class TestAttachCitations:
    @pytest.fixture
    def digest(self):
        return {
            "topics": [
                {
                    "title": "OpenAI launches GPT-5",
                    "summary": "Multimodal reasoning upgrade",
                    "citations": [
                        {"type": "article", "url": "https://example.com/a"},
                        {"type": "x-post", "url": "https://x.com/old"},
                    ],
                }
            ]
        }

    def test_attaches_ranked_posts(self, digest, cache_file):
        enriched = attach_citations(digest, load_cache(cache_file), limit=3)
        topic = enriched["topics"][0]

        assert [c["url"] for c in topic["citations"]] == [
            "https://example.com/a",
            "https://x.com/c/status/3",
            "https://x.com/a/status/1",
        ]
        assert topic["citations"][1]["type"] == "x-post"
        assert [t["url"] for t in topic["related_tweets"]] == ["https://x.com/c/status/3", "https://x.com/a/status/1"]
        assert [a["id"] for a in topic["related_articles"]] == ["a1"]
        assert topic["twitter_impact_score"] == 1200

    def test_limit_caps_citations_only(self, digest, cache_file):
        enriched = attach_citations(digest, load_cache(cache_file), limit=1)
        topic = enriched["topics"][0]

        assert [c["url"] for c in topic["citations"]] == ["https://example.com/a", "https://x.com/c/status/3"]
        assert len(topic["related_tweets"]) == 2
        assert topic["twitter_impact_score"] == 1200

    def test_zero_limit(self, digest, cache_file):
        topic = attach_citations(digest, load_cache(cache_file), limit=0)["topics"][0]

        assert topic["citations"] == [{"type": "article", "url": "https://example.com/a"}]
        assert topic["related_articles"] == []

    def test_input_unchanged(self, digest, cache_file):
        attach_citations(digest, load_cache(cache_file))

        assert len(digest["topics"][0]["citations"]) == 2
        assert "related_tweets" not in digest["topics"][0]

    def test_no_topics(self, cache_file):
        assert attach_citations({"date": "2025-06-01"}, load_cache(cache_file)) == {"date": "2025-06-01"}


class TestSocialBoost:
    def test_social_keywords(self, cache_file):
        keywords = social_keywords(load_cache(cache_file))

        assert {"gpt5", "multimodal", "openai", "reasoning"} <= keywords
        assert "#gpt5" not in keywords

    def test_apply_social_boost(self, cache_file):
        records = [
            {"id": "y", "title": "Local bakery opens"},
            {"id": "x", "title": "OpenAI GPT5 multimodal update", "importance_score": 125},
        ]

        boosted = apply_social_boost(records, load_cache(cache_file), Settings())

        assert [r["id"] for r in boosted] == ["x", "y"]
        assert boosted[0]["social_match_count"] == 3
        assert boosted[0]["social_boost_percentage"] == 15.0
        assert boosted[0]["new_score"] == 144
        assert boosted[0]["social_impact_score"] == 1350
        assert boosted[1]["social_impact_score"] == 0
        assert boosted[1]["base_score"] == 100
        assert boosted[1]["new_score"] == 100

    @pytest.mark.asyncio
    async def test_persist_social_boost(self, store_file, cache_file):
        report = await persist_social_boost(JsonContentStore(store_file), load_cache(cache_file), Settings())

        assert (report.total, report.updated, report.failed) == (3, 3, 0)
        items = {item["id"]: item for item in orjson.loads(store_file.read_bytes())["items"]}
        assert items["1"]["importance_score"] == 105
        assert items["1"]["social_boost_percentage"] == 5.0
        assert items["3"]["importance_score"] == 100

    def test_apply_social_boost_skips_unreadable_records(self, cache_file):
        boosted = apply_social_boost([None, "text", {"id": "x", "title": "OpenAI"}], load_cache(cache_file), Settings())

        assert [r["id"] for r in boosted] == ["x"]

    @pytest.mark.asyncio
    async def test_persist_social_boost_unreadable_record(self, cache_file):
        store = FlakyStore([{"id": "1", "title": "OpenAI deal"}, None, {"id": "2", "title": "OpenAI"}])

        report = await persist_social_boost(store, load_cache(cache_file), Settings(retry_attempts=0))

        assert (report.total, report.updated, report.failed) == (3, 2, 1)
        assert store.items["1"]["importance_score"] == 105
        assert store.items["1"]["social_impact_score"] == 0
