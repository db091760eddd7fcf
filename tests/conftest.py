"""Pytest configuration and fixtures."""

import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Generator

import orjson
import pytest

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JSON_LOGGING"] = "false"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def small_lexicon():
    """Small lexicon fixture independent of the packaged artifact."""
    from newshub.processing.lexicon import Lexicon

    return Lexicon.from_weights(
        {
            "ai safety": 140,
            "ai chips": 145,
            "market share": 145,
            "openai": 150,
            "safety": 90,
            "partnership": 155,
            "gpt-5": 160,
            "deal": 150,
            "robotics": 40,
            "drones": 30,
        },
        impact_terms=["impact", "growth", "boost"],
        breaking_terms=["breaking", "launches", "exclusive"],
    )


@pytest.fixture
def sample_cache_document():
    """Cache document with social posts, articles and hashtags."""
    return {
        "tweets": [
            {
                "content": "Huge day: OpenAI's GPT-5 launch is live with better reasoning",
                "url": "https://x.com/a/status/1",
                "authorUsername": "ai_watcher",
                "impactScore": 900,
            },
            {
                "content": "Weather forecast: sunny skies all weekend",
                "url": "https://x.com/b/status/2",
                "impactScore": 5000,
            },
            {
                "content": "Multimodal reasoning benchmarks from OpenAI look strong",
                "url": "https://x.com/c/status/3",
                "impactScore": 300,
            },
        ],
        "articles": [
            {
                "id": "a1",
                "title": "OpenAI ships GPT-5",
                "summary": "The multimodal model improves reasoning",
                "url": "https://example.com/gpt5",
                "source": "TechCrunch",
                "importance_score": 180,
            },
            {
                "id": "a2",
                "title": "Local bakery opens",
                "summary": None,
                "url": "https://example.com/bakery",
            },
        ],
        "hashtags": [
            {"hashtag": "#GPT5", "impactScore": 950},
            {"hashtag": "multimodal", "impactScore": 400},
        ],
    }


@pytest.fixture
def cache_file(temp_dir, sample_cache_document) -> Path:
    path = temp_dir / "twitter-data.json"
    path.write_bytes(orjson.dumps(sample_cache_document))
    return path


@pytest.fixture
def store_items():
    """Stored news items keyed by id."""
    return [
        {
            "id": "1",
            "title": "Breaking: OpenAI announces GPT-5",
            "summary": "",
            "published_date": datetime.now(UTC).isoformat(),
            "source_name": "TechCrunch",
        },
        {
            "id": "2",
            "title": "Show HN: my weekend project",
            "summary": "A small tool",
            "published_date": "2020-01-01T00:00:00Z",
            "source_name": "Hacker News",
        },
        {
            "id": "3",
            "title": "Local bakery opens",
            "summary": None,
            "published_date": "not a date",
            "source_name": "Town Gazette",
        },
    ]


@pytest.fixture
def store_file(temp_dir, store_items) -> Path:
    path = temp_dir / "news_items.json"
    path.write_bytes(orjson.dumps({"items": store_items}))
    return path
