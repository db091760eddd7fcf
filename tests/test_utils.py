"""Tests for utility functions."""

from datetime import UTC, datetime

import pytest

from newshub.utils import iter_batches, parse_published_at, round_half_up, with_retries

JUNE_FIRST_NOON = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize("value,expected", [(0.5, 1), (2.5, 3), (1.4999, 1), (142.0, 142)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize("value", [
    "2025-06-01T12:00:00Z",
    "2025-06-01T14:00:00+02:00",
    "Sun, 01 Jun 2025 12:00:00 GMT",
    "2025-06-01 12:00:00",
    JUNE_FIRST_NOON.timestamp() * 1000,
    int(JUNE_FIRST_NOON.timestamp() * 1000),
    JUNE_FIRST_NOON.replace(tzinfo=None),
])
def test_parse_published_at(value):
    assert parse_published_at(value) == JUNE_FIRST_NOON


def test_parse_published_at_feed_layout():
    assert parse_published_at("June 1, 2025") == datetime(2025, 6, 1, tzinfo=UTC)


@pytest.mark.parametrize("value", ["not a date", "", None, True, 1e300, ["2025-06-01"]])
def test_parse_published_at_unreadable(value):
    assert parse_published_at(value) is None


def test_iter_batches():
    assert list(iter_batches([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
    assert list(iter_batches([], 3)) == []


@pytest.mark.asyncio
async def test_with_retries_recovers():
    calls = []

    async def flaky_write():
        calls.append(1)
        if len(calls) < 2:
            raise ConnectionError("store unavailable")
        return "written"

    assert await with_retries(flaky_write, attempts=2, first_delay=0) == "written"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_with_retries_gives_up():
    calls = []

    async def failing_write():
        calls.append(1)
        raise ConnectionError("store unavailable")

    with pytest.raises(ConnectionError):
        await with_retries(failing_write, attempts=1, first_delay=0)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_with_retries_only_retries_listed_errors():
    calls = []

    async def bad_write():
        calls.append(1)
        raise KeyError("id")

    with pytest.raises(KeyError):
        await with_retries(bad_write, attempts=3, first_delay=0, retry_on=(ConnectionError,))
    assert len(calls) == 1
