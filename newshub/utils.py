"""Helpers shared by the scoring core and the batch jobs."""

import asyncio
import math
from collections.abc import Awaitable, Callable, Iterator, Sequence
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import TypeVar

from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Fallback layouts seen in scraped feeds after ISO 8601 and RFC 2822 fail
FEED_DATE_LAYOUTS = (
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _from_epoch_millis(value: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(value / 1000, UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _from_text(text: str) -> datetime | None:
    text = text.strip()
    if not text:
        return None

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        return ensure_utc(parsedate_to_datetime(text))
    except (ValueError, TypeError):
        pass

    for layout in FEED_DATE_LAYOUTS:
        try:
            return datetime.strptime(text, layout).replace(tzinfo=UTC)
        except ValueError:
            continue
    return None


def parse_published_at(value: datetime | str | int | float | None) -> datetime | None:
    """Coerce a stored publication time into an aware UTC datetime.

    Numbers are epoch milliseconds, the unit content stores and JSON caches
    write. Strings may be ISO 8601, RFC 2822 (RSS) or a common feed layout.
    Anything else, or an unreadable value, gives None.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        parsed = _from_epoch_millis(value)
    elif isinstance(value, str):
        parsed = _from_text(value)
    else:
        parsed = None

    if parsed is None:
        logger.debug("Unreadable publication time", published_at=str(value)[:64])
    return parsed


def round_half_up(value: float) -> int:
    """Nearest integer, halves up; persisted scores never use banker's rounding."""
    return math.floor(value + 0.5)


def iter_batches(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    backoff: float = 2.0,
    first_delay: float = 0.1,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    **log_context,
) -> T:
    """Run a store operation, retrying ``attempts`` more times on failure.

    The wait before retry ``n`` is ``first_delay * backoff ** n``. The last
    error is re-raised once retries are used up.
    """
    retry = 0
    while True:
        try:
            return await operation()
        except retry_on as e:
            if retry >= attempts:
                logger.error("Store operation gave up", retries=retry, error=str(e), **log_context)
                raise
            delay = first_delay * backoff ** retry
            retry += 1
            logger.warning("Store operation failed, retrying", retry=retry, delay=delay,
                           error=str(e), **log_context)
            await asyncio.sleep(delay)
