"""
Temporal and heuristic modifiers applied on top of the keyword score.

Each function is pure and independent:

- ``time_decay``: step multiplier from the item's age
- ``impact_bonus``: fraction from impact / breaking-news vocabulary
- ``headline_bonus``: fraction from structural headline patterns
- ``source_bonus``: flat fraction for allow-listed sources
"""

import re
from collections.abc import Iterable
from datetime import UTC, datetime

from ..utils import ensure_utc, parse_published_at
from .lexicon import Lexicon
from .text_utils import count_contained, normalize_text

PublishedAt = datetime | str | int | float | None

SECONDS_PER_DAY = 86400

# (upper bound in days, multiplier); first bound the age falls under wins
DECAY_STEPS: tuple[tuple[float, float], ...] = (
    (0.125, 1.5),   # last 3 hours
    (0.25, 1.4),    # last 6 hours
    (0.5, 1.35),    # last 12 hours
    (1, 1.3),       # last 24 hours
    (2, 1.2),
    (3, 1.1),
    (4, 1.0),
    (7, 0.8),
    (10, 0.6),
    (14, 0.4),
    (21, 0.2),
)
OLDEST_DECAY = 0.1

IMPACT_POINTS = 2.5
IMPACT_CAP = 20
BREAKING_POINTS = 7.5
BREAKING_CAP = 35

HEADLINE_PATTERN_POINTS = 25
HEADLINE_CAP = 50

HEADLINE_PATTERNS: tuple[re.Pattern, ...] = tuple(re.compile(pattern, re.IGNORECASE) for pattern in (
    # Company announcement
    r'\b(google|microsoft|apple|amazon|meta|openai|anthropic|nvidia|tesla|ibm)\b.{0,30}'
    r'\b(announce|launch|unveil|reveal|introduce|release)\b',
    # Partnership
    r'\b(partner|partnership|collaboration|alliance)\b.{0,30}\b(with|between)\b',
    # Acquisition with an amount
    r'\b(acquire|acquisition|buy|purchase|takeover)\b.{0,30}\b(for|worth|valued at)\b.{0,15}'
    r'\b(\$|usd|million|billion)\b',
    # Funding with an amount
    r'\b(raise|secure|close)\b.{0,30}\b(funding|investment|capital|round)\b.{0,15}'
    r'\b(\$|usd|million|billion)\b',
    # Major launch
    r'\b(launch|unveil|introduce|debut)\b.{0,30}\b(new|next-gen|revolutionary|groundbreaking)\b',
    # Industry disruption
    r'\b(transform|revolutionize|disrupt|change)\b.{0,30}\b(industry|market|sector|landscape)\b',
    # Exclusive or breaking
    r'\b(exclusive|breaking|first look|just in)\b',
))


def age_in_days(published_at: PublishedAt, now: datetime | None = None) -> float | None:
    """Fractional days elapsed since publication, or None if unknown."""
    published = parse_published_at(published_at)
    if published is None:
        return None
    reference = ensure_utc(now) if now is not None else datetime.now(UTC)
    return (reference - published).total_seconds() / SECONDS_PER_DAY


def decay_for_age(age_days: float | None) -> float:
    """Map an age in days onto the freshness step table."""
    if age_days is None:
        return OLDEST_DECAY
    for upper_bound, multiplier in DECAY_STEPS:
        if age_days < upper_bound:
            return multiplier
    return OLDEST_DECAY


def time_decay(published_at: PublishedAt, now: datetime | None = None) -> float:
    """Recency multiplier for an item.

    Unknown or unparseable publication dates are treated as the oldest
    bucket rather than an error.

    Args:
        published_at: Publication time as datetime, date string or epoch
            milliseconds
        now: Reference time (defaults to current UTC time)

    Returns:
        Multiplier between 0.1 and 1.5
    """
    return decay_for_age(age_in_days(published_at, now))


def impact_bonus(text: str, lexicon: Lexicon) -> float:
    """Bonus fraction in ``[0, 0.55]`` from impact and breaking-news terms."""
    normalized = normalize_text(text)
    if not normalized:
        return 0.0

    impact_count = count_contained(normalized, lexicon.impact_terms)
    breaking_count = count_contained(normalized, lexicon.breaking_terms)

    impact_points = min(impact_count * IMPACT_POINTS, IMPACT_CAP)
    breaking_points = min(breaking_count * BREAKING_POINTS, BREAKING_CAP)
    return (impact_points + breaking_points) / 100


def headline_bonus(title: str, summary: str = "") -> float:
    """Bonus fraction in ``[0, 0.5]`` for headline-shaped announcements."""
    full_text = f"{(title or '').lower()} {(summary or '').lower()}"

    points = sum(
        HEADLINE_PATTERN_POINTS for pattern in HEADLINE_PATTERNS if pattern.search(full_text)
    )
    return min(points, HEADLINE_CAP) / 100


def source_matches(source_name: str, sources: Iterable[str]) -> bool:
    """True when any allow-list entry appears in the source name."""
    if not source_name:
        return False
    return any(source in source_name for source in sources)


def source_bonus(source_name: str, sources: Iterable[str], bonus: float = 0.15) -> float:
    """Flat bonus for high-quality sources."""
    return bonus if source_matches(source_name, sources) else 0.0
