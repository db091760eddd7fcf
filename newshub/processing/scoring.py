"""
Importance scoring for news content.

The final importance score combines:
- Keyword score of the title (80%) and summary (20%)
- Recency decay
- Impact, headline and source bonuses
- Escalation tiers that separate exceptional headlines
- A score floor for forum/aggregator sources
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from ..config import Settings, get_lexicon, get_settings
from ..logging import get_logger
from ..utils import round_half_up
from .adjusters import headline_bonus, impact_bonus, source_bonus, source_matches, time_decay
from .lexicon import Lexicon, keyword_score

logger = get_logger(__name__)


@dataclass(frozen=True)
class ContentItem:
    """A piece of content to score. Missing text fields are empty strings."""
    title: str = ""
    body: str = ""
    published_at: datetime | str | int | float | None = None
    source_name: str = ""
    item_id: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ContentItem":
        """Build an item from a loosely shaped store or cache record."""
        if not isinstance(record, Mapping):
            raise TypeError(f"Expected a mapping record, got {type(record).__name__}")

        def first(*keys: str) -> Any:
            for key in keys:
                value = record.get(key)
                if value is not None:
                    return value
            return None

        item_id = first('id', 'item_id')
        return cls(
            title=str(first('title') or '').strip(),
            body=str(first('summary', 'body', 'description') or '').strip(),
            published_at=first('published_date', 'published_at', 'publishedAt'),
            source_name=str(first('source_name', 'source', 'sourceName') or '').strip(),
            item_id=str(item_id) if item_id is not None else None,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """Complete scoring breakdown for one item."""
    keyword_score: int
    time_decay: float
    impact_bonus: float
    headline_bonus: float
    source_bonus: float
    final_score: int
    title_score: float = 0.0
    summary_score: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoringPolicy:
    """Tunable constants of the combination step."""
    title_weight: float = 0.8
    summary_weight: float = 0.2
    source_bonus: float = 0.15
    high_quality_sources: tuple[str, ...] = (
        'Hacker News', 'ArXiv', 'Reddit r/MachineLearning', 'Reddit r/artificial',
        'TechCrunch', 'VentureBeat', 'MIT Technology Review', 'Wired',
    )
    aggregator_sources: tuple[str, ...] = ('Hacker News', 'Reddit', 'ArXiv')
    notable_threshold: int = 140
    notable_multiplier: float = 1.15
    strong_threshold: int = 160
    strong_multiplier: float = 1.25
    aggregator_floor: int = 120

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoringPolicy":
        return cls(
            title_weight=settings.title_weight,
            summary_weight=settings.summary_weight,
            source_bonus=settings.source_bonus,
            high_quality_sources=tuple(settings.high_quality_sources),
            aggregator_sources=tuple(settings.aggregator_sources),
            notable_threshold=settings.notable_threshold,
            notable_multiplier=settings.notable_multiplier,
            strong_threshold=settings.strong_threshold,
            strong_multiplier=settings.strong_multiplier,
            aggregator_floor=settings.aggregator_floor,
        )

    def escalate(self, total: int) -> int:
        """Boost very high totals to separate headline stories."""
        if total > self.strong_threshold:
            return round_half_up(total * self.strong_multiplier)
        if total > self.notable_threshold:
            return round_half_up(total * self.notable_multiplier)
        return total


def combine_score(
    title_score: float,
    summary_score: float,
    decay: float,
    impact: float,
    headline: float,
    source: float,
    source_name: str,
    policy: ScoringPolicy,
) -> ScoreBreakdown:
    """Fold keyword scores and modifiers into the persisted integer score."""
    base = round_half_up(title_score * policy.title_weight + summary_score * policy.summary_weight)
    total = round_half_up(base * decay * (1 + impact + headline + source))

    final = policy.escalate(total)
    if source_matches(source_name, policy.aggregator_sources):
        final = max(final, policy.aggregator_floor)

    return ScoreBreakdown(
        keyword_score=base,
        time_decay=decay,
        impact_bonus=impact,
        headline_bonus=headline,
        source_bonus=source,
        final_score=final,
        title_score=title_score,
        summary_score=summary_score,
    )


class ContentScorer:
    """Importance scorer bound to a lexicon and scoring policy."""

    def __init__(self, lexicon: Lexicon | None = None, policy: ScoringPolicy | None = None):
        self.lexicon = lexicon if lexicon is not None else get_lexicon()
        self.policy = policy or ScoringPolicy.from_settings(get_settings())

    def score(self, item: ContentItem, now: datetime | None = None) -> ScoreBreakdown:
        """Calculate the importance breakdown for one item."""
        title = item.title or ""
        summary = item.body or ""

        return combine_score(
            title_score=keyword_score(title, self.lexicon),
            summary_score=keyword_score(summary, self.lexicon),
            decay=time_decay(item.published_at, now),
            impact=max(impact_bonus(title, self.lexicon), impact_bonus(summary, self.lexicon)),
            headline=headline_bonus(title, summary),
            source=source_bonus(item.source_name, self.policy.high_quality_sources, self.policy.source_bonus),
            source_name=item.source_name or "",
            policy=self.policy,
        )

    def score_records(self, records: Iterable[dict], now: datetime | None = None) -> list[dict]:
        """Score and rank raw records, annotating each in place."""
        received = list(records)
        records = [record for record in received if isinstance(record, dict)]
        if len(records) < len(received):
            logger.warning("Skipping records that are not mappings", skipped=len(received) - len(records))
        logger.info("Scoring records", count=len(records))

        if not records:
            return []

        for record in records:
            breakdown = self.score(ContentItem.from_record(record), now)
            record['importance_score'] = breakdown.final_score
            record['score_breakdown'] = breakdown.as_dict()

        records.sort(key=lambda r: r['importance_score'], reverse=True)
        for rank, record in enumerate(records, start=1):
            record['rank'] = rank

        logger.info("Scoring complete", top_score=records[0]['importance_score'])
        return records


def score_content(
    item: ContentItem,
    lexicon: Lexicon | None = None,
    policy: ScoringPolicy | None = None,
    now: datetime | None = None,
) -> ScoreBreakdown:
    """Convenience function for scoring a single item."""
    return ContentScorer(lexicon, policy).score(item, now)


def score_records(records: Iterable[dict], lexicon: Lexicon | None = None,
                  policy: ScoringPolicy | None = None) -> list[dict]:
    """Convenience function for scoring a batch of records."""
    return ContentScorer(lexicon, policy).score_records(records)
