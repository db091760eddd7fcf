"""
Keyword relevance matching between a topic and a pool of candidates.

Used to pick the social posts and articles that substantiate a digest
topic. Candidates are ranked by how many topic keywords they contain; a
candidate's own precomputed engagement/importance score only breaks ties.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from ..logging import get_logger
from ..utils import round_half_up
from .text_utils import count_contained, extract_keywords

logger = get_logger(__name__)

C = TypeVar('C')

MATCH_WEIGHT = 100
PRECOMPUTED_DIVISOR = 1000


@runtime_checkable
class RelevanceCandidate(Protocol):
    """Anything that can be matched against topic keywords."""

    def text_for_matching(self) -> str: ...


@runtime_checkable
class ScoredCandidate(RelevanceCandidate, Protocol):
    """Candidate that also carries an engagement/importance score."""

    def precomputed_score(self) -> float | None: ...


@dataclass(frozen=True)
class RelevanceMatch:
    """Relevance of one candidate to a topic."""
    candidate: Any
    match_count: int
    precomputed: float | None
    matched_keywords: frozenset[str]

    @property
    def combined_score(self) -> float:
        score = float(self.match_count * MATCH_WEIGHT)
        if self.precomputed:
            score += self.precomputed / PRECOMPUTED_DIVISOR
        return score

    @property
    def sort_key(self) -> tuple[int, float]:
        return (self.match_count, self.precomputed or 0.0)


def _default_text(candidate: Any) -> str:
    return candidate.text_for_matching()


def _default_score(candidate: Any) -> float | None:
    if isinstance(candidate, ScoredCandidate):
        return candidate.precomputed_score()
    return None


class RelevanceMatcher:
    """Ranks candidates by keyword overlap with a topic."""

    def __init__(
        self,
        text_of: Callable[[Any], str] | None = None,
        score_of: Callable[[Any], float | None] | None = None,
    ):
        """Initialize matcher.

        Args:
            text_of: Extracts matching text from a candidate (defaults to
                ``text_for_matching()``)
            score_of: Extracts the tie-break score (defaults to
                ``precomputed_score()`` when the candidate has one)
        """
        self.text_of = text_of or _default_text
        self.score_of = score_of or _default_score

    def evaluate(self, keywords: set[str], candidate: Any) -> RelevanceMatch:
        text = (self.text_of(candidate) or "").lower()
        matched = frozenset(keyword for keyword in keywords if keyword in text)
        return RelevanceMatch(
            candidate=candidate,
            match_count=len(matched),
            precomputed=self.score_of(candidate),
            matched_keywords=matched,
        )

    def rank(self, keywords: set[str], candidates: Iterable[Any],
             limit: int | None = None) -> list[RelevanceMatch]:
        """Rank candidates against an already extracted keyword set.

        Candidates with no keyword overlap are dropped. Equal keys keep
        their input order.
        """
        if not keywords:
            return []
        if limit is not None and limit <= 0:
            return []

        matches = [self.evaluate(keywords, candidate) for candidate in candidates]
        matches = [match for match in matches if match.match_count > 0]
        matches.sort(key=lambda match: match.sort_key, reverse=True)

        return matches if limit is None else matches[:limit]

    def rank_for_topic(self, topic_text: str, candidates: Iterable[Any],
                       limit: int | None = None) -> list[RelevanceMatch]:
        keywords = extract_keywords(topic_text)
        if not keywords:
            logger.debug("Topic yielded no keywords", topic=topic_text[:80])
            return []
        return self.rank(keywords, candidates, limit)

    def find_relevant(self, topic_text: str, candidates: Iterable[C],
                      limit: int | None = None) -> list[C]:
        return [match.candidate for match in self.rank_for_topic(topic_text, candidates, limit)]


def find_relevant(
    topic_text: str,
    candidates: Sequence[C],
    limit: int | None = None,
    text_of: Callable[[C], str] | None = None,
    score_of: Callable[[C], float | None] | None = None,
) -> list[C]:
    """Convenience function returning the candidates most relevant to a topic."""
    return RelevanceMatcher(text_of, score_of).find_relevant(topic_text, candidates, limit)


def social_boost(text: str, keywords: Iterable[str],
                 per_match: float = 5.0, cap: float = 50.0) -> tuple[int, float]:
    """Social boost for an item from trending social keywords.

    Returns:
        Tuple of (matched keyword count, boost percentage)
    """
    match_count = count_contained((text or "").lower(), keywords)
    return match_count, min(match_count * per_match, cap)


def boosted_score(base_score: float, boost_percentage: float) -> int:
    """Apply a social boost percentage to an importance score."""
    return round_half_up(base_score * (1 + boost_percentage / 100))
