"""
Lexicon-based keyword scoring.

A ``Lexicon`` is an immutable table of phrase -> weight entries plus the
impact and breaking-news vocabularies used by the adjusters. ``keyword_score``
turns a piece of text into a score in ``[0, 150]``:

- no matches score 0
- a single match scores its weight, floored at 70
- two or more matches blend the strongest weights and clamp to ``[80, 150]``
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any

from .text_utils import normalize_text

SINGLE_MATCH_FLOOR = 70
MULTI_MATCH_MIN = 80
MULTI_MATCH_MAX = 150
TOP_SHARE = 0.75
SECOND_SHARE = 0.15
TAIL_SHARE = 0.10
TAIL_DECAY = 1.8


@dataclass(frozen=True)
class KeywordWeightEntry:
    """One lexicon row, with its normalized matching forms."""
    phrase: str
    weight: int

    @property
    def is_phrase(self) -> bool:
        return ' ' in self.phrase

    @cached_property
    def normalized(self) -> str:
        return normalize_text(self.phrase)

    @cached_property
    def variants(self) -> tuple[str, ...]:
        """Singular/plural forms tried for multi-word phrases."""
        base = self.normalized
        singular = base[:-1] if base.endswith('s') else base
        return (base, singular, base + 's')

    @cached_property
    def words(self) -> frozenset[str]:
        return frozenset(normalize_text(word) for word in self.phrase.split(' '))


@dataclass(frozen=True)
class Lexicon:
    """Read-only keyword configuration shared by every scoring call."""
    entries: tuple[KeywordWeightEntry, ...]
    impact_terms: tuple[str, ...] = ()
    breaking_terms: tuple[str, ...] = ()
    weights: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, 'weights',
            MappingProxyType({entry.phrase: entry.weight for entry in self.entries}),
        )

    @classmethod
    def from_weights(
        cls,
        weights: Mapping[str, int],
        impact_terms: Iterable[str] = (),
        breaking_terms: Iterable[str] = (),
    ) -> "Lexicon":
        return cls(
            entries=tuple(KeywordWeightEntry(phrase, int(weight)) for phrase, weight in weights.items()),
            impact_terms=tuple(normalize_text(term) for term in impact_terms),
            breaking_terms=tuple(normalize_text(term) for term in breaking_terms),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Lexicon":
        """Build from the lexicon artifact layout (see ``lexicon.yaml``)."""
        return cls.from_weights(
            data.get('keyword_weights', {}),
            data.get('impact_keywords', ()),
            data.get('breaking_keywords', ()),
        )

    @cached_property
    def phrase_entries(self) -> tuple[KeywordWeightEntry, ...]:
        return tuple(entry for entry in self.entries if entry.is_phrase)

    @cached_property
    def word_entries(self) -> tuple[KeywordWeightEntry, ...]:
        return tuple(entry for entry in self.entries if not entry.is_phrase)

    def __len__(self) -> int:
        return len(self.entries)


def match_keywords(text: str, lexicon: Lexicon) -> list[KeywordWeightEntry]:
    """Find the lexicon entries present in text.

    Phrases are matched first and their words consumed, so "ai safety"
    does not also count a single-word "safety" entry.
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    matched: list[KeywordWeightEntry] = []
    consumed: set[str] = set()

    for entry in lexicon.phrase_entries:
        if any(variant in normalized for variant in entry.variants):
            matched.append(entry)
            consumed.update(entry.words)

    for entry in lexicon.word_entries:
        if entry.normalized not in consumed and entry.normalized in normalized:
            matched.append(entry)

    return matched


def combine_weights(weights: Iterable[int]) -> float:
    """Blend matched weights into a single keyword score."""
    ordered = sorted(weights, reverse=True)

    if not ordered:
        return 0
    if len(ordered) == 1:
        return max(ordered[0], SINGLE_MATCH_FLOOR)

    total = ordered[0] * TOP_SHARE + ordered[1] * SECOND_SHARE
    for index, weight in enumerate(ordered[2:]):
        total += weight * TAIL_SHARE / TAIL_DECAY ** index

    return min(max(total, MULTI_MATCH_MIN), MULTI_MATCH_MAX)


def keyword_score(text: str, lexicon: Lexicon) -> float:
    """Score text against the lexicon, in ``[0, 150]``."""
    return combine_weights(entry.weight for entry in match_keywords(text, lexicon))
