"""Content scoring and relevance matching."""

from .adjusters import headline_bonus, impact_bonus, source_bonus, time_decay
from .lexicon import KeywordWeightEntry, Lexicon, keyword_score, match_keywords
from .relevance import (
    RelevanceCandidate,
    RelevanceMatch,
    RelevanceMatcher,
    ScoredCandidate,
    find_relevant,
)
from .scoring import (
    ContentItem,
    ContentScorer,
    ScoreBreakdown,
    ScoringPolicy,
    score_content,
    score_records,
)
from .text_utils import extract_keywords, normalize_text

__all__ = [
    'Lexicon',
    'KeywordWeightEntry',
    'keyword_score',
    'match_keywords',
    'time_decay',
    'impact_bonus',
    'headline_bonus',
    'source_bonus',
    'ContentItem',
    'ContentScorer',
    'ScoreBreakdown',
    'ScoringPolicy',
    'score_content',
    'score_records',
    'RelevanceCandidate',
    'ScoredCandidate',
    'RelevanceMatch',
    'RelevanceMatcher',
    'find_relevant',
    'extract_keywords',
    'normalize_text',
]
