"""Text normalization and keyword extraction shared by scoring and matching."""

import re

# Two non-ASCII characters separated only by whitespace (CJK line wraps)
_NON_ASCII_GAP = re.compile(r'([^\x01-\x7e])\s+([^\x01-\x7e])')
_HYPHEN_SPACE_RUN = re.compile(r'[-\s]+')
_FULL_WIDTH_ALNUM = re.compile(r'[Ａ-Ｚａ-ｚ０-９]')
_FULL_WIDTH_OFFSET = 0xFEE0
_STRIPPED_CHARS = str.maketrans('', '', 'ー・〜～()（）「」')

STOP_WORDS = frozenset({
    'the', 'and', 'or', 'a', 'an', 'in', 'on', 'at', 'to', 'for', 'with', 'by',
    'about', 'as', 'of', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'should', 'can',
    'could', 'may', 'might', 'must', 'shall', 'this', 'that', 'these', 'those',
    'they', 'them', 'their', 'there', 'here', 'where', 'when', 'why', 'how',
    'what', 'who', 'whom', 'which', 'whose', 'some', 'any', 'all', 'none',
    'many', 'much', 'more', 'most', 'other', 'another', 'such', 'no', 'nor',
    'not', 'only', 'own', 'same', 'so', 'than', 'too', 'very', 'just', 'but',
    'however', 'still', 'yet', 'also', 'from', 'into', 'your', 'https', 'http',
})


def normalize_text(text: str) -> str:
    """Normalize text for lexicon phrase matching.

    Lower-cases, rejoins CJK characters split by whitespace, collapses
    hyphen/whitespace runs to one space, folds full-width alphanumerics to
    half-width and drops decorative punctuation. The same transform is applied
    to lexicon phrases, so compound names like "GPT-5" still line up.

    Args:
        text: Raw text

    Returns:
        Normalized text
    """
    if not text:
        return ""

    normalized = text.lower()
    normalized = _NON_ASCII_GAP.sub(r'\1\2', normalized)
    normalized = _HYPHEN_SPACE_RUN.sub(' ', normalized)
    normalized = _FULL_WIDTH_ALNUM.sub(
        lambda m: chr(ord(m.group()) - _FULL_WIDTH_OFFSET), normalized
    )
    return normalized.translate(_STRIPPED_CHARS)


def extract_keywords(
    text: str,
    min_length: int = 4,
    stop_words: frozenset[str] = STOP_WORDS,
) -> set[str]:
    """Extract keywords from text.

    Args:
        text: Input text
        min_length: Minimum keyword length
        stop_words: Words never treated as keywords

    Returns:
        Set of keywords
    """
    if not text:
        return set()

    words = re.findall(r'\w+', text.lower())

    return {
        word for word in words
        if len(word) >= min_length and word not in stop_words
    }


def count_contained(text: str, terms) -> int:
    """Count how many terms occur as substrings of text."""
    return sum(1 for term in terms if term in text)
