"""Keyword overlap scoring for duplicate work item detection."""
import re
from decimal import ROUND_HALF_UP, Decimal

from storyforge.schemas.search import SimilarMatch

STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "should",
    "could", "may", "might", "can", "to", "of", "in", "on", "at", "for",
    "with", "from", "by", "as", "and", "or", "but", "not", "it", "this",
    "that", "these", "those", "i", "we", "you", "he", "she", "they",
})

MAX_KEYWORDS = 10
MIN_SCORE = 30  # exclusive
TITLE_WEIGHT = 0.7
DESCRIPTION_WEIGHT = 0.3
DEFAULT_LIMIT = 5

_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)


def extract_keywords(text: str | None) -> list[str]:
    """Lowercased words longer than two characters, minus stopwords, first 10."""
    if not text:
        return []
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOPWORDS][:MAX_KEYWORDS]


def text_similarity(text1: str | None, text2: str | None) -> float:
    """Jaccard similarity of the two keyword sets, as a 0-100 percentage."""
    words1 = set(extract_keywords(text1))
    words2 = set(extract_keywords(text2))
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2) * 100


def calculate_similarity(
    title1: str | None,
    title2: str | None,
    desc1: str | None = "",
    desc2: str | None = "",
) -> int:
    """70% title overlap plus 30% description overlap, rounded half up.

    The description term only counts when both descriptions are non-empty.
    """
    score = text_similarity(title1, title2) * TITLE_WEIGHT
    if desc1 and desc2:
        score += text_similarity(desc1, desc2) * DESCRIPTION_WEIGHT
    return int(Decimal(str(score)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def similarity_reason(title1: str | None, title2: str | None) -> str:
    keywords2 = set(extract_keywords(title2))
    common: list[str] = []
    for keyword in extract_keywords(title1):
        if keyword in keywords2 and keyword not in common:
            common.append(keyword)
    if common:
        return "Similar keywords: " + ", ".join(f'"{k}"' for k in common[:3])
    return "Similar title"


def rank_matches(matches: list[SimilarMatch], limit: int = DEFAULT_LIMIT) -> list[SimilarMatch]:
    """Drop scores of 30 or less, best first, at most ``limit``."""
    kept = [m for m in matches if m.similarity_score > MIN_SCORE]
    kept.sort(key=lambda m: m.similarity_score, reverse=True)
    return kept[:limit]
