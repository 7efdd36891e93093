import logging
from typing import List, Optional, Sequence

from .text import normalize_text, tokenize
from .types import FlatEntry

logger = logging.getLogger(__name__)

MIN_FUZZY_SCORE = 3


def fuzzy_score(query_tokens: Sequence[str], entry_tokens: Sequence[str]) -> int:
    # The three rules stack: an identical pair scores 3 + 2 + 1.
    score = 0
    for a in query_tokens:
        for b in entry_tokens:
            if a == b:
                score += 3
            if a.startswith(b) or b.startswith(a):
                score += 2
            if a in b or b in a:
                score += 1
    return score


def entry_tokens(entry: FlatEntry) -> List[str]:
    return tokenize(" ".join([entry.question, *entry.keywords]))


def exact_match(query: str, entries: Sequence[FlatEntry]) -> Optional[FlatEntry]:
    for entry in entries:
        if normalize_text(entry.question) == query:
            return entry
    return None


def keyword_match(query: str, entries: Sequence[FlatEntry]) -> Optional[FlatEntry]:
    for entry in entries:
        for keyword in entry.keywords:
            if keyword and keyword in query:
                return entry
    return None


def fuzzy_match(query: str, entries: Sequence[FlatEntry], min_score: int = MIN_FUZZY_SCORE) -> Optional[FlatEntry]:
    query_tokens = tokenize(query)
    best: Optional[FlatEntry] = None
    best_score = 0
    for entry in entries:
        score = fuzzy_score(query_tokens, entry_tokens(entry))
        if score > best_score:
            best = entry
            best_score = score

    if best is None or best_score < min_score:
        logger.debug("Best fuzzy score %d is under threshold %d", best_score, min_score)
        return None
    logger.debug("Fuzzy match %r with score %d", best.question, best_score)
    return best


def match(query: str, entries: Sequence[FlatEntry], min_score: int = MIN_FUZZY_SCORE) -> Optional[FlatEntry]:
    """Best entry for the query: exact question, then keyword, then fuzzy overlap."""
    normalized = normalize_text(query)
    if not normalized or not entries:
        return None

    hit = exact_match(normalized, entries)
    if hit is not None:
        logger.debug("Exact match %r", hit.question)
        return hit

    hit = keyword_match(normalized, entries)
    if hit is not None:
        logger.debug("Keyword match %r", hit.question)
        return hit

    return fuzzy_match(normalized, entries, min_score=min_score)
