import re
from typing import Iterable, List

SPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    normalized = (text or "").strip().lower()
    normalized = SPACE_RE.sub(" ", normalized)
    return normalized


def tokenize(text: str) -> List[str]:
    """Whitespace tokens of the lower-cased text; punctuation stays attached."""
    return normalize_text(text).split()


def contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def dedupe_keywords(*groups: Iterable[str]) -> tuple:
    seen = []
    for group in groups:
        for keyword in group or []:
            if not isinstance(keyword, str):
                continue
            norm = normalize_text(keyword)
            if norm and norm not in seen:
                seen.append(norm)
    return tuple(seen)
