import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .text import dedupe_keywords
from .types import FaqCategory, FaqItem, FlatEntry

logger = logging.getLogger(__name__)


class KnowledgeBaseError(ValueError):
    """Raised when a FAQ document does not have the category-list shape."""


def load_faq_document(path: str) -> List[Any]:
    data_path = Path(path)
    if not data_path.exists():
        raise FileNotFoundError(f"FAQ document not found: {data_path}")

    with data_path.open("r", encoding="utf-8") as f:
        document = json.load(f)
    if not isinstance(document, list):
        raise KnowledgeBaseError(f"FAQ document root must be a list of categories: {data_path}")
    return document


def parse_categories(document: Any) -> List[FaqCategory]:
    """Turn the raw document into categories, dropping malformed entries."""
    if isinstance(document, (str, bytes, bytearray)):
        document = json.loads(document)
    if not isinstance(document, list):
        raise KnowledgeBaseError("FAQ document root must be a list of categories")

    categories: List[FaqCategory] = []
    for idx, raw in enumerate(document):
        if not isinstance(raw, dict):
            logger.debug("Skipping category %d: not an object", idx)
            continue
        qa_list = raw.get("qa")
        if not isinstance(qa_list, list):
            logger.debug("Category %r has no qa list; no entries taken from it", raw.get("title"))
            qa_list = []
        items: List[FaqItem] = []
        for item_idx, qa in enumerate(qa_list):
            item = _parse_item(qa)
            if item is None:
                logger.debug("Skipping malformed entry %d in category %r", item_idx, raw.get("title"))
                continue
            items.append(item)
        categories.append(
            FaqCategory(
                title=str(raw.get("title") or "").strip(),
                keywords=_string_list(raw.get("keywords")),
                entries=items,
            )
        )
    return categories


def _parse_item(qa: Any) -> Optional[FaqItem]:
    if not isinstance(qa, dict):
        return None
    question = qa.get("q")
    answer = qa.get("a")
    if not isinstance(question, str) or not isinstance(answer, str):
        return None
    question = question.strip()
    answer = answer.strip()
    if not question or not answer:
        return None
    source = qa.get("source")
    source = source.strip() if isinstance(source, str) else None
    return FaqItem(
        question=question,
        answer=answer,
        source=source or None,
        keywords=_string_list(qa.get("keywords")),
    )


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def flatten_categories(categories: Sequence[FaqCategory]) -> List[FlatEntry]:
    entries: List[FlatEntry] = []
    for category in categories:
        for item in category.entries:
            entries.append(
                FlatEntry(
                    question=item.question,
                    answer=item.answer,
                    source=item.source,
                    keywords=dedupe_keywords(category.keywords, item.keywords),
                )
            )
    return entries


class KnowledgeBase:
    """Flattened FAQ entries with an explicit load/dispose lifecycle.

    Loading never raises: an absent or unparseable document leaves the
    knowledge base empty so every query falls through to the fallback text.
    """

    def __init__(self) -> None:
        self._entries: List[FlatEntry] = []

    @property
    def entries(self) -> List[FlatEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self, document: Any) -> List[FlatEntry]:
        if document is None:
            logger.warning("No FAQ document supplied; knowledge base is empty")
            self._entries = []
            return []
        try:
            categories = parse_categories(document)
        except (ValueError, TypeError, RecursionError) as exc:
            logger.warning("Could not parse FAQ document: %s", exc)
            self._entries = []
            return []
        self._entries = flatten_categories(categories)
        logger.info("Loaded %d FAQ entries from %d categories", len(self._entries), len(categories))
        return list(self._entries)

    def load_path(self, path: str) -> List[FlatEntry]:
        try:
            document = load_faq_document(path)
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("Could not read FAQ document %s: %s", path, exc)
            self._entries = []
            return []
        return self.load(document)

    def dispose(self) -> None:
        self._entries = []
