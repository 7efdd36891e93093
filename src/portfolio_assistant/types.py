from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class RevealState(str, Enum):
    PENDING = "pending"
    REVEALING = "revealing"
    COMPLETE = "complete"


@dataclass
class FaqItem:
    question: str
    answer: str
    source: Optional[str] = None
    keywords: List[str] = field(default_factory=list)


@dataclass
class FaqCategory:
    title: str
    keywords: List[str] = field(default_factory=list)
    entries: List[FaqItem] = field(default_factory=list)


@dataclass(frozen=True)
class FlatEntry:
    question: str
    answer: str
    source: Optional[str]
    # lower-cased, deduplicated, first-seen order (category keywords first)
    keywords: Tuple[str, ...] = ()


@dataclass
class Message:
    id: str
    role: Role
    text: str
    reveal_state: RevealState = RevealState.PENDING
    visible_text: str = ""

    def to_feed(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.visible_text,
            "revealState": self.reveal_state.value,
        }


@dataclass(frozen=True)
class Suggestion:
    label: str
    emoji: Optional[str] = None
