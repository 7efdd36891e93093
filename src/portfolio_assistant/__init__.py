from .conversation import ConversationController, TurnResult
from .loader import KnowledgeBase
from .matcher import match
from .reveal import AsyncioScheduler, Revealer, VirtualScheduler
from .suggestions import suggest
from .tone import ToneTransformer

__all__ = [
    "AsyncioScheduler",
    "ConversationController",
    "KnowledgeBase",
    "Revealer",
    "ToneTransformer",
    "TurnResult",
    "VirtualScheduler",
    "match",
    "suggest",
]
