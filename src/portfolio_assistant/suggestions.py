from typing import List, Tuple

from .text import contains_any
from .types import Suggestion

# Checked in order; the first bucket whose triggers appear in the topic wins.
SUGGESTION_BUCKETS: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (
        ("project", "case", "work"),
        (
            "Show me a mobile project",
            "Show me a dashboard project",
            "Walk me through your Verizon PDP",
        ),
    ),
    (
        ("process", "flow", "ux"),
        (
            "Explain your UX process",
            "How do you collaborate with PMs?",
            "Show me a flow-heavy project",
        ),
    ),
    (
        ("experience", "industry", "background"),
        (
            "Tell me about your B2B work",
            "Tell me about your B2C work",
            "What industries have you worked in?",
        ),
    ),
    (
        ("design system", "tokens", "components"),
        (
            "Show me your design system work",
            "How do you build components?",
            "Tell me about tokens & variants",
        ),
    ),
    (
        ("team", "communication", "feedback"),
        (
            "What's your communication style?",
            "How do you give feedback?",
            "What's your teamwork style?",
        ),
    ),
)

DEFAULT_SUGGESTIONS = (
    "Show me a project",
    "Tell me your process",
    "Show me your dashboard work",
)

FALLBACK_SUGGESTIONS = (
    "Show me a project",
    "Tell me about your experience",
    "Explain your design process",
)

STARTER_SUGGESTIONS = (
    Suggestion("Show me your best mobile project", "\U0001F4F1"),
    Suggestion("How do you approach research?", "\U0001F52C"),
    Suggestion("Which tools do you use?", "\U0001F9F0"),
    Suggestion("Who are you?", "\U0001F44B"),
)


def suggest(topic_text: str) -> List[Suggestion]:
    text = (topic_text or "").lower()
    for triggers, labels in SUGGESTION_BUCKETS:
        if contains_any(text, triggers):
            return [Suggestion(label) for label in labels]
    return [Suggestion(label) for label in DEFAULT_SUGGESTIONS]


def fallback_suggestions() -> List[Suggestion]:
    return [Suggestion(label) for label in FALLBACK_SUGGESTIONS]


def starter_suggestions() -> List[Suggestion]:
    return list(STARTER_SUGGESTIONS)
