import random
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

EMOJI_MARKER = " \U0001F642"


@dataclass(frozen=True)
class TonePreset:
    intros: Tuple[str, ...]
    closings: Tuple[str, ...]
    emoji_probability: float


PRESETS = {
    "warm": TonePreset(
        intros=(
            "Sure, here's a clear breakdown \U0001F60A",
            "Absolutely, happy to explain this!",
            "Of course, let me walk you through it.",
            "I'd love to share more about this.",
        ),
        closings=(
            "If you'd like, I can explain another part too.",
            "Happy to dive deeper if you'd like!",
            "Let me know if you want an example.",
            "I can walk you through a related project as well.",
        ),
        emoji_probability=0.25,
    ),
    "professional": TonePreset(
        intros=(
            "Here is a concise overview:",
            "Happy to clarify, summary below:",
            "Summary and next steps:",
        ),
        closings=(
            "If you'd like further detail, I can expand.",
            "Tell me if you want examples or data.",
            "I can follow up with a concise checklist.",
        ),
        emoji_probability=0.05,
    ),
    "concise": TonePreset(
        intros=("Quick answer:",),
        closings=("Tell me if you'd like more.",),
        emoji_probability=0.0,
    ),
}

DEFAULT_STYLE = "warm"

FOLLOW_UP_POOL = (
    "Would you like a quick example?",
    "Want a short checklist or step-by-step?",
    "Should I show a related case study?",
    "Do you want code samples or a simpler summary?",
    "Would you like follow-up resources?",
)

# Exact phrases only; nothing is restructured grammatically.
FIRST_PERSON_PATTERNS = (
    re.compile(r"\bthe assistant\b", re.IGNORECASE),
    re.compile(r"\bthis assistant\b", re.IGNORECASE),
    re.compile(r"\bthe bot\b", re.IGNORECASE),
)


def to_first_person(text: str) -> str:
    for pattern in FIRST_PERSON_PATTERNS:
        text = pattern.sub("I", text)
    return text


class ToneTransformer:
    """Wraps a factual answer in an intro and a closing line for the chosen style.

    Phrase choice is random; pass a seeded ``random.Random`` to pin it.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        first_person: bool = True,
        follow_ups: bool = False,
        follow_up_count: int = 3,
        emoji: Optional[bool] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.first_person = first_person
        self.follow_ups = follow_ups
        self.follow_up_count = follow_up_count
        self.emoji = emoji

    def transform(self, raw_answer: str, style: str = DEFAULT_STYLE) -> str:
        raw = (raw_answer or "").strip()
        if not raw:
            return ""
        preset = PRESETS.get(style, PRESETS[DEFAULT_STYLE])

        intro = self.rng.choice(preset.intros)
        body = to_first_person(raw) if self.first_person else raw
        closing = self.rng.choice(preset.closings)
        if self._use_emoji(preset):
            closing += EMOJI_MARKER

        text = f"{intro}\n\n{body}\n\n{closing}"
        if self.follow_ups:
            picks = self._pick_follow_ups()
            if picks:
                text += "\n\n**What I can do next:**\n- " + "\n- ".join(picks)
        return text

    def _use_emoji(self, preset: TonePreset) -> bool:
        if self.emoji is not None:
            return self.emoji
        return self.rng.random() < preset.emoji_probability

    def _pick_follow_ups(self) -> List[str]:
        count = max(0, min(self.follow_up_count, len(FOLLOW_UP_POOL)))
        return self.rng.sample(FOLLOW_UP_POOL, count)
