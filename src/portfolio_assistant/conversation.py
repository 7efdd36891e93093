import logging
import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import DEFAULT_FALLBACK_TEXT
from .loader import KnowledgeBase
from .matcher import MIN_FUZZY_SCORE, match
from .reveal import CHARS_PER_SECOND, FRAME_MS, SHORT_TEXT_THRESHOLD, AsyncioScheduler, Revealer, RevealSession
from .suggestions import fallback_suggestions, starter_suggestions, suggest
from .tone import DEFAULT_STYLE, ToneTransformer
from .types import FlatEntry, Message, RevealState, Role, Suggestion

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    user_message: Message
    reply: Message
    entry: Optional[FlatEntry] = None
    source_message: Optional[Message] = None
    suggestions: List[Suggestion] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.entry is not None


class ConversationController:
    """One visitor conversation: owns the knowledge base, transcript and reveals."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        scheduler=None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or {}
        tone_cfg = self.config.get("tone", {})
        reveal_cfg = self.config.get("reveal", {})
        conv_cfg = self.config.get("conversation", {})

        self.knowledge_base = KnowledgeBase()
        self.tone = ToneTransformer(
            rng=rng,
            first_person=tone_cfg.get("first_person", True),
            follow_ups=tone_cfg.get("follow_ups", False),
            follow_up_count=tone_cfg.get("follow_up_count", 3),
            emoji=tone_cfg.get("emoji"),
        )
        self.style = tone_cfg.get("style", DEFAULT_STYLE)
        self.skip_tone_below = tone_cfg.get("skip_below_chars", 12)
        self.min_score = self.config.get("matcher", {}).get("min_score", MIN_FUZZY_SCORE)

        self.revealer = Revealer(
            scheduler if scheduler is not None else AsyncioScheduler(),
            chars_per_second=reveal_cfg.get("chars_per_second", CHARS_PER_SECOND),
            frame_ms=reveal_cfg.get("frame_ms", FRAME_MS),
            short_text_threshold=reveal_cfg.get("short_text_threshold", SHORT_TEXT_THRESHOLD),
            reduced_motion=reveal_cfg.get("reduced_motion", False),
        )
        self.instant = reveal_cfg.get("instant", False)
        self.fast_forward_on_submit = reveal_cfg.get("fast_forward_on_submit", True)

        self.fallback_text = conv_cfg.get("fallback_text", DEFAULT_FALLBACK_TEXT)
        self.source_prefix = conv_cfg.get("source_prefix", "Source: ")

        self._messages: List[Message] = []
        self._suggestions: List[Suggestion] = starter_suggestions()
        self._listeners: List[Callable[["ConversationController"], None]] = []

    # -- lifecycle -------------------------------------------------------

    def load(self, document: Any) -> int:
        return len(self.knowledge_base.load(document))

    def load_path(self, path: str) -> int:
        return len(self.knowledge_base.load_path(path))

    def dispose(self) -> None:
        self.revealer.dispose()
        self.knowledge_base.dispose()
        self._listeners.clear()

    # -- feeds -----------------------------------------------------------

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def suggestions(self) -> List[Suggestion]:
        return list(self._suggestions)

    def message_feed(self) -> List[Dict[str, Any]]:
        return [msg.to_feed() for msg in self._messages]

    def suggestion_feed(self) -> List[str]:
        return [s.label for s in self._suggestions]

    def subscribe(self, listener: Callable[["ConversationController"], None]) -> None:
        self._listeners.append(listener)

    # -- turns -----------------------------------------------------------

    def submit(self, text: str, instant: Optional[bool] = None) -> Optional[TurnResult]:
        query = (text or "").strip()
        if not query:
            return None

        if self.fast_forward_on_submit:
            self.revealer.fast_forward_all()

        user_message = self._append(Role.USER, query, RevealState.COMPLETE)
        entry = match(query, self.knowledge_base.entries, min_score=self.min_score)

        source_message = None
        if entry is not None:
            reply = self._append(Role.ASSISTANT, self._style_answer(entry.answer))
            if entry.source:
                source_message = self._append(Role.ASSISTANT, f"{self.source_prefix}{entry.source}", RevealState.COMPLETE)
            self._suggestions = suggest(entry.question)
        else:
            logger.info("No knowledge-base match for %r", query)
            reply = self._append(Role.ASSISTANT, self.fallback_text)
            self._suggestions = fallback_suggestions()

        self._changed()
        self.revealer.start(
            reply.id,
            reply.text,
            on_update=lambda session: self._on_reveal_update(reply, session),
            on_complete=lambda session: self._on_reveal_complete(reply, session),
            instant=self.instant if instant is None else instant,
        )
        return TurnResult(
            user_message=user_message,
            reply=reply,
            entry=entry,
            source_message=source_message,
            suggestions=self.suggestions,
        )

    def select_suggestion(self, label: str) -> Optional[TurnResult]:
        return self.submit(label)

    def fast_forward(self, message_id: str) -> bool:
        return self.revealer.fast_forward(message_id)

    def _style_answer(self, answer: str) -> str:
        if len(answer) < self.skip_tone_below:
            return answer
        return self.tone.transform(answer, self.style)

    def _append(self, role: Role, text: str, state: RevealState = RevealState.PENDING) -> Message:
        message = Message(id=uuid.uuid4().hex, role=role, text=text, reveal_state=state)
        if state is RevealState.COMPLETE:
            message.visible_text = text
        self._messages.append(message)
        return message

    def _on_reveal_update(self, message: Message, session: RevealSession) -> None:
        message.visible_text = session.visible
        if session.state is RevealState.REVEALING:
            message.reveal_state = RevealState.REVEALING
        self._changed()

    def _on_reveal_complete(self, message: Message, session: RevealSession) -> None:
        message.visible_text = session.text
        message.reveal_state = RevealState.COMPLETE
        self._changed()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)
