from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from .types import RevealState

logger = logging.getLogger(__name__)

FRAME_MS = 33
CHARS_PER_SECOND = 120
SHORT_TEXT_THRESHOLD = 80

_EPSILON = 1e-9


class PeriodicTask:
    """Handle for a repeating callback."""

    def cancel(self) -> None:
        raise NotImplementedError

    def is_done(self) -> bool:
        raise NotImplementedError


class AsyncioTask(PeriodicTask):
    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._timer = loop.call_later(interval, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()
        if not self._cancelled:
            self._timer = self._loop.call_later(self._interval, self._run)

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    def is_done(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Runs periodic callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self.loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        loop = self.loop or asyncio.get_running_loop()
        return AsyncioTask(loop, interval, callback)


class VirtualTask(PeriodicTask):
    def __init__(self, interval: float, callback: Callable[[], None], next_at: float) -> None:
        self.interval = interval
        self.callback = callback
        self.next_at = next_at
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def is_done(self) -> bool:
        return self._cancelled


class VirtualScheduler:
    """Scheduler driven by an explicit clock; time only moves through advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self._tasks: List[VirtualTask] = []

    def call_every(self, interval: float, callback: Callable[[], None]) -> PeriodicTask:
        task = VirtualTask(interval, callback, self.now + interval)
        self._tasks.append(task)
        return task

    @property
    def active_tasks(self) -> int:
        return sum(1 for task in self._tasks if not task.is_done())

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            self._tasks = [task for task in self._tasks if not task.is_done()]
            due = [task for task in self._tasks if task.next_at <= target + _EPSILON]
            if not due:
                break
            task = min(due, key=lambda t: t.next_at)
            self.now = max(self.now, task.next_at)
            task.next_at += task.interval
            task.callback()
        self.now = target


class RevealSession:
    """Progressive display of one message's text."""

    def __init__(
        self,
        message_id: str,
        text: str,
        chunk_size: int,
        on_update: Optional[Callable[["RevealSession"], None]] = None,
        on_complete: Optional[Callable[["RevealSession"], None]] = None,
    ) -> None:
        self.message_id = message_id
        self.text = text
        self.chunk_size = chunk_size
        self.state = RevealState.PENDING
        self.shown = 0
        self._on_update = on_update
        self._on_complete = on_complete
        self._task: Optional[PeriodicTask] = None
        self._notified = False

    @property
    def visible(self) -> str:
        return self.text[: self.shown]

    @property
    def is_complete(self) -> bool:
        return self.state is RevealState.COMPLETE

    def step(self) -> None:
        if self.is_complete:
            return
        self.shown = min(len(self.text), self.shown + self.chunk_size)
        self._notify_update()
        if self.shown >= len(self.text):
            self._finish()

    def fast_forward(self) -> bool:
        if self.is_complete:
            return False
        self.shown = len(self.text)
        self._notify_update()
        self._finish()
        return True

    def run_on(self, scheduler, interval: float) -> None:
        self.teardown()
        self._task = scheduler.call_every(interval, self.step)

    def teardown(self) -> None:
        """Stop the timer without completing."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _finish(self) -> None:
        self.teardown()
        self.state = RevealState.COMPLETE
        if not self._notified:
            self._notified = True
            if self._on_complete is not None:
                self._on_complete(self)

    def _notify_update(self) -> None:
        if self._on_update is not None:
            self._on_update(self)


class Revealer:
    """Paces answer text into view, one session per message id."""

    def __init__(
        self,
        scheduler,
        chars_per_second: float = CHARS_PER_SECOND,
        frame_ms: float = FRAME_MS,
        short_text_threshold: int = SHORT_TEXT_THRESHOLD,
        reduced_motion: bool = False,
    ) -> None:
        self.scheduler = scheduler
        self.chars_per_second = chars_per_second
        self.frame_ms = frame_ms
        self.short_text_threshold = short_text_threshold
        self.reduced_motion = reduced_motion
        self._sessions: Dict[str, RevealSession] = {}

    @property
    def chunk_size(self) -> int:
        frames_per_second = 1000.0 / self.frame_ms
        return max(1, int(self.chars_per_second // frames_per_second))

    def start(
        self,
        message_id: str,
        text: str,
        on_update: Optional[Callable[[RevealSession], None]] = None,
        on_complete: Optional[Callable[[RevealSession], None]] = None,
        instant: bool = False,
    ) -> RevealSession:
        prior = self._sessions.pop(message_id, None)
        if prior is not None:
            logger.debug("Tearing down previous reveal of %s", message_id)
            prior.teardown()

        text = text or ""
        session = RevealSession(message_id, text, self.chunk_size, on_update, self._wrap_complete(on_complete))
        if self.reduced_motion or instant or not text or len(text) < self.short_text_threshold:
            session.fast_forward()
            return session

        self._sessions[message_id] = session
        session.state = RevealState.REVEALING
        logger.debug("Revealing %s (%d chars, %d per frame)", message_id, len(text), session.chunk_size)
        session.step()
        if not session.is_complete:
            session.run_on(self.scheduler, self.frame_ms / 1000.0)
        return session

    def fast_forward(self, message_id: str) -> bool:
        session = self._sessions.get(message_id)
        if session is None:
            return False
        logger.debug("Fast-forwarding %s", message_id)
        return session.fast_forward()

    def fast_forward_all(self) -> None:
        for message_id in list(self._sessions):
            self.fast_forward(message_id)

    def is_active(self, message_id: str) -> bool:
        return message_id in self._sessions

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def dispose(self) -> None:
        for session in self._sessions.values():
            session.teardown()
        if self._sessions:
            logger.debug("Disposed %d active reveals", len(self._sessions))
        self._sessions.clear()

    def _wrap_complete(self, on_complete):
        def _done(session: RevealSession) -> None:
            if self._sessions.get(session.message_id) is session:
                del self._sessions[session.message_id]
            if on_complete is not None:
                on_complete(session)

        return _done
