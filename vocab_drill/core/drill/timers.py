"""Single-slot deferred actions owned by a drill session.

Sessions pause briefly after some events (a wrong pair flashes before it is
cleared, a finished page lingers before the next one shows). The engine is
synchronous, so a pause is a callback with a due time that fires when the
caller polls :meth:`SessionTimer.fire_if_due`. A new learner action either runs
it early with :meth:`SessionTimer.flush` or drops it with :meth:`SessionTimer.cancel`.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loguru import logger


class TimerKind(str, Enum):
    MISMATCH_COOLDOWN = "mismatch_cooldown"
    PAGE_ADVANCE = "page_advance"
    DIALOGUE_ADVANCE = "dialogue_advance"
    PRACTICE_ADVANCE = "practice_advance"


@dataclass(frozen=True, slots=True)
class PendingTimer:
    kind: TimerKind
    due_at: float
    callback: Callable[[], None]


class SessionTimer:
    """Holds at most one pending callback; scheduling a new one replaces it."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._pending: Optional[PendingTimer] = None

    @property
    def pending(self) -> Optional[PendingTimer]:
        return self._pending

    @property
    def pending_kind(self) -> Optional[TimerKind]:
        return self._pending.kind if self._pending else None

    def now(self) -> float:
        return self._clock()

    def remaining_ms(self) -> Optional[int]:
        if self._pending is None:
            return None
        return max(0, int(round((self._pending.due_at - self._clock()) * 1000)))

    def schedule(self, kind: TimerKind, delay_ms: int, callback: Callable[[], None]) -> None:
        if self._pending is not None:
            logger.debug("Replacing pending timer", previous=self._pending.kind.value, kind=kind.value)
        self._pending = PendingTimer(kind=kind, due_at=self._clock() + delay_ms / 1000.0, callback=callback)

    def cancel(self) -> Optional[TimerKind]:
        pending, self._pending = self._pending, None
        return pending.kind if pending else None

    def flush(self) -> Optional[TimerKind]:
        """Run the pending callback immediately, whether or not it is due."""

        pending, self._pending = self._pending, None
        if pending is None:
            return None
        pending.callback()
        return pending.kind

    def fire_if_due(self, now: Optional[float] = None) -> Optional[TimerKind]:
        if self._pending is None:
            return None
        current = self._clock() if now is None else now
        if current < self._pending.due_at:
            return None
        return self.flush()
