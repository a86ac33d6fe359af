"""Deadline timer driven by explicit polling from the owner's loop."""

from __future__ import annotations

import time
from collections.abc import Callable


class Timer:
    """Calls *callback* once *duration* seconds after start, or every *duration* if repeating.

    The timer never runs on its own: the owner calls :meth:`poll` from its
    loop, and the callback fires during the poll that first sees the
    deadline has passed.
    """

    def __init__(
        self,
        duration: float = 1.0,
        callback: Callable[[], object] | None = None,
        repeat: bool = False,
    ) -> None:
        if duration < 0:
            raise ValueError(f"duration must not be negative, got {duration}")
        self.duration = float(duration)
        self.callback = callback
        self.repeat = repeat
        self._deadline: float | None = None

    @property
    def active(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def start(self, now: float | None = None) -> None:
        """Arm the timer, replacing any deadline already set."""
        if now is None:
            now = time.monotonic()
        self._deadline = now + self.duration

    def poll(self, now: float | None = None) -> bool:
        """Fire the callback if the deadline has passed; True if it fired."""
        if self._deadline is None:
            return False
        if now is None:
            now = time.monotonic()
        if now < self._deadline:
            return False

        if self.repeat:
            # Measured from the scheduled time so ticks do not drift.
            self._deadline += self.duration
        else:
            self._deadline = None

        if self.callback is not None:
            self.callback()
        return True

    def cancel(self) -> None:
        self._deadline = None