"""Ambient bootstrap context carrying an optional overall deadline."""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class BootContext:
    """Deadline shared by every provider call made during one bootstrap.

    ``deadline`` is a :func:`time.monotonic` timestamp, or ``None`` for no
    overall limit.  Providers derive each request's timeout from it via
    :meth:`request_timeout`.
    """

    deadline: float | None = None

    @classmethod
    def background(cls) -> BootContext:
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> BootContext:
        return cls(deadline=time.monotonic() + seconds)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` when unbounded."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def expired(self) -> bool:
        left = self.remaining()
        return left is not None and left <= 0

    def request_timeout(self, default: float) -> float:
        """Return ``min(default, remaining())`` for a single request."""
        left = self.remaining()
        if left is None:
            return default
        return max(0.0, min(default, left))
