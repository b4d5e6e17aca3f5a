"""Frame clock abstraction for per-frame polling.

WHY: The tracker samples positions once per rendered frame, but the core
must not depend on any particular toolkit's scheduler.

HOW: FrameClock exposes request/cancel for a single callback. Hosts wrap
their native scheduler (Tk's after/after_cancel, a browser's
requestAnimationFrame, a test's manual stepper).

RULES:
- request_frame() schedules the callback once; recurring loops re-request
- cancel_frame() with a stale or already-fired handle is a no-op
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

FrameCallback = Callable[[], None]


class FrameClock(ABC):
    """Schedules callbacks on the host's next frame."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Schedule ``callback`` for the next frame and return a handle."""

    @abstractmethod
    def cancel_frame(self, handle: Any) -> None:
        """Cancel a pending frame request (no-op if already fired)."""
