"""ActiveWordTracker: highlights the item nearest the container's center line.

WHY: Item positions change continuously because of a scroll animation
the tracker does not control. There is no event for "a word crossed the
center", so the tracker observes the effect instead: once per frame it
samples every item's live position and picks the nearest one.

HOW: find_nearest() is the pure selection rule. ActiveWordTracker.tick()
re-reads the container bounds, computes each item's center and distance
to the anchor, and updates item states. The loop re-requests a frame
from the FrameClock after every tick until stop() is called.

RULES:
- Hovering suspends all state changes; geometry is not even read
- Bounds are re-read every frame (the container may be resized)
- Ties go to the first item in document order
- A SPEAKING item is never downgraded; if it is nearest, no item is ACTIVE
- At most one item is ACTIVE after any tick
- Missing container or item geometry is a no-op frame, not an error
- stop() is idempotent; start() after stop() resumes the loop
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from vocab_marquee.core.clock import FrameClock
from vocab_marquee.core.session import MarqueeSession
from vocab_marquee.core.stream import DisplayItem, ItemState, WordStream
from vocab_marquee.core.surface import RenderSurface

logger = logging.getLogger(__name__)


def find_nearest(anchor: float, centers: Sequence[Optional[float]]) -> Optional[int]:
    """Return the index of the center closest to ``anchor``.

    Entries that are None (item not on the surface) are skipped. Only a
    strictly smaller distance replaces the current best, so the first
    of several equidistant centers wins.

    Returns:
        Index into ``centers``, or None when no center is available.
    """
    best_index: Optional[int] = None
    best_distance = math.inf
    for i, center in enumerate(centers):
        if center is None:
            continue
        distance = abs(center - anchor)
        if distance < best_distance:
            best_distance = distance
            best_index = i
    return best_index


class ActiveWordTracker:
    """Per-frame nearest-item sampler over a WordStream."""

    def __init__(
        self,
        session: MarqueeSession,
        stream: WordStream,
        surface: RenderSurface,
        clock: FrameClock,
    ) -> None:
        self._session = session
        self._stream = stream
        self._surface = surface
        self._clock = clock
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Run the first frame now and keep polling every frame."""
        if self._running:
            return
        self._running = True
        logger.debug("Tracker started over %d items", len(self._stream))
        self._on_frame()

    def stop(self) -> None:
        """Cancel the pending frame. Safe to call when not running."""
        if self._session.frame_handle is not None:
            self._clock.cancel_frame(self._session.frame_handle)
            self._session.frame_handle = None
        if self._running:
            logger.debug("Tracker stopped")
        self._running = False

    def _on_frame(self) -> None:
        self._session.frame_handle = None
        self.tick()
        # tick() may have led to stop(); only reschedule a live loop
        if self._running:
            self._session.frame_handle = self._clock.request_frame(self._on_frame)

    def tick(self) -> Optional[DisplayItem]:
        """Sample geometry once and update ACTIVE marks.

        Returns:
            The nearest item this frame, or None when suspended or when
            there is nothing to track.
        """
        if self._session.is_hovering:
            return None

        container = self._surface.container_bounds()
        items = self._stream.items
        if container is None or not items:
            return None

        anchor = container.center
        centers: List[Optional[float]] = []
        for item in items:
            bounds = self._surface.item_bounds(item)
            centers.append(bounds.center if bounds is not None else None)

        nearest_index = find_nearest(anchor, centers)
        if nearest_index is None:
            return None
        nearest = items[nearest_index]

        for item in items:
            if item.state == ItemState.SPEAKING:
                continue
            target = ItemState.ACTIVE if item is nearest else ItemState.IDLE
            if item.set_state(target):
                self._surface.update_item(item)
        return nearest
