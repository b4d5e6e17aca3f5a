"""Rendering surface contract consumed by the tracker and controller.

WHY: The tracker only observes geometry; it never draws. Keeping the
surface behind an ABC lets the same core drive a Tkinter canvas, a
headless test double, or any other host that can report bounds.

HOW: Bounds carries the two numbers the tracker needs (top, height).
RenderSurface declares the handful of operations the core calls.

RULES:
- container_bounds() / item_bounds() return None when the element is
  absent; callers treat None as "nothing to track", never as an error
- Bounds are re-read every frame; implementations must not cache them
- set_scroll_duration() receives a formatted period such as "37.5s"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from vocab_marquee.core.stream import DisplayItem


@dataclass(frozen=True)
class Bounds:
    """Vertical extent of an on-screen element, in surface pixels."""

    top: float
    height: float

    @property
    def center(self) -> float:
        return self.top + self.height / 2


class RenderSurface(ABC):
    """Host-side rendering surface for the marquee.

    To add a new host:
    1. Subclass RenderSurface
    2. Draw DisplayItems in mount() and repaint them in update_item()
    3. Report live geometry from container_bounds() and item_bounds()
    """

    @abstractmethod
    def mount(self, items: Sequence[DisplayItem]) -> None:
        """Render a freshly built stream of items, in order."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every rendered item and its input handlers."""

    @abstractmethod
    def container_bounds(self) -> Optional[Bounds]:
        """Current bounds of the marquee container, or None if absent."""

    @abstractmethod
    def item_bounds(self, item: DisplayItem) -> Optional[Bounds]:
        """Current bounds of one rendered item, or None if absent."""

    @abstractmethod
    def update_item(self, item: DisplayItem) -> None:
        """Repaint one item after its state changed."""

    @abstractmethod
    def set_scroll_duration(self, duration: str) -> None:
        """Apply a scroll-animation period such as ``"37.5s"``."""
