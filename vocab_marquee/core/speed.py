"""SpeedControl: maps the speed slider to a scroll-animation period.

WHY: Learners think in "faster / slower", the animation thinks in
seconds per loop. A higher slider value must always mean a shorter
period, and the two ends of the slider must land on fixed durations.

HOW: Linear interpolation, inverted: slider 10 → 60s, slider 100 → 10s.
The result is formatted the way the surface expects ("37.5s") and
applied through RenderSurface.set_scroll_duration().

RULES:
- Domain: 10..100 inclusive; out-of-range values are clamped
- Range: 60s..10s, strictly decreasing in the slider value
- format_duration() drops a trailing ".0" (60 → "60s", 37.5 → "37.5s")
- advance_offset() always returns an offset inside one loop height
"""

from __future__ import annotations

import logging

from vocab_marquee.core.surface import RenderSurface

logger = logging.getLogger(__name__)

MIN_SLIDER = 10
MAX_SLIDER = 100
MIN_DURATION = 10.0
MAX_DURATION = 60.0


def slider_to_duration(value: float) -> float:
    """Convert a slider position to a scroll period in seconds."""
    clamped = min(max(value, MIN_SLIDER), MAX_SLIDER)
    if clamped != value:
        logger.debug("Slider value %s clamped to %s", value, clamped)
    fraction = (clamped - MIN_SLIDER) / (MAX_SLIDER - MIN_SLIDER)
    return MAX_DURATION - fraction * (MAX_DURATION - MIN_DURATION)


def format_duration(seconds: float) -> str:
    """Format a period for the surface, e.g. ``37.5`` → ``"37.5s"``."""
    return "{:g}s".format(round(seconds, 3))


def advance_offset(offset: float, elapsed_s: float, loop_height: float, duration_s: float) -> float:
    """Scroll offset after ``elapsed_s`` seconds, wrapped into ``[0, loop_height)``.

    One full period moves the content by exactly ``loop_height``. A long
    stall can advance by several loops; the modulo keeps the offset
    inside the first copy so the seam never shows blank space.
    """
    if loop_height <= 0 or duration_s <= 0:
        return offset
    return (offset + loop_height * elapsed_s / duration_s) % loop_height


class SpeedControl:
    """Applies slider changes to a rendering surface."""

    def __init__(self, surface: RenderSurface) -> None:
        self._surface = surface
        self.duration = slider_to_duration(MIN_SLIDER + (MAX_SLIDER - MIN_SLIDER) / 2)

    def on_speed_change(self, value: float) -> float:
        """Handle a slider ``input`` event; returns the applied duration."""
        self.duration = slider_to_duration(value)
        self._surface.set_scroll_duration(format_duration(self.duration))
        return self.duration
