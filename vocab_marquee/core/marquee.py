"""Marquee controller: wires stream, tracker, pronouncer, speed, and units.

WHY: Hosts (the Tk window, tests, any future web host) should only
forward input events and lifecycle calls. Ordering rules such as "stop
the tracker before the old items disappear" belong in one place.

HOW: Marquee owns one MarqueeSession, one WordStream, and one of each
component. Unit changes go through the UnitSelector, whose rebuild hook
stops the tracker, cancels speech, clears the surface, builds and mounts
the new stream, then restarts the tracker.

RULES:
- Rebuild order: stop tracker → cancel speech → clear → build → mount → start
- Activations of items that are no longer in the stream are ignored
- teardown() is idempotent and leaves no frame pending and no speech queued
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from vocab_marquee.core.clock import FrameClock
from vocab_marquee.core.pronouncer import Pronouncer
from vocab_marquee.core.selector import UnitSelector
from vocab_marquee.core.session import MarqueeSession
from vocab_marquee.core.speed import SpeedControl
from vocab_marquee.core.stream import DisplayItem, WordStream
from vocab_marquee.core.surface import RenderSurface
from vocab_marquee.core.tracker import ActiveWordTracker
from vocab_marquee.core.units import Unit
from vocab_marquee.speech.base import SpeechResult, SpeechService

logger = logging.getLogger(__name__)


class Marquee:
    """One marquee widget and its page lifecycle."""

    def __init__(
        self,
        units: Sequence[Unit],
        surface: RenderSurface,
        clock: FrameClock,
        speech: SpeechService,
        session: Optional[MarqueeSession] = None,
    ) -> None:
        self.session = session or MarqueeSession()
        self.stream = WordStream()
        self.surface = surface
        self.speech = speech
        self.tracker = ActiveWordTracker(self.session, self.stream, surface, clock)
        self.pronouncer = Pronouncer(speech, surface, items=lambda: self.stream.items)
        self.speed = SpeedControl(surface)
        self.selector = UnitSelector(units, self.session, self._rebuild)
        self._torn_down = False

    @property
    def items(self) -> List[DisplayItem]:
        return self.stream.items

    def start(self, unit_id: int) -> None:
        """Build the marquee for ``unit_id`` and start tracking."""
        self.load_unit(unit_id)

    def load_unit(self, unit_id: int) -> bool:
        """Switch units; returns False when ``unit_id`` is already shown."""
        return self.selector.select(unit_id)

    def _rebuild(self, unit: Unit) -> None:
        self.tracker.stop()
        self.pronouncer.cancel()
        self.surface.clear()
        items = self.stream.build(unit.words)
        self.surface.mount(items)
        logger.info("Built marquee for %s (%d items)", unit.label, len(items))
        self.tracker.start()

    def activate(self, item: DisplayItem) -> Optional[str]:
        """Pronounce ``item``; returns the utterance id or None if stale."""
        if item not in self.stream:
            logger.debug("Ignoring activation of stale item %r", item)
            return None
        return self.pronouncer.activate(item)

    def handle_key(self, item: DisplayItem, key: str) -> bool:
        if item not in self.stream:
            return False
        return self.pronouncer.handle_key(item, key)

    def hover_enter(self) -> None:
        self.session.is_hovering = True

    def hover_leave(self) -> None:
        # The next frame recomputes the active item
        self.session.is_hovering = False

    def on_speed_change(self, value: float) -> float:
        return self.speed.on_speed_change(value)

    def poll_speech(self) -> List[SpeechResult]:
        return self.pronouncer.poll()

    def teardown(self) -> None:
        """Cancel speech, stop the frame loop, release the speech engine."""
        if self._torn_down:
            return
        self._torn_down = True
        self.pronouncer.cancel()
        self.tracker.stop()
        self.speech.shutdown()
        self.session.teardown()
        logger.info("Marquee torn down")
