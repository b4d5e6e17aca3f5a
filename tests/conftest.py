"""Shared test doubles for the vocab_marquee test suite.

WHY: The tracker, pronouncer, and controller talk to three host-side
collaborators: a rendering surface, a frame clock, and a speech
service. Tests need deterministic stand-ins for all three so geometry,
frames, and speech outcomes happen exactly when a test says so.

HOW: FakeSurface stores item centers set by the test and records every
repaint. ManualFrameClock queues frame callbacks until step() runs them.
ScriptedSpeechService records requests and emits outcomes only when the
test calls complete() / fail().

RULES:
- Nothing here touches tkinter or a real speech engine
- Geometry is keyed by item identity, so the two copies of a word can
  sit at different positions
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from vocab_marquee.core.clock import FrameCallback, FrameClock
from vocab_marquee.core.stream import DisplayItem
from vocab_marquee.core.surface import Bounds, RenderSurface
from vocab_marquee.core.units import Unit
from vocab_marquee.speech.base import (
    CANCELLED_ERROR,
    SpeechOutcome,
    SpeechRequest,
    SpeechResult,
    SpeechService,
    Voice,
)

ITEM_HEIGHT = 20.0


class FakeSurface(RenderSurface):
    """RenderSurface with test-controlled geometry."""

    def __init__(self, container: Optional[Bounds] = Bounds(0.0, 200.0)) -> None:
        self.container = container
        self.mounted: List[DisplayItem] = []
        self.centers: Dict[int, float] = {}
        self.updates: List[DisplayItem] = []
        self.durations: List[str] = []
        self.clear_count = 0
        self.bounds_reads = 0

    def set_center(self, item: DisplayItem, center: float) -> None:
        self.centers[id(item)] = center

    def set_centers(self, items: Sequence[DisplayItem], centers: Sequence[float]) -> None:
        for item, center in zip(items, centers):
            self.set_center(item, center)

    def mount(self, items: Sequence[DisplayItem]) -> None:
        self.mounted = list(items)

    def clear(self) -> None:
        self.mounted = []
        self.centers = {}
        self.clear_count += 1

    def container_bounds(self) -> Optional[Bounds]:
        self.bounds_reads += 1
        return self.container

    def item_bounds(self, item: DisplayItem) -> Optional[Bounds]:
        center = self.centers.get(id(item))
        if center is None:
            return None
        return Bounds(top=center - ITEM_HEIGHT / 2, height=ITEM_HEIGHT)

    def update_item(self, item: DisplayItem) -> None:
        self.updates.append(item)

    def set_scroll_duration(self, duration: str) -> None:
        self.durations.append(duration)


class ManualFrameClock(FrameClock):
    """FrameClock whose frames run only when the test calls step()."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.pending: Dict[int, FrameCallback] = {}
        self.cancelled: List[int] = []

    def request_frame(self, callback: FrameCallback) -> Any:
        handle = next(self._counter)
        self.pending[handle] = callback
        return handle

    def cancel_frame(self, handle: Any) -> None:
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def step(self, frames: int = 1) -> None:
        for _ in range(frames):
            callbacks = list(self.pending.values())
            self.pending.clear()
            for callback in callbacks:
                callback()


class ScriptedSpeechService(SpeechService):
    """SpeechService whose outcomes are emitted by the test."""

    def __init__(self, voices: Optional[List[Voice]] = None) -> None:
        self._voices = list(voices or [])
        self._ids = itertools.count(1)
        self.requests: List[Tuple[str, SpeechRequest]] = []
        self.outstanding: List[str] = []
        self.results: List[SpeechResult] = []
        self.cancel_count = 0
        self.shutdown_count = 0

    def voices(self) -> List[Voice]:
        return list(self._voices)

    def set_voices(self, voices: List[Voice]) -> None:
        self._voices = list(voices)

    def speak(self, request: SpeechRequest) -> str:
        utterance_id = "u{}".format(next(self._ids))
        self.requests.append((utterance_id, request))
        self.outstanding.append(utterance_id)
        return utterance_id

    def cancel(self) -> None:
        self.cancel_count += 1
        for utterance_id in self.outstanding:
            self.results.append(
                SpeechResult(utterance_id, SpeechOutcome.FAILED, CANCELLED_ERROR)
            )
        self.outstanding = []

    def complete(self, utterance_id: str) -> None:
        self.outstanding.remove(utterance_id)
        self.results.append(SpeechResult(utterance_id, SpeechOutcome.COMPLETED))

    def fail(self, utterance_id: str, error: str = "synthesis-failed") -> None:
        self.outstanding.remove(utterance_id)
        self.results.append(SpeechResult(utterance_id, SpeechOutcome.FAILED, error))

    def drain_results(self) -> List[SpeechResult]:
        results, self.results = self.results, []
        return results

    @property
    def is_speaking(self) -> bool:
        return bool(self.outstanding)

    def shutdown(self) -> None:
        self.shutdown_count += 1
        self.cancel()

    @property
    def spoken_texts(self) -> List[str]:
        return [request.text for _, request in self.requests]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

SAMPLE_UNITS = [
    Unit(id=1, title="Personality", words=("Introvert", "Extrovert", "Humble")),
    Unit(id=2, title="Technology", words=("Algorithm", "Database")),
]


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def speech() -> ScriptedSpeechService:
    return ScriptedSpeechService()


@pytest.fixture
def sample_units() -> List[Unit]:
    return list(SAMPLE_UNITS)


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Poll a condition (for real worker threads) with a timeout."""
    import time

    def _wait(condition: Callable[[], bool], timeout: float = 3.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if condition():
                return True
            time.sleep(0.01)
        return condition()

    return _wait
