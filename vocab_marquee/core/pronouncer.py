"""Pronouncer: speaks an activated word and tracks the "speaking" mark.

WHY: Clicking words in quick succession must never leave two words
talking over each other or two words highlighted as speaking. Speech
engines report completion late and sometimes not at all for interrupted
utterances, so the visual reset cannot rely on the old utterance's
callback arriving before the new one starts.

HOW: activate() cancels the in-flight utterance, clears SPEAKING from
every item that holds it, builds a request (en-US, rate 0.9, best
English voice), marks the new item SPEAKING, and issues exactly one
speak(). The in-flight slot remembers (utterance id, item). poll()
drains outcomes from the service; each outcome resets only its own
item and clears the slot only when it is the current utterance, so a
late "cancelled" report for an old word cannot clobber the new one.

RULES:
- At most one DisplayItem is SPEAKING at any time
- Only the Pronouncer sets or clears SPEAKING
- Speech failures are logged at warning level and never raised
- Enter, Return, and Space are equivalent to a pointer click
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from vocab_marquee.config import SPEECH_LOCALE, SPEECH_PITCH, SPEECH_RATE, SPEECH_VOLUME
from vocab_marquee.core.stream import DisplayItem, ItemState
from vocab_marquee.core.surface import RenderSurface
from vocab_marquee.speech.base import (
    SpeechOutcome,
    SpeechRequest,
    SpeechResult,
    SpeechService,
    Voice,
)
from vocab_marquee.speech.voices import select_voice

logger = logging.getLogger(__name__)

ACTIVATION_KEYS = frozenset({"Return", "Enter", "KP_Enter", "space", " "})
"""Key names (Tk keysyms and DOM key values) that activate a focused word."""


def build_speech_request(
    text: str,
    voices: Sequence[Voice],
    locale: str = SPEECH_LOCALE,
    rate: float = SPEECH_RATE,
) -> SpeechRequest:
    """Request for one word: fixed locale, slightly slow, best voice."""
    return SpeechRequest(
        text=text,
        locale=locale,
        rate=rate,
        pitch=SPEECH_PITCH,
        volume=SPEECH_VOLUME,
        voice=select_voice(voices, locale),
    )


@dataclass
class Utterance:
    """The in-flight speech slot."""

    utterance_id: str
    item: DisplayItem


class Pronouncer:
    """Drives a SpeechService on behalf of DisplayItems."""

    def __init__(
        self,
        service: SpeechService,
        surface: RenderSurface,
        items: Optional[Callable[[], Iterable[DisplayItem]]] = None,
        locale: str = SPEECH_LOCALE,
        rate: float = SPEECH_RATE,
    ) -> None:
        self._service = service
        self._surface = surface
        self._items = items or (lambda: [])
        self._locale = locale
        self._rate = rate
        self._current: Optional[Utterance] = None
        # Every utterance still awaiting an outcome, keyed by id
        self._issued: Dict[str, DisplayItem] = {}

    @property
    def current(self) -> Optional[Utterance]:
        return self._current

    def build_request(self, text: str) -> SpeechRequest:
        # Voices may populate after startup, so query on every activation
        return build_speech_request(
            text, self._service.voices(), self._locale, self._rate
        )

    def activate(self, item: DisplayItem) -> str:
        """Pronounce ``item``, interrupting whatever was speaking.

        Returns:
            The utterance id issued for ``item``.
        """
        if self._current is not None:
            logger.debug("Interrupting '%s'", self._current.item.label)
            self._service.cancel()
            self._current = None

        self._clear_speaking()

        request = self.build_request(item.label)
        if item.set_state(ItemState.SPEAKING):
            self._surface.update_item(item)
        utterance_id = self._service.speak(request)
        self._current = Utterance(utterance_id, item)
        self._issued[utterance_id] = item
        logger.debug(
            "Speaking '%s' (voice=%s)",
            item.label, request.voice.name if request.voice else "default",
        )
        return utterance_id

    def handle_key(self, item: DisplayItem, key: str) -> bool:
        """Activate ``item`` for Enter/Space; returns True when handled."""
        if key not in ACTIVATION_KEYS:
            return False
        self.activate(item)
        return True

    def poll(self) -> List[SpeechResult]:
        """Apply outcomes delivered by the service since the last poll."""
        results = self._service.drain_results()
        for result in results:
            self._apply(result)
        return results

    def cancel(self) -> None:
        """Stop speech and reset visual state (page teardown)."""
        if self._current is not None or self._service.is_speaking:
            self._service.cancel()
        self._current = None
        self._clear_speaking()

    def _apply(self, result: SpeechResult) -> None:
        item = self._issued.pop(result.utterance_id, None)
        is_current = (
            self._current is not None
            and self._current.utterance_id == result.utterance_id
        )

        if result.outcome == SpeechOutcome.FAILED:
            if result.cancelled or not is_current:
                logger.debug("Utterance %s ended early: %s", result.utterance_id, result.error)
            else:
                logger.warning(
                    "Speech synthesis error for '%s': %s",
                    item.label if item else "?", result.error,
                )

        if is_current:
            self._current = None
        if item is not None and item.state == ItemState.SPEAKING and (
            is_current or self._current is None or self._current.item is not item
        ):
            item.set_state(ItemState.IDLE)
            self._surface.update_item(item)

    def _clear_speaking(self) -> None:
        targets = [item for item in self._items() if item.state == ItemState.SPEAKING]
        targets.extend(self._issued.values())
        for item in targets:
            if item.state == ItemState.SPEAKING:
                item.set_state(ItemState.IDLE)
                self._surface.update_item(item)
