"""Silent speech backend for headless runs and machines without a TTS engine.

Every request completes on the next drain_results() call, which keeps
the speaking highlight visible for exactly one poll interval.
"""

from __future__ import annotations

import logging
import uuid
from typing import List

from vocab_marquee.speech.base import (
    CANCELLED_ERROR,
    SpeechOutcome,
    SpeechRequest,
    SpeechResult,
    SpeechService,
    Voice,
)

logger = logging.getLogger(__name__)


class SilentSpeechService(SpeechService):

    def __init__(self) -> None:
        self._pending: List[str] = []
        self._results: List[SpeechResult] = []

    def voices(self) -> List[Voice]:
        return []

    def speak(self, request: SpeechRequest) -> str:
        utterance_id = uuid.uuid4().hex
        logger.info("(silent) %s", request.text)
        self._pending.append(utterance_id)
        return utterance_id

    def cancel(self) -> None:
        for utterance_id in self._pending:
            self._results.append(SpeechResult(
                utterance_id, SpeechOutcome.FAILED, CANCELLED_ERROR
            ))
        self._pending = []

    def drain_results(self) -> List[SpeechResult]:
        results = self._results
        results.extend(
            SpeechResult(utterance_id, SpeechOutcome.COMPLETED)
            for utterance_id in self._pending
        )
        self._pending = []
        self._results = []
        return results

    @property
    def is_speaking(self) -> bool:
        return bool(self._pending)
