"""Offline speech backend built on pyttsx3.

WHY: pyttsx3 drives the platform's own engine (SAPI5, NSSpeechSynthesizer,
eSpeak) with no network access. Its runAndWait() blocks until the
utterance finishes, which would freeze the UI and leave no point at
which an in-flight word can be interrupted.

HOW: A daemon worker thread owns the engine; pyttsx3 engines must be
used from the thread that created them. The worker runs the engine's
external loop (startLoop(False) + iterate()). speak() puts requests on
a queue; the worker speaks them one at a time, checking for a cancel
between iterations and calling engine.stop() itself. Outcomes go on a
result queue that drain_results() empties on the caller's thread.

RULES:
- tkinter and the Pronouncer are NEVER touched from the worker thread
- engine.stop() is only ever called on the worker thread
- cancel() bumps an epoch; requests queued before it never start, even
  one the worker has already taken off the queue
- The engine is created lazily on the worker; voices() is empty until then
- Request rate is a factor applied to the engine's base words-per-minute
- A request without a voice uses the engine's default voice
- pitch has no pyttsx3 property and is ignored
- A failed engine start turns every request into a FAILED result
"""

from __future__ import annotations

import logging
import queue
import threading
import time
import uuid
from typing import Any, Callable, List, Optional, Set, Tuple

import pyttsx3

from vocab_marquee.speech.base import (
    CANCELLED_ERROR,
    SpeechOutcome,
    SpeechRequest,
    SpeechResult,
    SpeechService,
    Voice,
)

logger = logging.getLogger(__name__)

_DEFAULT_BASE_RATE = 200
_ITERATE_INTERVAL_S = 0.01
_STOP = object()


def _voice_locale(raw_voice: Any) -> str:
    """Extract a locale tag from a pyttsx3 voice object.

    eSpeak reports languages as bytes with a leading priority byte
    (b"\\x05en-us"); other drivers use plain strings like "en_US".
    """
    for lang in getattr(raw_voice, "languages", None) or []:
        if isinstance(lang, (bytes, bytearray)):
            lang = bytes(lang).decode(errors="ignore")
        text = "".join(ch for ch in str(lang) if ch.isprintable()).strip()
        if text:
            return text
    return ""


def _to_voice(raw_voice: Any) -> Voice:
    return Voice(
        id=str(getattr(raw_voice, "id", "")),
        name=str(getattr(raw_voice, "name", "") or ""),
        locale=_voice_locale(raw_voice),
    )


class Pyttsx3SpeechService(SpeechService):
    """SpeechService backed by a pyttsx3 engine on a worker thread."""

    def __init__(self, engine_factory: Optional[Callable[[], Any]] = None) -> None:
        self._engine_factory = engine_factory or pyttsx3.init
        self._requests: queue.Queue = queue.Queue()
        self._results: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._voices: List[Voice] = []
        self._cancelled: Set[str] = set()
        self._current_id: Optional[str] = None
        self._finished: Set[str] = set()
        self._epoch = 0
        self._outstanding = 0
        self._default_voice_id: Optional[str] = None

        self._worker = threading.Thread(
            target=self._run, name="pyttsx3-speech", daemon=True
        )
        self._worker.start()

    # ------------------------------------------------------------------
    # SpeechService API (caller's thread)
    # ------------------------------------------------------------------

    def voices(self) -> List[Voice]:
        with self._lock:
            return list(self._voices)

    def speak(self, request: SpeechRequest) -> str:
        utterance_id = uuid.uuid4().hex
        with self._lock:
            self._outstanding += 1
            epoch = self._epoch
        self._requests.put((utterance_id, request, epoch))
        return utterance_id

    def cancel(self) -> None:
        dropped: List[str] = []
        with self._lock:
            self._epoch += 1
            if self._current_id is not None:
                self._cancelled.add(self._current_id)
        while True:
            try:
                item = self._requests.get_nowait()
            except queue.Empty:
                break
            if item is _STOP:
                self._requests.put(_STOP)
                break
            dropped.append(item[0])

        for utterance_id in dropped:
            self._finish(SpeechResult(utterance_id, SpeechOutcome.FAILED, CANCELLED_ERROR))

    def drain_results(self) -> List[SpeechResult]:
        results: List[SpeechResult] = []
        while True:
            try:
                results.append(self._results.get_nowait())
            except queue.Empty:
                return results

    @property
    def is_speaking(self) -> bool:
        with self._lock:
            return self._outstanding > 0

    def shutdown(self) -> None:
        self.cancel()
        self._requests.put(_STOP)
        self._worker.join(timeout=2.0)

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _finish(self, result: SpeechResult) -> None:
        with self._lock:
            self._outstanding = max(0, self._outstanding - 1)
            self._cancelled.discard(result.utterance_id)
        self._results.put(result)

    def _next_request(self) -> Any:
        return self._requests.get()

    def _begin(self, utterance_id: str, epoch: int) -> bool:
        """Claim ``utterance_id`` as current unless a cancel came after it was queued."""
        with self._lock:
            if epoch != self._epoch:
                return False
            self._current_id = utterance_id
            return True

    def _start_engine(self) -> Tuple[Any, Optional[str]]:
        try:
            engine = self._engine_factory()
        except Exception as e:  # noqa: BLE001 (any driver failure disables speech)
            logger.warning("Speech engine unavailable: %s", e)
            return None, str(e)

        try:
            raw_voices = engine.getProperty("voices") or []
            self._default_voice_id = engine.getProperty("voice")
        except Exception:  # noqa: BLE001
            logger.debug("Could not list voices", exc_info=True)
            raw_voices = []
        with self._lock:
            self._voices = [_to_voice(v) for v in raw_voices]
        logger.info("Speech engine ready with %d voice(s)", len(self._voices))

        engine.connect("finished-utterance", self._on_finished)
        engine.startLoop(False)
        return engine, None

    def _on_finished(self, name: Any = None, completed: bool = True) -> None:
        with self._lock:
            # Late reports for a stopped utterance are ignored
            if str(name) == self._current_id:
                self._finished.add(str(name))

    def _speak_one(self, engine: Any, utterance_id: str, request: SpeechRequest,
                   base_rate: int) -> SpeechResult:
        engine.setProperty("rate", int(base_rate * request.rate))
        engine.setProperty("volume", request.volume)
        voice_id = request.voice.id if request.voice is not None else self._default_voice_id
        if voice_id is not None:
            engine.setProperty("voice", voice_id)
        engine.say(request.text, utterance_id)

        while True:
            with self._lock:
                cancelled = utterance_id in self._cancelled
                finished = utterance_id in self._finished
            if cancelled:
                engine.stop()
                return SpeechResult(utterance_id, SpeechOutcome.FAILED, CANCELLED_ERROR)
            if finished:
                return SpeechResult(utterance_id, SpeechOutcome.COMPLETED)
            engine.iterate()
            time.sleep(_ITERATE_INTERVAL_S)

    def _run(self) -> None:
        engine, engine_error = self._start_engine()
        base_rate = _DEFAULT_BASE_RATE
        if engine is not None:
            base_rate = engine.getProperty("rate") or _DEFAULT_BASE_RATE

        while True:
            item = self._next_request()
            if item is _STOP:
                break
            utterance_id, request, epoch = item

            if engine is None:
                self._finish(SpeechResult(utterance_id, SpeechOutcome.FAILED, engine_error))
                continue
            if not self._begin(utterance_id, epoch):
                self._finish(SpeechResult(utterance_id, SpeechOutcome.FAILED, CANCELLED_ERROR))
                continue

            try:
                result = self._speak_one(engine, utterance_id, request, base_rate)
            except Exception as e:  # noqa: BLE001 (reported as a FAILED outcome)
                result = SpeechResult(utterance_id, SpeechOutcome.FAILED, str(e) or type(e).__name__)
            finally:
                with self._lock:
                    self._current_id = None
                    self._finished.discard(utterance_id)
            self._finish(result)

        if engine is not None:
            try:
                engine.endLoop()
            except Exception:  # noqa: BLE001
                logger.debug("Engine loop end failed during shutdown", exc_info=True)
