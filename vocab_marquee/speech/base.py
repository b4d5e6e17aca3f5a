"""Speech service contract: requests, voices, and outcomes.

WHY: Pronunciation is delegated to an external engine whose completion
arrives asynchronously. The Pronouncer must not care which engine is
underneath, and must never receive completions on a foreign thread.

HOW: SpeechService is an ABC. speak() returns an utterance id at once;
outcomes are collected by the backend and handed over by
drain_results(), which the host calls on its UI thread. Each utterance
ends in exactly one SpeechResult: COMPLETED or FAILED.

RULES:
- speak() never blocks waiting for audio to finish
- Every utterance id produces exactly one result, including cancelled
  ones (reported as FAILED with error "cancelled")
- voices() may return an empty list until the engine has started
- Backends convert engine exceptions into FAILED results; they never
  raise from speak() or drain_results()
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

CANCELLED_ERROR = "cancelled"


@dataclass(frozen=True)
class Voice:
    """One voice offered by the engine.

    RULES:
    - locale is a BCP-47-ish tag ("en-US", "en_GB", "en") or "" if unknown
    """

    id: str
    name: str
    locale: str = ""


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    locale: str = "en-US"
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    voice: Optional[Voice] = None


class SpeechOutcome(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SpeechResult:
    utterance_id: str
    outcome: SpeechOutcome
    error: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self.outcome == SpeechOutcome.FAILED and self.error == CANCELLED_ERROR


class SpeechService(ABC):
    """Abstract text-to-speech backend.

    To add a new backend:
    1. Create a new module in speech/
    2. Subclass SpeechService
    3. Register it in SPEECH_BACKENDS in speech/__init__.py
    """

    @abstractmethod
    def voices(self) -> List[Voice]:
        """Voices currently known to the engine (possibly empty)."""

    @abstractmethod
    def speak(self, request: SpeechRequest) -> str:
        """Queue an utterance and return its id immediately."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance and drop any queued ones."""

    @abstractmethod
    def drain_results(self) -> List[SpeechResult]:
        """Return outcomes delivered since the previous call."""

    @property
    @abstractmethod
    def is_speaking(self) -> bool:
        """True while an utterance is queued or playing."""

    def shutdown(self) -> None:
        """Release engine resources. Default: just cancel."""
        self.cancel()
