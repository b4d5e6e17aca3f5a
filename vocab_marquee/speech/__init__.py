"""Speech backend registry.

WHY: The GUI, CLI, and tests pick a backend by name (from config or a
flag). A central dict keeps that lookup in one place.

HOW: SPEECH_BACKENDS maps names to zero-argument factories.
create_speech_service() instantiates one. The pyttsx3 backend is
imported lazily so that a missing system TTS driver only matters when
that backend is actually chosen.

RULES:
- Keys are lowercase identifiers (used in --backend and VOCAB_SPEECH_BACKEND)
- Unknown names raise ValueError listing the available backends
"""

from __future__ import annotations

from typing import Callable, Dict

from vocab_marquee.speech.base import SpeechService
from vocab_marquee.speech.silent import SilentSpeechService


def _pyttsx3_service() -> SpeechService:
    from vocab_marquee.speech.pyttsx3_backend import Pyttsx3SpeechService
    return Pyttsx3SpeechService()


SPEECH_BACKENDS: Dict[str, Callable[[], SpeechService]] = {
    "pyttsx3": _pyttsx3_service,
    "silent": SilentSpeechService,
}


def create_speech_service(name: str) -> SpeechService:
    """Instantiate the backend registered under ``name``."""
    try:
        factory = SPEECH_BACKENDS[name.lower()]
    except KeyError:
        raise ValueError(
            "Unknown speech backend '{}'. Available: {}".format(
                name, ", ".join(sorted(SPEECH_BACKENDS))
            )
        ) from None
    return factory()
