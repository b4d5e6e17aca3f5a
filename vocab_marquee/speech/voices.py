"""Voice selection for English pronunciation."""

from __future__ import annotations

from typing import Optional, Sequence

from vocab_marquee.speech.base import Voice


def normalize_locale(locale: str) -> str:
    """Lowercase and use hyphens: ``"en_US"`` → ``"en-us"``."""
    return locale.strip().replace("_", "-").lower()


def select_voice(voices: Sequence[Voice], locale: str = "en-US") -> Optional[Voice]:
    """Pick the best voice for ``locale``.

    Preference order: exact locale match, then any voice sharing the
    language (``en-*`` or bare ``en`` for English), then None so the
    engine uses its platform default. The first match in engine order
    wins within each tier.
    """
    wanted = normalize_locale(locale)
    language = wanted.split("-")[0]

    for voice in voices:
        if normalize_locale(voice.locale) == wanted:
            return voice

    for voice in voices:
        voice_locale = normalize_locale(voice.locale)
        if voice_locale == language or voice_locale.startswith(language + "-"):
            return voice

    return None
