"""Configuration constants, speech defaults, and .env loading.

WHY: Centralizes the tunable values (speech locale and rate, the
frame interval, the default unit, the speech backend) so they
are easy to find and override without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level values read from the environment with sensible defaults.
load_configured_units() resolves the active vocabulary: a JSON units
file when VOCAB_UNITS_FILE is set, else the built-in units.

RULES:
- All defaults can be overridden via environment variables
- Numeric env values that fail to parse raise ValueError on import
- The speech locale defaults to "en-US" and the rate to 0.9 (slightly slow)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from vocab_marquee.core.units import BUILTIN_UNITS, Unit, load_units

# Load .env from the working directory (where the app is launched from)
load_dotenv()

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

VOCAB_UNITS_FILE = os.getenv("VOCAB_UNITS_FILE", "").strip()
DEFAULT_UNIT_ID = int(os.getenv("VOCAB_DEFAULT_UNIT", "1"))

# ---------------------------------------------------------------------------
# Speech
# ---------------------------------------------------------------------------

SPEECH_BACKEND = os.getenv("VOCAB_SPEECH_BACKEND", "pyttsx3")
SPEECH_LOCALE = os.getenv("VOCAB_SPEECH_LOCALE", "en-US")
SPEECH_RATE = float(os.getenv("VOCAB_SPEECH_RATE", "0.9"))
SPEECH_PITCH = 1.0
SPEECH_VOLUME = 1.0

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

FRAME_INTERVAL_MS = int(os.getenv("VOCAB_FRAME_INTERVAL_MS", "16"))
"""Delay between tracker frames; 16ms is roughly one 60Hz frame."""

INITIAL_SPEED = int(os.getenv("VOCAB_INITIAL_SPEED", "50"))

LOG_LEVEL = os.getenv("VOCAB_LOG_LEVEL", "INFO").upper()


def load_configured_units() -> List[Unit]:
    """Return the vocabulary units this installation should show.

    WHY: Teachers swap in their own word lists without editing code.

    HOW: Reads VOCAB_UNITS_FILE through load_units() when set; otherwise
    returns the built-in units.

    RULES:
    - A configured but missing file raises ValueError (never silently
      falls back to the built-ins)
    """
    if not VOCAB_UNITS_FILE:
        return list(BUILTIN_UNITS)
    path = Path(VOCAB_UNITS_FILE).expanduser()
    if not path.is_file():
        raise ValueError(
            "Units file not found: {}. "
            "Fix VOCAB_UNITS_FILE in the .env file.".format(path)
        )
    return load_units(path)
