"""Command-line interface for the Vocabulary Marquee.

WHY: Teachers preparing a units file want to check it without opening a
window, hear how a word will be pronounced, or look up which scroll
period a slider position gives. The CLI is also the launcher for the GUI.

HOW: argparse flags select one action: --list-units, --unit ID (print
the unit's words), --speak WORD (pronounce and wait), --speed VALUE
(print the scroll period), or --gui (open the window). Status goes to
stderr, data to stdout.

RULES:
- --units-file overrides VOCAB_UNITS_FILE for this run
- With no action flag, prints help and exits 0
- Configuration and data errors (including an unknown log level) print
  "Error: ..." and exit 1
- --speak blocks until the utterance completes, fails, or times out
- tkinter is imported only when --gui is given
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from vocab_marquee.config import LOG_LEVEL, SPEECH_BACKEND, load_configured_units
from vocab_marquee.core.pronouncer import build_speech_request
from vocab_marquee.core.speed import MAX_SLIDER, MIN_SLIDER, format_duration, slider_to_duration
from vocab_marquee.core.units import Unit, find_unit, load_units
from vocab_marquee.speech import SPEECH_BACKENDS, create_speech_service
from vocab_marquee.speech.base import SpeechOutcome, SpeechResult, SpeechService

logger = logging.getLogger(__name__)

_SPEAK_TIMEOUT_S = 30.0
_SPEAK_POLL_S = 0.05
_VOICE_WAIT_S = 1.0


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _load_units(units_file: Optional[str]) -> List[Unit]:
    if units_file:
        path = Path(units_file).expanduser()
        if not path.is_file():
            raise ValueError("Units file not found: {}".format(path))
        return load_units(path)
    return load_configured_units()


def speak_and_wait(
    service: SpeechService,
    text: str,
    timeout_s: float = _SPEAK_TIMEOUT_S,
) -> Optional[SpeechResult]:
    """Pronounce ``text`` and block until its outcome arrives.

    WHY: The GUI polls outcomes from its event loop; a one-shot CLI
    command has no loop, so it polls here instead.

    HOW: Waits briefly for the engine to report voices (they load
    asynchronously), issues one request, then polls drain_results().

    Returns:
        The SpeechResult, or None on timeout.
    """
    deadline = time.monotonic() + _VOICE_WAIT_S
    while not service.voices() and time.monotonic() < deadline:
        time.sleep(_SPEAK_POLL_S)

    utterance_id = service.speak(build_speech_request(text, service.voices()))
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        for result in service.drain_results():
            if result.utterance_id == utterance_id:
                return result
        time.sleep(_SPEAK_POLL_S)
    service.cancel()
    return None


def _run(args: argparse.Namespace) -> int:
    if args.speed is not None:
        duration = slider_to_duration(args.speed)
        print(format_duration(duration))
        return 0

    if args.speak is not None:
        service = create_speech_service(args.backend)
        try:
            _status("Speaking '{}'...".format(args.speak))
            result = speak_and_wait(service, args.speak)
        finally:
            service.shutdown()
        if result is None:
            _status("Timed out waiting for speech.")
            return 1
        if result.outcome == SpeechOutcome.FAILED:
            _status("Speech failed: {}".format(result.error))
            return 1
        return 0

    units = _load_units(args.units_file)

    if args.list_units:
        for unit in units:
            print("{}  ({} words)".format(unit.label, len(unit.words)))
        return 0

    if args.unit is not None:
        unit = find_unit(units, args.unit)
        if unit is None:
            raise ValueError("No unit with id {}. Use --list-units to see them.".format(args.unit))
        _status(unit.label)
        for word in unit.words:
            print(word)
        return 0

    return -1


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="vocab_marquee",
        description="Scrolling vocabulary marquee with click-to-pronounce.",
    )

    parser.add_argument(
        "--gui",
        action="store_true",
        help="Open the marquee window.",
    )

    parser.add_argument(
        "--units-file",
        default=None,
        help="JSON units file to use instead of the configured/built-in units.",
    )

    parser.add_argument(
        "--list-units",
        action="store_true",
        help="List the available units.",
    )

    parser.add_argument(
        "--unit",
        type=int,
        default=None,
        help="Unit id: print its words, or start the GUI on it with --gui.",
    )

    parser.add_argument(
        "--speak",
        default=None,
        metavar="WORD",
        help="Pronounce a word and wait for it to finish.",
    )

    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        metavar="VALUE",
        help="Print the scroll period for a slider value ({}-{}).".format(
            MIN_SLIDER, MAX_SLIDER
        ),
    )

    parser.add_argument(
        "--backend",
        default=SPEECH_BACKEND,
        choices=sorted(SPEECH_BACKENDS),
        help="Speech backend (default: %(default)s).",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s).",
    )

    return parser


def _log_level(name: str) -> int:
    """Resolve a level name like "debug" to its logging constant."""
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(
            "Unknown log level '{}'. Use DEBUG, INFO, WARNING, ERROR or CRITICAL.".format(name)
        )
    return level


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        logging.basicConfig(
            level=_log_level(args.log_level),
            format="%(levelname)s %(name)s: %(message)s",
        )
        if args.gui:
            from vocab_marquee.gui import main as gui_main
            units_file = args.units_file
            gui_main(
                unit_id=args.unit,
                backend=args.backend,
                units_loader=lambda: _load_units(units_file),
            )
            return
        code = _run(args)
    except ValueError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    if code < 0:
        parser.print_help()
        code = 0
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
