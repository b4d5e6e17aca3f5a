"""Vocabulary units: named, fixed groups of words.

WHY: The marquee shows one thematic word set at a time and the unit
selector switches between them. Word sets are static data, so they are
modeled as frozen dataclasses that nothing downstream can mutate.

HOW: Unit holds an id, a title, and a tuple of words. BUILTIN_UNITS
ships three units. load_units() reads a user-supplied JSON file and
validates it against UNITS_SCHEMA with jsonschema before building Units.

RULES:
- Unit ids are unique positive integers
- Units are returned in ascending id order
- Word order within a unit is display order and is preserved
- A unit may have zero words (renders as an empty stream)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import jsonschema


@dataclass(frozen=True)
class Unit:
    """One named group of vocabulary words.

    RULES:
    - id: unique positive integer, also the sort key
    - title: human-readable theme, e.g. "Technology"
    - words: ordered labels; duplicates are allowed and rendered as-is
    """

    id: int
    title: str
    words: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        """Dropdown label, e.g. ``"Unit 2: Technology"``."""
        return "Unit {}: {}".format(self.id, self.title)


BUILTIN_UNITS: tuple[Unit, ...] = (
    Unit(
        id=1,
        title="Personality",
        words=(
            "Introvert", "Extrovert", "Charismatic", "Ambivert", "Empathetic",
            "Optimistic", "Pessimistic", "Ambitious", "Humble", "Arrogant",
            "Compassionate", "Resilient", "Stubborn", "Diplomatic", "Impulsive",
            "Meticulous", "Gregarious", "Reserved", "Assertive", "Adaptable",
        ),
    ),
    Unit(
        id=2,
        title="Technology",
        words=(
            "Algorithm", "Database", "Framework", "API", "Cloud",
            "Encryption", "Bandwidth", "Protocol", "Repository", "Debugging",
            "Compiler", "Interface", "Middleware", "Virtualization", "Blockchain",
            "Neural", "Quantum", "Microservices", "Container", "DevOps",
        ),
    ),
    Unit(
        id=3,
        title="Physical Appearance",
        words=(
            "round face", "pointed face", "oval face", "lovely complexion",
            "chubby cheeks", "straight nose", "upturned nose", "droopy moustache",
            "bushy eyebrows", "dark hair", "jet-black hair", "fair hair",
            "ginger hair", "auburn hair", "thick hair", "sleek hair",
            "coarse hair", "shoulder-length hair", "dishevelled hair",
            "go grey", "go bald", "slim figure", "slender waist", "lanky youth",
            "portly gentleman", "dumpy woman", "well-built", "broad shoulders",
            "youthful appearance", "immaculately groomed",
            "striking resemblance", "striking appearance",
        ),
    ),
)

UNITS_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["units"],
    "properties": {
        "units": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "title", "words"],
                "properties": {
                    "id": {"type": "integer", "minimum": 1},
                    "title": {"type": "string", "minLength": 1},
                    "words": {
                        "type": "array",
                        "items": {"type": "string", "minLength": 1},
                    },
                },
                "additionalProperties": False,
            },
        },
    },
}


def build_units(raw_units: Iterable[dict[str, Any]]) -> List[Unit]:
    """Build Unit objects from plain dicts, sorted by id.

    Raises:
        ValueError: If two units share an id.
    """
    units: List[Unit] = []
    seen: set[int] = set()
    for raw in raw_units:
        unit_id = int(raw["id"])
        if unit_id in seen:
            raise ValueError("Duplicate unit id: {}".format(unit_id))
        seen.add(unit_id)
        units.append(Unit(
            id=unit_id,
            title=str(raw["title"]),
            words=tuple(str(w) for w in raw["words"]),
        ))
    units.sort(key=lambda u: u.id)
    return units


def load_units(path: Path) -> List[Unit]:
    """Load and validate a JSON units file.

    WHY: Teachers bring their own word lists. A malformed file should
    fail loudly at startup, not half-render a marquee.

    HOW: Parses JSON, validates against UNITS_SCHEMA, then builds Units.

    RULES:
    - Invalid JSON or schema violations raise ValueError with the reason
    - Duplicate ids raise ValueError

    Args:
        path: Path to a ``{"units": [{"id", "title", "words"}]}`` file.

    Returns:
        Units in ascending id order.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError("Units file {} is not valid JSON: {}".format(path, e)) from e

    try:
        jsonschema.validate(instance=data, schema=UNITS_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ValueError("Units file {} is invalid: {}".format(path, e.message)) from e

    return build_units(data["units"])


def find_unit(units: Sequence[Unit], unit_id: int) -> Optional[Unit]:
    """Return the unit with the given id, or None."""
    for unit in units:
        if unit.id == unit_id:
            return unit
    return None
