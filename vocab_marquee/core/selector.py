"""UnitSelector: lists units and switches the current one."""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from vocab_marquee.core.session import MarqueeSession
from vocab_marquee.core.units import Unit, find_unit

logger = logging.getLogger(__name__)


class UnitSelector:
    """Dropdown model over a fixed set of units.

    ``on_select`` is the rebuild hook; it runs only when the selection
    actually changes, so re-selecting the current unit never rebuilds.
    """

    def __init__(
        self,
        units: Sequence[Unit],
        session: MarqueeSession,
        on_select: Callable[[Unit], None],
    ) -> None:
        self._units = sorted(units, key=lambda u: u.id)
        self._session = session
        self._on_select = on_select

    def options(self) -> List[Tuple[int, str]]:
        """``(id, "Unit {id}: {title}")`` pairs in ascending id order."""
        return [(unit.id, unit.label) for unit in self._units]

    def index_of(self, unit_id: int) -> int:
        for i, unit in enumerate(self._units):
            if unit.id == unit_id:
                return i
        raise KeyError(unit_id)

    def select(self, unit_id: int) -> bool:
        """Make ``unit_id`` current; returns False if it already was.

        Raises:
            KeyError: If no unit has that id.
        """
        unit = find_unit(self._units, unit_id)
        if unit is None:
            raise KeyError(unit_id)
        if self._session.current_unit_id == unit_id:
            return False
        logger.info("Switching to %s", unit.label)
        self._session.current_unit_id = unit_id
        self._on_select(unit)
        return True
