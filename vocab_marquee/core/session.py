"""Process-wide marquee state, held in one explicit object.

WHY: The hover flag, the current unit, and the running frame loop are
read and written by several components. Keeping them on one session
object makes their lifecycle visible instead of scattering module globals.

HOW: MarqueeSession is a plain dataclass. The tracker stores its pending
frame handle here; the controller sets the unit id on rebuild; the host
toggles is_hovering from pointer enter/leave events.

RULES:
- Created at startup with no unit and no frame loop
- frame_handle is None whenever the tracker is not running
- teardown() returns the session to its initial state
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class MarqueeSession:
    is_hovering: bool = False
    current_unit_id: Optional[int] = None
    frame_handle: Optional[Any] = None

    def teardown(self) -> None:
        self.is_hovering = False
        self.current_unit_id = None
        self.frame_handle = None
