"""Tkinter desktop host for the Vocabulary Marquee.

WHY: Learners need a window where words drift upward on their own, the
word at the center line stands out, and any word can be clicked (or
focused and Enter/Space pressed) to hear it.

HOW: TkSurface implements RenderSurface on a tk.Canvas: words are laid
out as two stacked wrapped paragraphs and a scroll animation moves them
up by one paragraph height per period, wrapping seamlessly. TkFrameClock
wraps root.after() for the tracker. MarqueeApp builds the controls (unit
dropdown, speed slider) and forwards input events to the core Marquee.
Speech outcomes are drained on the main thread by an .after() poll.

RULES:
- tkinter widgets are ONLY touched from the main thread
- The scroll animation is independent of the tracker; the tracker only
  reads item geometry through TkSurface
- Hovering the canvas pauses both the scroll and the highlighting
- Closing the window tears the marquee down before destroying the root
"""

from __future__ import annotations

import logging
import time
import tkinter as tk
import tkinter.font as tkfont
from tkinter import messagebox, ttk
from typing import Any, Callable, Dict, List, Optional, Sequence

from vocab_marquee.config import (
    DEFAULT_UNIT_ID,
    FRAME_INTERVAL_MS,
    INITIAL_SPEED,
    LOG_LEVEL,
    SPEECH_BACKEND,
    load_configured_units,
)
from vocab_marquee.core.clock import FrameCallback, FrameClock
from vocab_marquee.core.marquee import Marquee
from vocab_marquee.core.speed import (
    MAX_SLIDER,
    MIN_SLIDER,
    advance_offset,
    format_duration,
    slider_to_duration,
)
from vocab_marquee.core.stream import DisplayItem, ItemState
from vocab_marquee.core.surface import Bounds, RenderSurface
from vocab_marquee.core.units import Unit, find_unit
from vocab_marquee.speech import create_speech_service
from vocab_marquee.speech.base import SpeechService

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "Vocabulary Marquee"
_WINDOW_MIN_WIDTH = 520
_WINDOW_MIN_HEIGHT = 420
_PAD = 8

_CANVAS_BG = "#f9fafb"
_WORD_TAG = "word"
_CENTER_LINE_TAG = "center-line"
_FONT_SIZE = 18
_WORD_GAP = 14
_LINE_SPACING = 1.6

_STATE_COLORS: Dict[ItemState, str] = {
    ItemState.IDLE: "#9ca3af",
    ItemState.ACTIVE: "#111827",
    ItemState.SPEAKING: "#2563eb",
}

_SPEECH_POLL_MS = 100


# ---------------------------------------------------------------------------
# Frame clock
# ---------------------------------------------------------------------------

class TkFrameClock(FrameClock):
    """FrameClock on top of ``root.after``."""

    def __init__(self, root: tk.Misc, interval_ms: int = FRAME_INTERVAL_MS) -> None:
        self._root = root
        self._interval_ms = interval_ms

    def request_frame(self, callback: FrameCallback) -> Any:
        return self._root.after(self._interval_ms, callback)

    def cancel_frame(self, handle: Any) -> None:
        try:
            self._root.after_cancel(handle)
        except tk.TclError:
            pass  # root already destroyed


# ---------------------------------------------------------------------------
# Rendering surface
# ---------------------------------------------------------------------------

class TkSurface(RenderSurface):
    """RenderSurface drawing DisplayItems as canvas text items.

    RULES:
    - Items of pass 0 form the first paragraph, pass 1 the second,
      stacked directly below it
    - advance(dt) scrolls by paragraph_height * dt / duration, wrapped
      modulo one paragraph height, however long the frame gap
    - Geometry queries on a destroyed canvas return None
    """

    def __init__(self, canvas: tk.Canvas) -> None:
        self._canvas = canvas
        base = tkfont.nametofont("TkDefaultFont")
        self._font = base.copy()
        self._font.configure(size=_FONT_SIZE)
        self._bold_font = base.copy()
        self._bold_font.configure(size=_FONT_SIZE, weight="bold")
        self._focus_font = base.copy()
        self._focus_font.configure(size=_FONT_SIZE, underline=True)
        self._items: List[DisplayItem] = []
        self._ids: Dict[int, int] = {}  # id(DisplayItem) -> canvas item id
        self._by_canvas_id: Dict[int, DisplayItem] = {}
        self._offset = 0.0
        self._paragraph_height = 0.0
        self._duration_s = slider_to_duration(INITIAL_SPEED)
        self.paused = False
        self.focused: Optional[DisplayItem] = None

    # -- RenderSurface -------------------------------------------------

    def mount(self, items: Sequence[DisplayItem]) -> None:
        self._items = list(items)
        for item in self._items:
            canvas_id = self._canvas.create_text(
                0, 0,
                text=item.label,
                anchor=tk.NW,
                font=self._font,
                fill=_STATE_COLORS[item.state],
                tags=(_WORD_TAG,),
            )
            self._ids[id(item)] = canvas_id
            self._by_canvas_id[canvas_id] = item
        self.layout()

    def clear(self) -> None:
        self._canvas.delete(_WORD_TAG)
        self._items = []
        self._ids = {}
        self._by_canvas_id = {}
        self._offset = 0.0
        self._paragraph_height = 0.0
        self.focused = None

    def container_bounds(self) -> Optional[Bounds]:
        try:
            height = self._canvas.winfo_height()
        except tk.TclError:
            return None
        if height <= 1:
            return None  # not mapped yet
        return Bounds(top=0.0, height=float(height))

    def item_bounds(self, item: DisplayItem) -> Optional[Bounds]:
        canvas_id = self._ids.get(id(item))
        if canvas_id is None:
            return None
        try:
            box = self._canvas.bbox(canvas_id)
        except tk.TclError:
            return None
        if not box:
            return None
        _, y1, _, y2 = box
        return Bounds(top=float(y1), height=float(y2 - y1))

    def update_item(self, item: DisplayItem) -> None:
        canvas_id = self._ids.get(id(item))
        if canvas_id is None:
            return
        if item.state == ItemState.IDLE:
            font = self._focus_font if item is self.focused else self._font
        else:
            font = self._bold_font
        try:
            self._canvas.itemconfigure(
                canvas_id, fill=_STATE_COLORS[item.state], font=font
            )
        except tk.TclError:
            pass

    def set_scroll_duration(self, duration: str) -> None:
        self._duration_s = float(duration.rstrip("s"))

    # -- Host-side helpers ---------------------------------------------

    @property
    def duration_s(self) -> float:
        return self._duration_s

    def item_at(self, canvas_id: int) -> Optional[DisplayItem]:
        return self._by_canvas_id.get(canvas_id)

    def layout(self) -> None:
        """Flow both passes into wrapped rows, keeping the scroll offset."""
        width = max(self._canvas.winfo_width(), _WINDOW_MIN_WIDTH) - 2 * _PAD
        line_height = self._font.metrics("linespace") * _LINE_SPACING
        passes: Dict[int, List[DisplayItem]] = {}
        for item in self._items:
            passes.setdefault(item.copy, []).append(item)

        paragraph_top = 0.0
        for copy in sorted(passes):
            x = 0.0
            row = 0
            for item in passes[copy]:
                word_width = self._font.measure(item.label)
                if x > 0 and x + word_width > width:
                    row += 1
                    x = 0.0
                canvas_id = self._ids[id(item)]
                self._canvas.coords(
                    canvas_id,
                    _PAD + x,
                    paragraph_top + row * line_height - self._offset,
                )
                x += word_width + _WORD_GAP
            paragraph_top += (row + 1) * line_height
            if copy == 0:
                self._paragraph_height = paragraph_top

    def advance(self, dt: float) -> None:
        """Scroll forward by ``dt`` seconds of animation time."""
        if self.paused or self._paragraph_height <= 0 or self._duration_s <= 0:
            return
        new_offset = advance_offset(
            self._offset, dt, self._paragraph_height, self._duration_s
        )
        self._canvas.move(_WORD_TAG, 0, -(new_offset - self._offset))
        self._offset = new_offset

    def move_focus(self, step: int) -> Optional[DisplayItem]:
        """Move keyboard focus ``step`` items forward (wrapping)."""
        if not self._items:
            return None
        previous = self.focused
        if previous is None:
            index = 0 if step > 0 else len(self._items) - 1
        else:
            index = (self._items.index(previous) + step) % len(self._items)
        self.focused = self._items[index]
        if previous is not None:
            self.update_item(previous)
        self.update_item(self.focused)
        return self.focused


# ---------------------------------------------------------------------------
# Main GUI Application
# ---------------------------------------------------------------------------

class MarqueeApp:
    """Main tkinter window for the Vocabulary Marquee.

    RULES:
    - The scroll animation and the speech poll each run on their own
      .after() loop; the tracker runs on TkFrameClock
    - Hover pauses the animation (TkSurface.paused) and the tracker
      (session.is_hovering) together
    - WM_DELETE_WINDOW → teardown() → root.destroy()
    """

    def __init__(
        self,
        root: tk.Tk,
        units: Sequence[Unit],
        speech: SpeechService,
        unit_id: Optional[int] = None,
    ) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)
        self._units = sorted(units, key=lambda u: u.id)

        self._animate_job: Optional[str] = None
        self._speech_job: Optional[str] = None
        self._last_tick = time.monotonic()

        self._build_ui()

        self._surface = TkSurface(self._canvas)
        self._marquee = Marquee(
            self._units, self._surface, TkFrameClock(self._root), speech
        )

        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

        start_id = self._resolve_start_unit(unit_id)
        if start_id is not None:
            self._unit_combo.current(self._marquee.selector.index_of(start_id))
            self._marquee.start(start_id)
        self._on_speed(str(INITIAL_SPEED))

        self._animate()
        self._poll_speech()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        """Build the main window layout."""
        main = ttk.Frame(self._root, padding=_PAD)
        main.pack(fill=tk.BOTH, expand=True)

        # --- Controls ---
        controls = ttk.Frame(main)
        controls.pack(fill=tk.X, pady=(0, _PAD))

        ttk.Label(controls, text="Unit:").pack(side=tk.LEFT)
        self._unit_var = tk.StringVar()
        self._unit_combo = ttk.Combobox(
            controls,
            textvariable=self._unit_var,
            values=[unit.label for unit in self._units],
            state="readonly",
            width=28,
        )
        self._unit_combo.pack(side=tk.LEFT, padx=(4, 16))
        self._unit_combo.bind("<<ComboboxSelected>>", self._on_unit_selected)

        ttk.Label(controls, text="Speed:").pack(side=tk.LEFT)
        self._speed_var = tk.DoubleVar(value=INITIAL_SPEED)
        self._speed_scale = ttk.Scale(
            controls,
            from_=MIN_SLIDER,
            to=MAX_SLIDER,
            orient=tk.HORIZONTAL,
            variable=self._speed_var,
            command=self._on_speed,
            length=180,
        )
        self._speed_scale.pack(side=tk.LEFT, padx=(4, 4))
        self._duration_label = ttk.Label(controls, text="", width=8)
        self._duration_label.pack(side=tk.LEFT)

        # --- Marquee ---
        self._canvas = tk.Canvas(
            main,
            background=_CANVAS_BG,
            highlightthickness=1,
            takefocus=1,
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)

        self._canvas.tag_bind(_WORD_TAG, "<Button-1>", self._on_word_click)
        self._canvas.bind("<Enter>", self._on_hover_enter)
        self._canvas.bind("<Leave>", self._on_hover_leave)
        self._canvas.bind("<Configure>", self._on_resize)
        self._canvas.bind("<Tab>", lambda e: self._on_focus_move(1))
        self._canvas.bind("<Shift-Tab>", lambda e: self._on_focus_move(-1))
        self._canvas.bind("<ISO_Left_Tab>", lambda e: self._on_focus_move(-1))
        for keysym in ("<Return>", "<KP_Enter>", "<space>"):
            self._canvas.bind(keysym, self._on_key)

        hint = ttk.Label(
            main,
            text="Click a word (or Tab to it and press Enter) to hear it. "
                 "Hover to pause.",
            foreground="gray",
        )
        hint.pack(fill=tk.X, pady=(_PAD, 0))

    def _resolve_start_unit(self, unit_id: Optional[int]) -> Optional[int]:
        if not self._units:
            messagebox.showwarning("No Units", "No vocabulary units are configured.")
            return None
        wanted = unit_id if unit_id is not None else DEFAULT_UNIT_ID
        if find_unit(self._units, wanted) is None:
            logger.warning("Unit %s not found; starting with unit %s", wanted, self._units[0].id)
            return self._units[0].id
        return wanted

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_unit_selected(self, event: Optional[tk.Event] = None) -> None:
        index = self._unit_combo.current()
        if index < 0:
            return
        self._marquee.load_unit(self._units[index].id)

    def _on_speed(self, value: str) -> None:
        duration = self._marquee.on_speed_change(round(float(value)))
        self._duration_label.configure(text=format_duration(duration))

    def _on_word_click(self, event: tk.Event) -> None:
        found = self._canvas.find_withtag("current")
        if not found:
            return
        item = self._surface.item_at(found[0])
        if item is not None:
            self._canvas.focus_set()
            self._marquee.activate(item)

    def _on_key(self, event: tk.Event) -> str:
        item = self._surface.focused
        if item is not None:
            self._marquee.handle_key(item, event.keysym)
        return "break"

    def _on_focus_move(self, step: int) -> str:
        self._surface.move_focus(step)
        return "break"

    def _on_hover_enter(self, event: Optional[tk.Event] = None) -> None:
        self._surface.paused = True
        self._marquee.hover_enter()

    def _on_hover_leave(self, event: Optional[tk.Event] = None) -> None:
        self._surface.paused = False
        self._marquee.hover_leave()

    def _on_resize(self, event: Optional[tk.Event] = None) -> None:
        self._surface.layout()
        # Faint guide at the center line the tracker measures against
        self._canvas.delete(_CENTER_LINE_TAG)
        mid = self._canvas.winfo_height() / 2
        self._canvas.create_line(
            0, mid, self._canvas.winfo_width(), mid,
            fill="#e5e7eb", tags=(_CENTER_LINE_TAG,),
        )
        self._canvas.tag_lower(_CENTER_LINE_TAG)

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def _animate(self) -> None:
        """Advance the scroll animation by the elapsed wall-clock time."""
        now = time.monotonic()
        self._surface.advance(now - self._last_tick)
        self._last_tick = now
        self._animate_job = self._root.after(FRAME_INTERVAL_MS, self._animate)

    def _poll_speech(self) -> None:
        """Apply speech outcomes on the main thread."""
        self._marquee.poll_speech()
        self._speech_job = self._root.after(_SPEECH_POLL_MS, self._poll_speech)

    def _on_close(self) -> None:
        for job in (self._animate_job, self._speech_job):
            if job is not None:
                self._root.after_cancel(job)
        self._animate_job = None
        self._speech_job = None
        self._marquee.teardown()
        self._root.destroy()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(
    unit_id: Optional[int] = None,
    backend: str = SPEECH_BACKEND,
    units_loader: Callable[[], List[Unit]] = load_configured_units,
) -> None:
    """Launch the Tkinter GUI application.

    RULES:
    - This function blocks until the window is closed
    - Must be called from the main thread
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    units = units_loader()
    speech = create_speech_service(backend)
    root = tk.Tk()
    MarqueeApp(root, units, speech, unit_id=unit_id)
    root.mainloop()


if __name__ == "__main__":
    main()
