"""Toolkit-independent marquee core.

WHY: The tracking loop, the speech bookkeeping, and the speed mapping
are the parts worth testing. None of them should need a display.

HOW: units.py holds the word data, stream.py the duplicated DisplayItem
sequence, tracker.py the per-frame nearest-item sampler, pronouncer.py
the speech slot, speed.py the slider mapping, selector.py the unit
dropdown model, and marquee.py wires them together behind surface.py
and clock.py, the two host-side contracts.

RULES:
- No tkinter imports anywhere in this package
- Hosts implement RenderSurface and FrameClock; the core never draws
"""
