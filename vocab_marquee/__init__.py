"""Vocabulary Marquee: a scrolling word list with click-to-pronounce.

WHY: Learners skim a vocabulary unit faster when the words drift past on
their own and any word can be heard on demand. The word crossing the
center line is highlighted so the eye has a natural reading anchor.

HOW: Four cooperating pieces: a WordStream that renders the unit twice
for a seamless loop, an ActiveWordTracker that samples item positions
once per frame, a Pronouncer that drives a speech backend, and a
SpeedControl that maps a slider to the scroll period. The Tkinter GUI
and the CLI are thin hosts around the same core.

RULES:
- Core modules never import tkinter; the GUI is one host among others
- All visual state lives on DisplayItem.state (idle / active / speaking)
- Speech outcomes are drained on the UI thread, never applied from a worker
"""

__version__ = "0.1.0"
