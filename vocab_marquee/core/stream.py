"""WordStream: the duplicated sequence of DisplayItems behind the marquee.

WHY: The marquee scrolls upward forever. Rendering the word list twice
back to back means that scrolling by exactly one pass lands on a frame
identical to the start, so the loop seam is invisible.

HOW: WordStream.build() turns a word list into 2 × N DisplayItems: the
first pass (copy 0) followed by the duplicate (copy 1), same labels in
the same order. Each DisplayItem is an independent render instance with
its own idle / active / speaking state.

RULES:
- build() always discards the previous items first
- len(stream) == 2 × len(words); an empty list yields an empty stream
- items[i].label == items[i + N].label for every i < N
- Items are never shared between builds; stale references stay stale
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator, List, Sequence

# Number of consecutive copies rendered for the seamless loop
PASSES = 2


class ItemState(str, enum.Enum):
    """Visual state of one DisplayItem.

    RULES:
    - idle: plain rendering
    - active: nearest to the center line (set only by the tracker)
    - speaking: pronunciation in progress (set only by the Pronouncer),
      takes visual precedence over active
    """

    IDLE = "idle"
    ACTIVE = "active"
    SPEAKING = "speaking"


@dataclass(eq=False)
class DisplayItem:
    """One rendered instance of a word label.

    Identity equality on purpose: the two copies of a word share a
    label but are distinct items.

    Attributes:
        label: The word or phrase shown and spoken.
        index: Document order across both passes (0-based).
        copy: 0 for the first pass, 1 for the duplicate.
        state: Current ItemState.
    """

    label: str
    index: int
    copy: int = 0
    state: ItemState = ItemState.IDLE

    def set_state(self, state: ItemState) -> bool:
        """Set the state and report whether it changed."""
        if self.state == state:
            return False
        self.state = state
        return True

    def __repr__(self) -> str:
        return "DisplayItem({!r}, index={}, copy={}, state={})".format(
            self.label, self.index, self.copy, self.state.value
        )


class WordStream:
    """Ordered, duplicated sequence of DisplayItems for one word list."""

    def __init__(self) -> None:
        self._items: List[DisplayItem] = []
        self._pass_length = 0

    def build(self, words: Sequence[str]) -> List[DisplayItem]:
        """Replace the stream with two consecutive passes over ``words``.

        Returns:
            The new items in document order.
        """
        self.clear()
        self._pass_length = len(words)
        for copy in range(PASSES):
            for i, word in enumerate(words):
                self._items.append(DisplayItem(
                    label=word,
                    index=copy * self._pass_length + i,
                    copy=copy,
                ))
        return list(self._items)

    def clear(self) -> None:
        self._items = []
        self._pass_length = 0

    @property
    def items(self) -> List[DisplayItem]:
        return list(self._items)

    @property
    def pass_length(self) -> int:
        """Number of items in one pass (the original word count)."""
        return self._pass_length

    def first_pass(self) -> List[DisplayItem]:
        return self._items[:self._pass_length]

    def second_pass(self) -> List[DisplayItem]:
        return self._items[self._pass_length:]

    def speaking_items(self) -> List[DisplayItem]:
        return [item for item in self._items if item.state == ItemState.SPEAKING]

    def __contains__(self, item: object) -> bool:
        return any(item is existing for existing in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[DisplayItem]:
        return iter(list(self._items))
