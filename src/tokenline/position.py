"""Caret position probing for the suggestion dropdown.

The editor embeds ``CURSOR_MARKER`` at the caret while rendering.  Once
a frame is committed, the probe finds the marker in the rendered lines
and turns it into the row/column where the dropdown should appear.

Measurements are queued on an ``AfterCommitQueue`` and only run when
the render pass flushes it, so they always see the frame produced by
the edit that requested them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from tokenline.utils import visible_width

logger = logging.getLogger(__name__)

# APC sequence: invisible to the terminal, found and stripped after render
CURSOR_MARKER = "\x1b_tl:c\x07"


@dataclass(frozen=True)
class CaretPosition:
    row: int
    col: int


@dataclass(frozen=True)
class DropdownPosition:
    top: int
    left: int


def extract_cursor_position(
    lines: list[str],
) -> tuple[list[str], CaretPosition | None]:
    """Find and remove ``CURSOR_MARKER`` from *lines*.

    Returns the cleaned lines and the marker's (row, visible column), or
    ``None`` when no line carries the marker.
    """
    for row, line in enumerate(lines):
        marker_pos = line.find(CURSOR_MARKER)
        if marker_pos == -1:
            continue
        col = visible_width(line[:marker_pos])
        cleaned = list(lines)
        cleaned[row] = line[:marker_pos] + line[marker_pos + len(CURSOR_MARKER) :]
        return cleaned, CaretPosition(row=row, col=col)
    return list(lines), None


def dropdown_position(caret: CaretPosition, row_offset: int = 1) -> DropdownPosition:
    """Place the dropdown just below the caret's line, left-aligned with it."""
    return DropdownPosition(top=caret.row + row_offset, left=caret.col)


class AfterCommitQueue:
    """Callbacks that run once the current frame has been committed.

    ``schedule`` may be called any number of times while an event is
    handled; the same callback is only queued once per frame.  ``flush``
    is called by the render pass after it produced its lines.
    """

    def __init__(self) -> None:
        self._pending: list[Callable[[], None]] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, callback: Callable[[], None]) -> None:
        if callback not in self._pending:
            self._pending.append(callback)

    def flush(self) -> None:
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()

    def clear(self) -> None:
        self._pending.clear()


class PositionProbe:
    """Tracks where the dropdown belongs based on the last committed frame."""

    def __init__(self, row_offset: int = 1) -> None:
        self._row_offset = row_offset
        self._caret: CaretPosition | None = None
        self._position = DropdownPosition(top=0, left=0)

    @property
    def caret(self) -> CaretPosition | None:
        return self._caret

    @property
    def position(self) -> DropdownPosition:
        return self._position

    def record_frame(self, caret: CaretPosition | None) -> None:
        """Remember the caret location of the frame just rendered."""
        self._caret = caret

    def measure(self) -> bool:
        """Update the dropdown position from the last frame.

        Returns ``True`` if the position changed.
        """
        if self._caret is None:
            return False
        position = dropdown_position(self._caret, self._row_offset)
        if position == self._position:
            return False
        logger.debug("Dropdown moved to row %d col %d", position.top, position.left)
        self._position = position
        return True
