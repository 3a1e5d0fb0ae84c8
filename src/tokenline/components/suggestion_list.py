"""Dropdown rendering for an open autocomplete session."""

from __future__ import annotations

import re
from typing import Callable, Protocol

from tokenline.session import Session
from tokenline.utils import truncate_to_width


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


class SuggestionListTheme(Protocol):
    selected_text: Callable[[str], str]
    scroll_info: Callable[[str], str]


class SuggestionList:
    """Renders a session's suggestions with the highlighted one marked.

    The list scrolls to keep the highlight in view when it holds more
    than ``max_visible`` entries.
    """

    def __init__(self, max_visible: int, theme: SuggestionListTheme) -> None:
        self._max_visible = max_visible
        self._theme = theme

    @property
    def max_visible(self) -> int:
        return self._max_visible

    def visible_range(self, session: Session) -> tuple[int, int]:
        count = len(session.suggestions)
        start = max(
            0,
            min(session.selected_index - self._max_visible // 2, count - self._max_visible),
        )
        return start, min(start + self._max_visible, count)

    def index_at_row(self, session: Session, row: int) -> int | None:
        """Suggestion index drawn on dropdown *row*, for pointer selection."""
        start, end = self.visible_range(session)
        index = start + row
        return index if 0 <= row and index < end else None

    def render(self, session: Session, width: int) -> list[str]:
        lines: list[str] = []
        start, end = self.visible_range(session)

        for i in range(start, end):
            label = _normalize_to_single_line(session.suggestions[i].label)
            if i == session.selected_index:
                text = truncate_to_width(label, max(1, width - 4), "")
                lines.append(self._theme.selected_text(f"→ {text}"))
            else:
                lines.append("  " + truncate_to_width(label, max(1, width - 4), ""))

        if start > 0 or end < len(session.suggestions):
            scroll_text = f"  ({session.selected_index + 1}/{len(session.suggestions)})"
            lines.append(
                self._theme.scroll_info(truncate_to_width(scroll_text, width - 2, ""))
            )

        return lines
