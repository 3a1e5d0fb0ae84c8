"""Autocomplete session state and navigation transitions.

A ``Session`` exists only while autocomplete is open; ``None`` stands for
"no session".  All transitions are pure and return a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class Suggestion:
    """A candidate that can be committed as a token."""

    label: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Session:
    """Live state of an open autocomplete interaction.

    ``suggestions`` is never empty and ``selected_index`` always points
    into it.
    """

    match_string: str
    suggestions: tuple[Suggestion, ...]
    selected_index: int = 0

    def __post_init__(self) -> None:
        if not self.suggestions:
            object.__setattr__(
                self, "suggestions", (Suggestion(label=self.match_string),)
            )
        if not 0 <= self.selected_index < len(self.suggestions):
            object.__setattr__(self, "selected_index", 0)

    @property
    def selected(self) -> Suggestion:
        return self.suggestions[self.selected_index]

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self.suggestions]

    def with_results(
        self, match_string: str, suggestions: tuple[Suggestion, ...]
    ) -> Session:
        """Apply a new match string and list, clamping the highlight."""
        index = self.selected_index if self.selected_index < len(suggestions) else 0
        return Session(match_string, suggestions, index)


def select_next(session: Session) -> Session:
    return replace(
        session,
        selected_index=(session.selected_index + 1) % len(session.suggestions),
    )


def select_previous(session: Session) -> Session:
    count = len(session.suggestions)
    return replace(session, selected_index=(session.selected_index - 1 + count) % count)


def highlight(session: Session, index: int) -> Session:
    """Move the highlight to *index*; out-of-range indices are ignored."""
    if 0 <= index < len(session.suggestions):
        return replace(session, selected_index=index)
    return session
