"""Trigger detection, match tracking, and candidate filtering.

A session opens when the user types the second character of the
two-character trigger marker.  While it is open, the text between the
nearest preceding marker and the caret is the match string, and the
candidate list is narrowed to the entries that start with it.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from tokenline.session import Session, Suggestion

logger = logging.getLogger(__name__)


class SuggestionProvider(Protocol):
    """Source of candidates for a match string."""

    def get_suggestions(self, match_string: str) -> list[Suggestion]:
        """Return the ordered candidates for *match_string*.

        An empty match string asks for the full candidate set.
        """
        ...


class StaticSuggestionProvider:
    """Provider over a fixed list, matching by case-insensitive prefix."""

    def __init__(self, candidates: Sequence[str | Suggestion]) -> None:
        self._candidates: list[Suggestion] = [
            c if isinstance(c, Suggestion) else Suggestion(label=c)
            for c in candidates
        ]

    @property
    def candidates(self) -> list[Suggestion]:
        return list(self._candidates)

    def get_suggestions(self, match_string: str) -> list[Suggestion]:
        return [
            s for s in self._candidates if matches_prefix(s.label, match_string)
        ]


def matches_prefix(label: str, match_string: str) -> bool:
    return label.lower().startswith(match_string.lower())


def find_marker_start(text: str, caret: int, marker: str) -> int:
    """Index of the last *marker* lying wholly before *caret*, or -1."""
    if caret < len(marker):
        return -1
    return text.rfind(marker, 0, caret)


def detect_trigger(
    previous_text: str, text: str, caret: int, marker: str
) -> bool:
    """Check whether the latest edit typed the closing character of *marker*.

    Only a single-character insertion counts; pastes and deletions never
    open a session.
    """
    if len(text) != len(previous_text) + 1:
        return False
    if caret < len(marker):
        return False
    return text[caret - len(marker) : caret] == marker


def filter_suggestions(
    provider: SuggestionProvider,
    match_string: str,
    max_suggestions: int | None = None,
) -> tuple[Suggestion, ...]:
    """Candidates for *match_string*, never empty.

    With no real match the list is the typed text itself, so committing
    still inserts what the user wrote.
    """
    suggestions = [
        s for s in provider.get_suggestions(match_string)
        if matches_prefix(s.label, match_string)
    ]
    if max_suggestions is not None:
        suggestions = suggestions[:max_suggestions]
    if not suggestions:
        return (Suggestion(label=match_string),)
    return tuple(suggestions)


def open_session(
    provider: SuggestionProvider, max_suggestions: int | None = None
) -> Session:
    return Session(
        match_string="",
        suggestions=filter_suggestions(provider, "", max_suggestions),
        selected_index=0,
    )


def update_session(
    session: Session,
    block_text: str,
    caret: int,
    marker: str,
    provider: SuggestionProvider,
    max_suggestions: int | None = None,
) -> Session | None:
    """Recompute *session* against the caret block, or ``None`` to cancel.

    The session is cancelled once no marker is left before the caret
    (it was deleted, or the caret moved in front of it).
    """
    start = find_marker_start(block_text, caret, marker)
    if start == -1:
        logger.debug("Trigger marker gone; cancelling autocomplete")
        return None

    match_string = block_text[start + len(marker) : caret]
    suggestions = filter_suggestions(provider, match_string, max_suggestions)
    return session.with_results(match_string, suggestions)
