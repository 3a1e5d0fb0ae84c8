"""Editor state snapshots with undo/redo history."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from tokenline.document import Document, SelectionState

ChangeType = Literal[
    "insert-characters",
    "insert-fragment",
    "backspace-character",
    "delete-character",
    "remove-range",
    "split-block",
    "undo",
    "redo",
]

# Consecutive pushes of these types merge into one undo step
_COALESCING_CHANGES: frozenset[str] = frozenset(
    {"insert-characters", "backspace-character", "delete-character"}
)


@dataclass(frozen=True)
class EditorState:
    """A document, the caret on it, and the history that led there.

    Every operation returns a new ``EditorState``; nothing is mutated.
    """

    document: Document
    selection: SelectionState
    undo_stack: tuple[Document, ...] = ()
    redo_stack: tuple[Document, ...] = ()
    last_change_type: ChangeType | None = None
    undo_limit: int | None = None

    @classmethod
    def create_empty(cls, undo_limit: int | None = None) -> EditorState:
        return cls.create_with_text("", undo_limit=undo_limit)

    @classmethod
    def create_with_text(cls, text: str, undo_limit: int | None = None) -> EditorState:
        """Create a state for *text* with the caret at its very end."""
        document = Document.from_text(text)
        last = document.last_block
        return cls(
            document=document,
            selection=SelectionState.collapsed(last.key, last.length),
            undo_limit=undo_limit,
        )

    @property
    def plain_text(self) -> str:
        return self.document.plain_text

    @property
    def caret_key(self) -> str:
        return self.selection.focus_key

    @property
    def caret_offset(self) -> int:
        return self.selection.focus_offset

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def push(self, document: Document, change_type: ChangeType) -> EditorState:
        """Record *document* as a new undoable edit.

        The caret moves to ``document.selection_after``.  Runs of
        character insertions or deletions collapse into one undo step.
        """
        if document is self.document:
            return self

        undo_stack = self.undo_stack
        boundary = (
            change_type != self.last_change_type
            or change_type not in _COALESCING_CHANGES
            or not undo_stack
        )
        if boundary:
            undo_stack = undo_stack + (self.document,)
            if self.undo_limit is not None and len(undo_stack) > self.undo_limit:
                undo_stack = undo_stack[len(undo_stack) - self.undo_limit :]
        else:
            # Undo of a merged run returns the caret to where the run began
            document = replace(
                document, selection_before=self.document.selection_before
            )

        selection = document.selection_after or self.selection
        return replace(
            self,
            document=document,
            selection=selection,
            undo_stack=undo_stack,
            redo_stack=(),
            last_change_type=change_type,
        )

    def force_selection(self, selection: SelectionState) -> EditorState:
        """Return a state with the caret moved to *selection*."""
        return replace(self, selection=selection)

    def undo(self) -> EditorState:
        if not self.undo_stack:
            return self
        previous = self.undo_stack[-1]
        return replace(
            self,
            document=previous,
            selection=_clamp_caret(previous, self.document.selection_before),
            undo_stack=self.undo_stack[:-1],
            redo_stack=self.redo_stack + (self.document,),
            last_change_type="undo",
        )

    def redo(self) -> EditorState:
        if not self.redo_stack:
            return self
        following = self.redo_stack[-1]
        return replace(
            self,
            document=following,
            selection=_clamp_caret(following, following.selection_after),
            undo_stack=self.undo_stack + (self.document,),
            redo_stack=self.redo_stack[:-1],
            last_change_type="redo",
        )


def _clamp_caret(
    document: Document, selection: SelectionState | None
) -> SelectionState:
    """Collapse *selection* onto a position that exists in *document*."""
    if selection is not None:
        for block in document.blocks:
            if block.key == selection.focus_key:
                offset = max(0, min(selection.focus_offset, block.length))
                return SelectionState.collapsed(block.key, offset)
    last = document.last_block
    return SelectionState.collapsed(last.key, last.length)
