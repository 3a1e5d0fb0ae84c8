"""Immutable rich-text document model.

A ``Document`` is an ordered tuple of ``Block`` values plus an entity map.
Every character of a block may reference an entity key; entities are
typed annotations (tokens, links, ...) that cover a contiguous run of
characters.  Nothing here is ever mutated in place: edits go through
``tokenline.modifier`` and produce new ``Document`` values.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterator, Literal, Mapping

Mutability = Literal["IMMUTABLE", "MUTABLE"]


@dataclass(frozen=True)
class Entity:
    """A typed annotation attached to a run of characters."""

    type: str
    mutability: Mutability = "MUTABLE"
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Block:
    """A single line of text with a parallel per-character entity list."""

    key: str
    text: str = ""
    entities: tuple[str | None, ...] = ()

    def __post_init__(self) -> None:
        if len(self.entities) != len(self.text):
            # Pad/trim so the parallel list always lines up with the text
            fixed = tuple(self.entities[: len(self.text)])
            fixed += (None,) * (len(self.text) - len(fixed))
            object.__setattr__(self, "entities", fixed)

    @property
    def length(self) -> int:
        return len(self.text)

    def entity_at(self, offset: int) -> str | None:
        if 0 <= offset < len(self.entities):
            return self.entities[offset]
        return None

    def find_entity_ranges(
        self, predicate: Callable[[str | None], bool]
    ) -> Iterator[tuple[int, int]]:
        """Yield maximal ``(start, end)`` runs whose entity key satisfies *predicate*.

        A run breaks whenever the entity key changes, so two adjacent
        tokens with different keys come back as separate ranges.
        """
        start = -1
        current: str | None = None
        for i, key in enumerate(self.entities):
            if start != -1 and key != current:
                yield start, i
                start = -1
            if start == -1 and predicate(key):
                start = i
                current = key
        if start != -1:
            yield start, len(self.entities)


def generate_block_key(existing: Mapping[str, Any] | None = None) -> str:
    """Generate a short random block key not present in *existing*."""
    while True:
        key = secrets.token_hex(3)[:5]
        if not existing or key not in existing:
            return key


@dataclass(frozen=True)
class SelectionState:
    """An (anchor, focus) range over the document; collapsed means caret."""

    anchor_key: str
    anchor_offset: int
    focus_key: str
    focus_offset: int

    @classmethod
    def collapsed(cls, key: str, offset: int) -> SelectionState:
        return cls(key, offset, key, offset)

    @property
    def is_collapsed(self) -> bool:
        return (
            self.anchor_key == self.focus_key
            and self.anchor_offset == self.focus_offset
        )

    def start(self, document: Document) -> tuple[str, int]:
        return self._ordered(document)[0]

    def end(self, document: Document) -> tuple[str, int]:
        return self._ordered(document)[1]

    def _ordered(self, document: Document) -> tuple[tuple[str, int], tuple[str, int]]:
        anchor = (self.anchor_key, self.anchor_offset)
        focus = (self.focus_key, self.focus_offset)
        a_index = document.block_index(self.anchor_key)
        f_index = document.block_index(self.focus_key)
        if (a_index, self.anchor_offset) <= (f_index, self.focus_offset):
            return anchor, focus
        return focus, anchor


@dataclass(frozen=True)
class Document:
    """An immutable snapshot of the document content."""

    blocks: tuple[Block, ...]
    entity_map: Mapping[str, Entity] = field(default_factory=dict)
    selection_before: SelectionState | None = None
    selection_after: SelectionState | None = None
    entity_counter: int = 0

    # -- Construction --------------------------------------------------------

    @classmethod
    def create_empty(cls) -> Document:
        return cls.from_text("")

    @classmethod
    def from_text(cls, text: str) -> Document:
        """Build a document with one block per line of *text*."""
        blocks: list[Block] = []
        keys: dict[str, None] = {}
        for line in text.split("\n"):
            key = generate_block_key(keys)
            keys[key] = None
            blocks.append(Block(key=key, text=line))
        first = blocks[0].key
        caret = SelectionState.collapsed(first, 0)
        return cls(
            blocks=tuple(blocks),
            selection_before=caret,
            selection_after=caret,
        )

    # -- Queries -------------------------------------------------------------

    @property
    def plain_text(self) -> str:
        return "\n".join(block.text for block in self.blocks)

    @property
    def first_block(self) -> Block:
        return self.blocks[0]

    @property
    def last_block(self) -> Block:
        return self.blocks[-1]

    def block_index(self, key: str) -> int:
        for i, block in enumerate(self.blocks):
            if block.key == key:
                return i
        raise KeyError(f"Unknown block key: {key!r}")

    def block_for_key(self, key: str) -> Block:
        return self.blocks[self.block_index(key)]

    def block_before(self, key: str) -> Block | None:
        index = self.block_index(key)
        return self.blocks[index - 1] if index > 0 else None

    def block_after(self, key: str) -> Block | None:
        index = self.block_index(key)
        return self.blocks[index + 1] if index + 1 < len(self.blocks) else None

    def get_entity(self, key: str) -> Entity:
        return self.entity_map[key]

    def absolute_offset(self, key: str, offset: int) -> int:
        """Translate a (block, offset) position into a ``plain_text`` index."""
        total = 0
        for block in self.blocks:
            if block.key == key:
                return total + offset
            total += block.length + 1
        raise KeyError(f"Unknown block key: {key!r}")

    # -- Derivation helpers (used by the modifier) ---------------------------

    def with_blocks(
        self,
        blocks: tuple[Block, ...],
        selection_before: SelectionState | None,
        selection_after: SelectionState | None,
    ) -> Document:
        return replace(
            self,
            blocks=blocks,
            selection_before=selection_before,
            selection_after=selection_after,
        )

    def with_entity(self, entity: Entity) -> tuple[Document, str]:
        counter = self.entity_counter + 1
        key = str(counter)
        entity_map = dict(self.entity_map)
        entity_map[key] = entity
        return replace(self, entity_map=entity_map, entity_counter=counter), key
