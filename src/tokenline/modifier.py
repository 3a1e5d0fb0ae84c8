"""Document mutation API.

Pure functions over ``Document`` values.  Each returns a new document
whose ``selection_before``/``selection_after`` record where the caret was
and where it should land after the edit; ``EditorState.push`` picks the
latter up.

Removal never splits an IMMUTABLE entity: a range that cuts into one is
widened to take the whole run, so tokens only ever disappear whole.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from tokenline.document import (
    Block,
    Document,
    Entity,
    Mutability,
    SelectionState,
    generate_block_key,
)

RemovalDirection = Literal["backward", "forward"]

_Position = tuple[int, int]  # (block index, offset)


def create_entity(
    document: Document,
    entity_type: str,
    mutability: Mutability,
    data: Mapping[str, Any] | None = None,
) -> tuple[Document, str]:
    """Register a new entity and return the updated document and its key."""
    entity = Entity(type=entity_type, mutability=mutability, data=dict(data or {}))
    return document.with_entity(entity)


def replace_text(
    document: Document,
    target: SelectionState,
    text: str,
    entity_key: str | None = None,
) -> Document:
    """Replace the text covered by *target* with *text*.

    Every inserted character is bound to *entity_key* (or to no entity).
    The caret lands right after the inserted text.
    """
    start, end = _expanded_bounds(document, target)
    blocks = _remove(document.blocks, start, end)
    blocks, caret = _insert(blocks, start, text, entity_key)
    return document.with_blocks(blocks, target, caret)


def insert_text(
    document: Document,
    selection: SelectionState,
    text: str,
    entity_key: str | None = None,
) -> Document:
    """Insert *text* at *selection*, replacing it first if it is a range."""
    return replace_text(document, selection, text, entity_key)


def remove_range(
    document: Document,
    target: SelectionState,
    direction: RemovalDirection = "backward",
) -> Document:
    """Remove the text covered by *target*, merging blocks it spans.

    The caret collapses to the start of the removed range for either
    *direction*; *direction* only tells which side of a collapsed range
    is being deleted into.
    """
    if target.is_collapsed:
        return document.with_blocks(document.blocks, target, target)

    start, end = _expanded_bounds(document, target)
    blocks = _remove(document.blocks, start, end)
    caret = SelectionState.collapsed(blocks[start[0]].key, start[1])
    return document.with_blocks(blocks, target, caret)


def split_block(document: Document, selection: SelectionState) -> Document:
    """Split the block at the caret, removing any selected text first."""
    start, end = _expanded_bounds(document, selection)
    blocks = _remove(document.blocks, start, end)

    index, offset = start
    block = blocks[index]
    new_key = generate_block_key({b.key: None for b in blocks})
    head = Block(key=block.key, text=block.text[:offset], entities=block.entities[:offset])
    tail = Block(key=new_key, text=block.text[offset:], entities=block.entities[offset:])
    blocks = blocks[:index] + (head, tail) + blocks[index + 1 :]

    caret = SelectionState.collapsed(new_key, 0)
    return document.with_blocks(blocks, selection, caret)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _clamped(document: Document, key: str, offset: int) -> _Position:
    index = document.block_index(key)
    length = document.blocks[index].length
    return index, max(0, min(offset, length))


def _expanded_bounds(
    document: Document, target: SelectionState
) -> tuple[_Position, _Position]:
    start = _clamped(document, *target.start(document))
    end = _clamped(document, *target.end(document))
    if start == end:
        return start, end

    start_block = document.blocks[start[0]]
    end_block = document.blocks[end[0]]
    return (
        (start[0], _expand_left(document, start_block, start[1])),
        (end[0], _expand_right(document, end_block, end[1])),
    )


def _is_immutable(document: Document, entity_key: str | None) -> bool:
    if entity_key is None:
        return False
    entity = document.entity_map.get(entity_key)
    return entity is not None and entity.mutability == "IMMUTABLE"


def _expand_left(document: Document, block: Block, offset: int) -> int:
    key = block.entity_at(offset)
    if offset == 0 or key is None or block.entity_at(offset - 1) != key:
        return offset
    if not _is_immutable(document, key):
        return offset
    while offset > 0 and block.entity_at(offset - 1) == key:
        offset -= 1
    return offset


def _expand_right(document: Document, block: Block, offset: int) -> int:
    key = block.entity_at(offset - 1)
    if offset >= block.length or key is None or block.entity_at(offset) != key:
        return offset
    if not _is_immutable(document, key):
        return offset
    while offset < block.length and block.entity_at(offset) == key:
        offset += 1
    return offset


def _remove(
    blocks: tuple[Block, ...], start: _Position, end: _Position
) -> tuple[Block, ...]:
    if start == end:
        return blocks
    (si, so), (ei, eo) = start, end
    first, last = blocks[si], blocks[ei]
    merged = Block(
        key=first.key,
        text=first.text[:so] + last.text[eo:],
        entities=first.entities[:so] + last.entities[eo:],
    )
    return blocks[:si] + (merged,) + blocks[ei + 1 :]


def _insert(
    blocks: tuple[Block, ...],
    at: _Position,
    text: str,
    entity_key: str | None,
) -> tuple[tuple[Block, ...], SelectionState]:
    index, offset = at
    block = blocks[index]
    lines = text.split("\n")

    if len(lines) == 1:
        updated = Block(
            key=block.key,
            text=block.text[:offset] + text + block.text[offset:],
            entities=(
                block.entities[:offset]
                + (entity_key,) * len(text)
                + block.entities[offset:]
            ),
        )
        caret = SelectionState.collapsed(block.key, offset + len(text))
        return blocks[:index] + (updated,) + blocks[index + 1 :], caret

    # Multi-line insertion: the first line joins the head of the block,
    # the last line joins its tail, the rest become blocks of their own.
    keys = {b.key: None for b in blocks}
    new_blocks = [
        Block(
            key=block.key,
            text=block.text[:offset] + lines[0],
            entities=block.entities[:offset] + (entity_key,) * len(lines[0]),
        )
    ]
    for line in lines[1:-1]:
        key = generate_block_key(keys)
        keys[key] = None
        new_blocks.append(Block(key=key, text=line, entities=(entity_key,) * len(line)))

    tail_key = generate_block_key(keys)
    new_blocks.append(
        Block(
            key=tail_key,
            text=lines[-1] + block.text[offset:],
            entities=(entity_key,) * len(lines[-1]) + block.entities[offset:],
        )
    )
    caret = SelectionState.collapsed(tail_key, len(lines[-1]))
    return blocks[:index] + tuple(new_blocks) + blocks[index + 1 :], caret
