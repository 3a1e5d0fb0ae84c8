"""Committing suggestions as atomic tokens and deleting them as a unit."""

from __future__ import annotations

import logging
from dataclasses import replace

from tokenline.autocomplete import find_marker_start
from tokenline.document import SelectionState
from tokenline.editor_state import EditorState
from tokenline.modifier import create_entity, insert_text, remove_range, replace_text

logger = logging.getLogger(__name__)

AUTOCOMPLETE_TOKEN = "AUTOCOMPLETE_TOKEN"

# Zero-width space placed after every token.  A non-editable run offers
# no text position after it, so the caret needs this character to land on.
SPACER = "\u200b"


def insert_token(state: EditorState, label: str, marker: str) -> EditorState:
    """Replace ``marker + match string`` before the caret with a token.

    The token is an IMMUTABLE ``AUTOCOMPLETE_TOKEN`` entity followed by a
    single entity-free spacer; the caret ends up after the spacer.  If no
    marker precedes the caret the label goes in as plain text instead.
    """
    document = state.document
    selection = state.selection
    block_key = selection.focus_key
    caret = selection.focus_offset
    block_text = document.block_for_key(block_key).text

    start = find_marker_start(block_text, caret, marker)
    if start != -1 and not label:
        # An empty label has no characters to carry an entity
        target = SelectionState(block_key, start, block_key, caret)
        document = replace_text(document, target, "")
    elif start != -1:
        target = SelectionState(block_key, start, block_key, caret)
        document, entity_key = create_entity(
            document, AUTOCOMPLETE_TOKEN, "IMMUTABLE", {"text": label}
        )
        document = replace_text(document, target, label, entity_key)
        logger.debug("Committed token %r as entity %s", label, entity_key)
    else:
        document = insert_text(document, selection, label)
        logger.debug("No trigger marker before caret; inserted %r as text", label)

    after_label = document.selection_after or selection
    document = insert_text(document, after_label, SPACER)
    document = replace(document, selection_before=selection)
    return state.push(document, "insert-fragment")


def remove_token(state: EditorState) -> EditorState | None:
    """Delete the whole token right before the caret.

    Returns ``None`` when the caret is not directly after a token, so the
    caller can fall back to ordinary deletion.
    """
    selection = state.selection
    if not selection.is_collapsed:
        return None

    offset = selection.focus_offset
    if offset == 0:
        return None

    document = state.document
    block = document.block_for_key(selection.focus_key)
    entity_key = block.entity_at(offset - 1)
    if entity_key is None:
        return None
    entity = document.entity_map.get(entity_key)
    if entity is None or entity.type != AUTOCOMPLETE_TOKEN:
        return None

    start = offset - 1
    end = offset
    while start > 0 and block.entity_at(start - 1) == entity_key:
        start -= 1
    while end < block.length and block.entity_at(end) == entity_key:
        end += 1

    token_range = SelectionState(block.key, start, block.key, end)
    document = remove_range(document, token_range, "backward")
    logger.debug("Removed token %s spanning %d..%d", entity_key, start, end)
    return state.push(document, "remove-range").force_selection(
        SelectionState.collapsed(block.key, start)
    )
