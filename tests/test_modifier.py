"""Tests for the document model and tokenline.modifier mutation API."""

from __future__ import annotations

from tokenline.document import Block, Document, SelectionState
from tokenline.modifier import (
    create_entity,
    insert_text,
    remove_range,
    replace_text,
    split_block,
)


def _doc(text: str) -> Document:
    return Document.from_text(text)


def _caret(doc: Document, offset: int, block: int = 0) -> SelectionState:
    return SelectionState.collapsed(doc.blocks[block].key, offset)


def _range(doc: Document, start: int, end: int, block: int = 0) -> SelectionState:
    key = doc.blocks[block].key
    return SelectionState(key, start, key, end)


def _with_token(text: str, start: int, end: int) -> tuple[Document, str]:
    """Document for *text* with ``text[start:end]`` bound to an immutable entity."""
    doc = _doc(text)
    doc, key = create_entity(doc, "AUTOCOMPLETE_TOKEN", "IMMUTABLE", {"text": text[start:end]})
    doc = replace_text(doc, _range(doc, start, end), text[start:end], key)
    return doc, key


class TestDocument:
    """Construction and queries."""

    def test_from_text_splits_lines_into_blocks(self) -> None:
        doc = _doc("one\ntwo")
        assert [b.text for b in doc.blocks] == ["one", "two"]
        assert doc.plain_text == "one\ntwo"

    def test_block_keys_are_unique(self) -> None:
        doc = _doc("a\nb\nc\nd")
        assert len({b.key for b in doc.blocks}) == 4

    def test_block_entities_padded_to_text_length(self) -> None:
        block = Block(key="k", text="abc")
        assert block.entities == (None, None, None)

    def test_absolute_offset_counts_newlines(self) -> None:
        doc = _doc("ab\ncd")
        assert doc.absolute_offset(doc.blocks[1].key, 1) == 4

    def test_selection_start_end_are_ordered(self) -> None:
        doc = _doc("hello")
        key = doc.blocks[0].key
        backwards = SelectionState(key, 4, key, 1)
        assert backwards.start(doc) == (key, 1)
        assert backwards.end(doc) == (key, 4)
        assert not backwards.is_collapsed

    def test_find_entity_ranges_separates_adjacent_runs(self) -> None:
        block = Block(key="k", text="aabbc", entities=("1", "1", "2", "2", None))
        ranges = list(block.find_entity_ranges(lambda key: key is not None))
        assert ranges == [(0, 2), (2, 4)]


class TestCreateEntity:
    def test_keys_are_distinct(self) -> None:
        doc = _doc("")
        doc, first = create_entity(doc, "AUTOCOMPLETE_TOKEN", "IMMUTABLE", {"text": "a"})
        doc, second = create_entity(doc, "AUTOCOMPLETE_TOKEN", "IMMUTABLE", {"text": "b"})
        assert first != second
        assert doc.get_entity(second).data == {"text": "b"}

    def test_original_document_is_untouched(self) -> None:
        doc = _doc("")
        create_entity(doc, "LINK", "MUTABLE")
        assert doc.entity_map == {}


class TestReplaceText:
    def test_replaces_range_and_binds_entity(self) -> None:
        doc = _doc("Hello <>Re")
        doc, key = create_entity(doc, "AUTOCOMPLETE_TOKEN", "IMMUTABLE", {"text": "Redux"})
        doc = replace_text(doc, _range(doc, 6, 10), "Redux", key)
        block = doc.blocks[0]
        assert block.text == "Hello Redux"
        assert block.entities[6:] == (key,) * 5
        assert block.entities[:6] == (None,) * 6

    def test_caret_lands_after_inserted_text(self) -> None:
        doc = _doc("Hello <>R")
        doc = replace_text(doc, _range(doc, 6, 9), "React")
        assert doc.selection_after == _caret(doc, 11)

    def test_returns_new_document(self) -> None:
        doc = _doc("abc")
        new = replace_text(doc, _range(doc, 0, 1), "x")
        assert doc.blocks[0].text == "abc"
        assert new.blocks[0].text == "xbc"


class TestInsertText:
    def test_insert_at_caret_has_no_entity(self) -> None:
        doc, _ = _with_token("Hi Redux", 3, 8)
        doc = insert_text(doc, _caret(doc, 8), "!")
        assert doc.blocks[0].text == "Hi Redux!"
        assert doc.blocks[0].entities[8] is None

    def test_multiline_insert_creates_blocks(self) -> None:
        doc = _doc("ab")
        doc = insert_text(doc, _caret(doc, 1), "x\ny\nz")
        assert [b.text for b in doc.blocks] == ["ax", "y", "zb"]
        assert doc.selection_after == SelectionState.collapsed(doc.blocks[2].key, 1)


class TestRemoveRange:
    """Removal widens to whole IMMUTABLE runs."""

    def test_removes_text_and_collapses_to_start(self) -> None:
        doc = _doc("Hello world")
        doc = remove_range(doc, _range(doc, 5, 11), "backward")
        assert doc.blocks[0].text == "Hello"
        assert doc.selection_after == _caret(doc, 5)

    def test_merges_blocks(self) -> None:
        doc = _doc("ab\ncd")
        target = SelectionState(doc.blocks[0].key, 2, doc.blocks[1].key, 0)
        doc = remove_range(doc, target, "backward")
        assert [b.text for b in doc.blocks] == ["abcd"]

    def test_partial_overlap_removes_whole_immutable_run(self) -> None:
        doc, _ = _with_token("Hi Redux!", 3, 8)
        doc = remove_range(doc, _range(doc, 7, 8), "backward")
        assert doc.blocks[0].text == "Hi !"
        assert doc.blocks[0].entities == (None,) * 4
        assert doc.selection_after == _caret(doc, 3)

    def test_forward_overlap_removes_whole_immutable_run(self) -> None:
        doc, _ = _with_token("Hi Redux!", 3, 8)
        doc = remove_range(doc, _range(doc, 3, 4), "forward")
        assert doc.blocks[0].text == "Hi !"

    def test_mutable_run_can_be_cut(self) -> None:
        doc = _doc("Hi link")
        doc, key = create_entity(doc, "LINK", "MUTABLE")
        doc = replace_text(doc, _range(doc, 3, 7), "link", key)
        doc = remove_range(doc, _range(doc, 6, 7), "backward")
        assert doc.blocks[0].text == "Hi lin"
        assert doc.blocks[0].entities[3:] == (key,) * 3

    def test_collapsed_range_is_a_no_op(self) -> None:
        doc = _doc("abc")
        new = remove_range(doc, _caret(doc, 1), "backward")
        assert new.plain_text == "abc"


class TestSplitBlock:
    def test_splits_at_caret(self) -> None:
        doc = _doc("Hello world")
        doc = split_block(doc, _caret(doc, 5))
        assert [b.text for b in doc.blocks] == ["Hello", " world"]
        assert doc.selection_after == SelectionState.collapsed(doc.blocks[1].key, 0)

    def test_entities_follow_their_text(self) -> None:
        doc, key = _with_token("Hi Redux!", 3, 8)
        doc = split_block(doc, _caret(doc, 8))
        assert doc.blocks[0].entities[3:] == (key,) * 5
        assert doc.blocks[1].text == "!"
        assert doc.blocks[1].entities == (None,)
