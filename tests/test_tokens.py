"""Tests for token commit and atomic token removal."""

from __future__ import annotations

from tokenline.document import SelectionState
from tokenline.editor_state import EditorState
from tokenline.modifier import create_entity, insert_text, replace_text
from tokenline.tokens import AUTOCOMPLETE_TOKEN, SPACER, insert_token, remove_token


def _state(text: str, caret: int | None = None) -> EditorState:
    state = EditorState.create_with_text(text)
    if caret is not None:
        state = state.force_selection(SelectionState.collapsed(state.caret_key, caret))
    return state


def _entities(state: EditorState) -> tuple[str | None, ...]:
    return state.document.blocks[0].entities


class TestInsertToken:
    def test_replaces_marker_and_match_string(self) -> None:
        state = insert_token(_state("Hello <>Re"), "Redux", "<>")
        assert state.plain_text == "Hello Redux" + SPACER

    def test_token_is_one_immutable_entity(self) -> None:
        state = insert_token(_state("Hello <>Re"), "Redux", "<>")
        keys = set(_entities(state)[6:11])
        assert len(keys) == 1
        (key,) = keys
        assert key is not None
        entity = state.document.get_entity(key)
        assert entity.type == AUTOCOMPLETE_TOKEN
        assert entity.mutability == "IMMUTABLE"
        assert entity.data == {"text": "Redux"}

    def test_spacer_and_prefix_carry_no_entity(self) -> None:
        state = insert_token(_state("Hello <>Re"), "Redux", "<>")
        entities = _entities(state)
        assert entities[:6] == (None,) * 6
        assert entities[11] is None
        assert len(entities) == 12

    def test_caret_lands_after_spacer(self) -> None:
        state = insert_token(_state("Hello <>Re"), "Redux", "<>")
        assert state.selection == SelectionState.collapsed(state.caret_key, 12)

    def test_text_after_caret_is_kept(self) -> None:
        state = insert_token(_state("a <>Re tail", caret=6), "React", "<>")
        assert state.plain_text == "a React" + SPACER + " tail"
        assert state.caret_offset == 8

    def test_uses_nearest_marker(self) -> None:
        state = insert_token(_state("<>x <>Ty"), "TypeScript", "<>")
        assert state.plain_text == "<>x TypeScript" + SPACER

    def test_fallback_inserts_plain_text(self) -> None:
        state = insert_token(_state("Hello "), "React", "<>")
        assert state.plain_text == "Hello React" + SPACER
        assert all(key is None for key in _entities(state))
        assert state.document.entity_map == {}
        assert state.caret_offset == 12

    def test_empty_label_creates_no_entity(self) -> None:
        state = insert_token(_state("ab<>"), "", "<>")
        assert state.plain_text == "ab" + SPACER
        assert state.document.entity_map == {}
        assert all(key is None for key in _entities(state))
        assert state.caret_offset == 3

    def test_commit_is_a_single_undo_step(self) -> None:
        before = _state("Hello <>Re")
        state = insert_token(before, "Redux", "<>")
        undone = state.undo()
        assert undone.plain_text == "Hello <>Re"
        assert undone.caret_offset == 10

    def test_consecutive_tokens_get_distinct_entities(self) -> None:
        state = insert_token(_state("<>R"), "React", "<>")
        typed = insert_text(state.document, state.selection, "<>Re")
        state = insert_token(state.push(typed, "insert-characters"), "Redux", "<>")
        entities = _entities(state)
        assert state.plain_text == "React" + SPACER + "Redux" + SPACER
        assert entities[0] is not None and entities[6] is not None
        assert entities[0] != entities[6]


class TestRemoveToken:
    def _committed(self) -> EditorState:
        # "Hello " + token("Redux") + spacer, caret after spacer
        return insert_token(_state("Hello <>Re"), "Redux", "<>")

    def _before_spacer(self) -> EditorState:
        state = self._committed()
        return state.force_selection(SelectionState.collapsed(state.caret_key, 11))

    def test_not_handled_after_spacer(self) -> None:
        assert remove_token(self._committed()) is None

    def test_removes_whole_run(self) -> None:
        state = remove_token(self._before_spacer())
        assert state is not None
        assert state.plain_text == "Hello " + SPACER
        assert all(key is None for key in _entities(state))

    def test_caret_collapses_to_run_start(self) -> None:
        state = remove_token(self._before_spacer())
        assert state is not None
        assert state.selection == SelectionState.collapsed(state.caret_key, 6)

    def test_caret_inside_run_removes_all_of_it(self) -> None:
        state = self._committed()
        state = state.force_selection(SelectionState.collapsed(state.caret_key, 8))
        removed = remove_token(state)
        assert removed is not None
        assert removed.plain_text == "Hello " + SPACER

    def test_plain_character_not_handled(self) -> None:
        assert remove_token(_state("Hello")) is None

    def test_block_start_not_handled(self) -> None:
        assert remove_token(_state("Hello", caret=0)) is None

    def test_range_selection_not_handled(self) -> None:
        state = self._before_spacer()
        key = state.caret_key
        assert remove_token(state.force_selection(SelectionState(key, 6, key, 11))) is None

    def test_other_entity_types_not_handled(self) -> None:
        state = _state("see docs")
        key = state.caret_key
        document, entity_key = create_entity(state.document, "LINK", "IMMUTABLE")
        document = replace_text(document, SelectionState(key, 4, key, 8), "docs", entity_key)
        state = state.push(document, "insert-fragment")
        assert remove_token(state) is None

    def test_adjacent_tokens_removed_one_at_a_time(self) -> None:
        state = _state("ab")
        key = state.caret_key
        document, first = create_entity(state.document, AUTOCOMPLETE_TOKEN, "IMMUTABLE")
        document = replace_text(document, SelectionState(key, 0, key, 1), "a", first)
        document, second = create_entity(document, AUTOCOMPLETE_TOKEN, "IMMUTABLE")
        document = replace_text(document, SelectionState(key, 1, key, 2), "b", second)
        state = state.push(document, "insert-fragment").force_selection(
            SelectionState.collapsed(key, 2)
        )
        removed = remove_token(state)
        assert removed is not None
        assert removed.plain_text == "a"
        assert _entities(removed) == (first,)
