"""Rich-text editor with inline ``<>`` autocomplete and atomic tokens.

Every keystroke is handled to completion before the next one: it maps
to a key command (or typed text), produces a new ``EditorState``, and
``handle_change`` then decides whether an autocomplete session opens,
updates, or closes.  Committed suggestions become IMMUTABLE token
entities that cursor movement and deletion treat as a single unit.
"""

from __future__ import annotations

import logging
from typing import Callable, Literal, Protocol

import grapheme

from tokenline.autocomplete import (
    StaticSuggestionProvider,
    SuggestionProvider,
    detect_trigger,
    open_session,
    update_session,
)
from tokenline.components.suggestion_list import SuggestionList, SuggestionListTheme
from tokenline.config import AutocompleteConfig
from tokenline.document import Block, Document, SelectionState
from tokenline.editor_state import EditorState
from tokenline.entities import EntityRendererRegistry
from tokenline.keybindings import KeybindingsManager, KeyCommand, get_keybindings
from tokenline.keys import is_printable_input
from tokenline.modifier import insert_text, remove_range, split_block
from tokenline.position import (
    CURSOR_MARKER,
    AfterCommitQueue,
    CaretPosition,
    DropdownPosition,
    PositionProbe,
    extract_cursor_position,
)
from tokenline.session import Session, highlight, select_next, select_previous
from tokenline.tokens import insert_token, remove_token
from tokenline.utils import apply_line_reset, truncate_to_width

logger = logging.getLogger(__name__)

DraftHandleValue = Literal["handled", "not-handled"]

_PASTE_START = "\x1b[200~"
_PASTE_END = "\x1b[201~"


class RenderHost(Protocol):
    def request_render(self) -> None: ...


class EditorTheme(Protocol):
    @property
    def suggestion_list(self) -> SuggestionListTheme: ...


class AutocompleteEditor:
    """Editor component with a single-trigger autocomplete session.

    Implements the component interface (``render``/``handle_input``/
    ``invalidate``) so a host can mount it and forward raw input.
    """

    def __init__(
        self,
        theme: EditorTheme,
        config: AutocompleteConfig | None = None,
        provider: SuggestionProvider | None = None,
        host: RenderHost | None = None,
        keybindings: KeybindingsManager | None = None,
        renderers: EntityRendererRegistry | None = None,
    ) -> None:
        self._config = config or AutocompleteConfig()
        self._provider: SuggestionProvider = provider or StaticSuggestionProvider(
            self._config.candidates
        )
        self._host = host
        self._keybindings = keybindings
        self._renderers = renderers or EntityRendererRegistry.default()
        self._suggestion_list = SuggestionList(
            self._config.max_visible, theme.suggestion_list
        )

        self._state = EditorState.create_empty(undo_limit=self._config.undo_limit)
        self._previous_text = self._state.plain_text
        self._session: Session | None = None

        self._after_commit = AfterCommitQueue()
        self._probe = PositionProbe()

        # Bracketed paste buffering
        self._paste_buffer: str = ""
        self._is_in_paste: bool = False

        self.focused: bool = True

        # Public callbacks
        self.on_change: Callable[[str], None] | None = None

    # -- Accessors -------------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def trigger(self) -> str:
        return self._config.trigger

    @property
    def dropdown_position(self) -> DropdownPosition:
        return self._probe.position

    @property
    def caret_position(self) -> CaretPosition | None:
        return self._probe.caret

    def is_showing_autocomplete(self) -> bool:
        return self._session is not None

    def get_text(self) -> str:
        return self._state.plain_text

    def set_text(self, text: str) -> None:
        """Replace the whole document; any open session is dropped."""
        self._session = None
        self._set_state(
            EditorState.create_with_text(text, undo_limit=self._config.undo_limit)
        )

    def set_editor_state(self, state: EditorState) -> None:
        """Install *state* without running trigger detection."""
        self._set_state(state)

    def set_suggestion_provider(self, provider: SuggestionProvider) -> None:
        self._provider = provider

    # -- Change handling ---------------------------------------------------

    def handle_change(self, new_state: EditorState) -> None:
        """Adopt *new_state* and update the autocomplete session for it.

        With no session open, a single typed character that completes the
        trigger opens one.  With a session open, the match string and the
        suggestions follow the text between the trigger and the caret.
        """
        previous_text = self._previous_text
        self._state = new_state
        self._previous_text = new_state.plain_text

        document = new_state.document
        key = new_state.caret_key
        offset = new_state.caret_offset
        trigger = self._config.trigger
        max_suggestions = self._config.max_suggestions

        if self._session is None:
            caret = document.absolute_offset(key, offset)
            if detect_trigger(previous_text, new_state.plain_text, caret, trigger):
                self._session = open_session(self._provider, max_suggestions)
                logger.debug("Autocomplete opened at offset %d", caret)
        else:
            block_text = document.block_for_key(key).text
            self._session = update_session(
                self._session, block_text, offset, trigger, self._provider, max_suggestions
            )

        self._notify_change()

    def _set_state(self, state: EditorState) -> None:
        self._state = state
        self._previous_text = state.plain_text
        self._notify_change()

    def _notify_change(self) -> None:
        if self._session is not None:
            self._after_commit.schedule(self._update_dropdown_position)
        if self._host is not None:
            self._host.request_render()
        if self.on_change:
            self.on_change(self.get_text())

    def _update_dropdown_position(self) -> None:
        if self._probe.measure() and self._host is not None:
            self._host.request_render()

    # -- Input -----------------------------------------------------------

    def handle_input(self, data: str) -> None:
        if _PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(_PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(_PASTE_END)
            if end_index != -1:
                content = self._paste_buffer[:end_index]
                remaining = self._paste_buffer[end_index + len(_PASTE_END) :]
                self._is_in_paste = False
                self._paste_buffer = ""
                if content:
                    self._insert_text(content.replace("\r\n", "\n").replace("\r", "\n"))
                if remaining:
                    self.handle_input(remaining)
            return

        kb = self._keybindings or get_keybindings()
        command = kb.key_binding(data)
        if command is not None:
            if self.handle_key_command(command) == "not-handled":
                self._apply_default_command(command)
            return

        if is_printable_input(data):
            self._insert_text(data)

    def handle_key_command(self, command: KeyCommand) -> DraftHandleValue:
        """Run autocomplete handling for *command*.

        Returns ``"not-handled"`` when the engine's default behaviour
        should run instead.
        """
        session = self._session
        if session is not None:
            if command == "arrow-down":
                self._set_session(select_next(session))
                return "handled"
            if command == "arrow-up":
                self._set_session(select_previous(session))
                return "handled"
            if command in ("enter", "tab"):
                self.insert_suggestion(session.selected.label or session.match_string)
                return "handled"
            if command == "escape":
                logger.debug("Autocomplete cancelled")
                self._set_session(None)
                return "handled"

        if command == "backspace":
            new_state = remove_token(self._state)
            if new_state is not None:
                self.handle_change(new_state)
                return "handled"

        return "not-handled"

    def _set_session(self, session: Session | None) -> None:
        self._session = session
        if session is not None:
            self._after_commit.schedule(self._update_dropdown_position)
        if self._host is not None:
            self._host.request_render()

    # -- Suggestions -----------------------------------------------------

    def insert_suggestion(self, label: str) -> None:
        """Commit *label* as a token and close the session."""
        state = insert_token(self._state, label, self._config.trigger)
        self._session = None
        self._set_state(state)

    def select_suggestion(self, index: int) -> bool:
        """Commit the suggestion at *index* regardless of the highlight.

        Used for pointer selection.  Returns ``False`` if there is no
        session or no such suggestion.
        """
        if self._session is None or not 0 <= index < len(self._session.suggestions):
            return False
        self.insert_suggestion(self._session.suggestions[index].label)
        return True

    def highlight(self, index: int) -> None:
        """Move the highlight to *index* (pointer hover)."""
        if self._session is not None:
            self._set_session(highlight(self._session, index))

    def cancel_autocomplete(self) -> None:
        self._set_session(None)

    # -- Default editing ---------------------------------------------------

    def _insert_text(self, text: str) -> None:
        document = insert_text(self._state.document, self._state.selection, text)
        self.handle_change(self._state.push(document, "insert-characters"))

    def _apply_default_command(self, command: KeyCommand) -> None:  # noqa: C901
        state = self._state
        document = state.document
        selection = state.selection

        if command == "enter":
            self.handle_change(state.push(split_block(document, selection), "split-block"))
        elif command == "backspace":
            self._delete(backward=True)
        elif command == "delete":
            self._delete(backward=False)
        elif command == "cursor-left":
            self._move_caret(*self._position_left(document, selection))
        elif command == "cursor-right":
            self._move_caret(*self._position_right(document, selection))
        elif command == "line-start":
            self._move_caret(selection.focus_key, 0)
        elif command == "line-end":
            block = document.block_for_key(selection.focus_key)
            self._move_caret(block.key, block.length)
        elif command in ("arrow-up", "arrow-down"):
            neighbour = (
                document.block_before(selection.focus_key)
                if command == "arrow-up"
                else document.block_after(selection.focus_key)
            )
            if neighbour is not None:
                offset = min(selection.focus_offset, neighbour.length)
                self._move_caret(neighbour.key, _snap_out_of_token(document, neighbour, offset))
        elif command == "undo":
            if state.can_undo:
                self.handle_change(state.undo())
        elif command == "redo":
            if state.can_redo:
                self.handle_change(state.redo())
        # tab and escape have no default behaviour

    def _move_caret(self, key: str, offset: int) -> None:
        self.handle_change(
            self._state.force_selection(SelectionState.collapsed(key, offset))
        )

    def _delete(self, backward: bool) -> None:
        state = self._state
        document = state.document
        selection = state.selection

        if not selection.is_collapsed:
            target = selection
            change_type = "remove-range"
        else:
            block = document.block_for_key(selection.focus_key)
            offset = selection.focus_offset
            if backward:
                if offset > 0:
                    start = offset - _last_grapheme_length(block.text[:offset])
                    target = SelectionState(block.key, start, block.key, offset)
                else:
                    previous = document.block_before(block.key)
                    if previous is None:
                        return
                    target = SelectionState(previous.key, previous.length, block.key, 0)
                change_type = "backspace-character"
            else:
                if offset < block.length:
                    end = offset + _first_grapheme_length(block.text[offset:])
                    target = SelectionState(block.key, offset, block.key, end)
                else:
                    following = document.block_after(block.key)
                    if following is None:
                        return
                    target = SelectionState(block.key, offset, following.key, 0)
                change_type = "delete-character"

        direction = "backward" if backward else "forward"
        self.handle_change(
            state.push(remove_range(document, target, direction), change_type)
        )

    @staticmethod
    def _position_left(document: Document, selection: SelectionState) -> tuple[str, int]:
        key, offset = selection.start(document)
        if not selection.is_collapsed:
            return key, offset
        block = document.block_for_key(key)
        if offset == 0:
            previous = document.block_before(key)
            return (previous.key, previous.length) if previous else (key, 0)
        run = _token_run_before(document, block, offset)
        if run is not None:
            return key, run[0]
        return key, offset - _last_grapheme_length(block.text[:offset])

    @staticmethod
    def _position_right(document: Document, selection: SelectionState) -> tuple[str, int]:
        key, offset = selection.end(document)
        if not selection.is_collapsed:
            return key, offset
        block = document.block_for_key(key)
        if offset >= block.length:
            following = document.block_after(key)
            return (following.key, 0) if following else (key, block.length)
        run = _token_run_after(document, block, offset)
        if run is not None:
            return key, run[1]
        return key, offset + _first_grapheme_length(block.text[offset:])

    # -- Rendering -------------------------------------------------------

    def invalidate(self) -> None:
        pass

    def render(self, width: int) -> list[str]:
        """Render the document, then the dropdown when a session is open.

        Queued position measurements run at the end, once the frame they
        measure exists.
        """
        document = self._state.document
        caret_key = self._state.caret_key
        caret_offset = self._state.caret_offset

        lines: list[str] = []
        for block in document.blocks:
            if self.focused and block.key == caret_key:
                line = (
                    self._renderers.render_block(document, block, 0, caret_offset)
                    + CURSOR_MARKER
                    + self._renderers.render_block(document, block, caret_offset)
                )
            else:
                line = self._renderers.render_block(document, block)
            lines.append(line)

        lines, caret = extract_cursor_position(lines)
        lines = [
            apply_line_reset(truncate_to_width(line, width, "")) for line in lines
        ]
        self._probe.record_frame(caret)

        if self._session is not None:
            left = min(self._probe.position.left, max(0, width - 10))
            indent = " " * left
            for line in self._suggestion_list.render(self._session, width - left):
                lines.append(indent + line)

        self._after_commit.flush()
        return lines


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _last_grapheme_length(text: str) -> int:
    clusters = list(grapheme.graphemes(text))
    return len(clusters[-1]) if clusters else 0


def _first_grapheme_length(text: str) -> int:
    for cluster in grapheme.graphemes(text):
        return len(cluster)
    return 0


def _immutable_key(document: Document, block: Block, offset: int) -> str | None:
    key = block.entity_at(offset)
    if key is None:
        return None
    entity = document.entity_map.get(key)
    return key if entity is not None and entity.mutability == "IMMUTABLE" else None


def _token_run_before(
    document: Document, block: Block, offset: int
) -> tuple[int, int] | None:
    key = _immutable_key(document, block, offset - 1)
    if key is None:
        return None
    start = offset - 1
    while start > 0 and block.entity_at(start - 1) == key:
        start -= 1
    return start, offset


def _token_run_after(
    document: Document, block: Block, offset: int
) -> tuple[int, int] | None:
    key = _immutable_key(document, block, offset)
    if key is None:
        return None
    end = offset + 1
    while end < block.length and block.entity_at(end) == key:
        end += 1
    return offset, end


def _snap_out_of_token(document: Document, block: Block, offset: int) -> int:
    """Move *offset* to the end of a token it would otherwise land inside."""
    if offset == 0:
        return offset
    key = _immutable_key(document, block, offset - 1)
    if key is None or block.entity_at(offset) != key:
        return offset
    while offset < block.length and block.entity_at(offset) == key:
        offset += 1
    return offset
