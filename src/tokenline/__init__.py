"""tokenline: inline autocomplete with atomic tokens over an immutable rich-text model."""

# Autocomplete core
from tokenline.autocomplete import (
    StaticSuggestionProvider,
    SuggestionProvider,
    detect_trigger,
    filter_suggestions,
    find_marker_start,
    open_session,
    update_session,
)

# Components
from tokenline.components import (
    AutocompleteEditor,
    DraftHandleValue,
    EditorTheme,
    RenderHost,
    SuggestionList,
    SuggestionListTheme,
)

# Configuration
from tokenline.config import AutocompleteConfig, ConfigError, load_config

# Document model
from tokenline.document import Block, Document, Entity, Mutability, SelectionState
from tokenline.editor_state import ChangeType, EditorState

# Entity rendering
from tokenline.entities import EntityRendererRegistry, find_entity_ranges, render_token

# Keybindings
from tokenline.keybindings import (
    AUTOCOMPLETE_KEYBINDINGS,
    DEFAULT_KEYBINDINGS,
    KeybindingsManager,
    KeyCommand,
    get_keybindings,
    set_keybindings,
)
from tokenline.keys import KeyId, matches_key, parse_key

# Mutation API
from tokenline.modifier import (
    create_entity,
    insert_text,
    remove_range,
    replace_text,
    split_block,
)

# Position probing
from tokenline.position import (
    CURSOR_MARKER,
    AfterCommitQueue,
    CaretPosition,
    DropdownPosition,
    PositionProbe,
)

# Session
from tokenline.session import Session, Suggestion, highlight, select_next, select_previous

# Tokens
from tokenline.tokens import AUTOCOMPLETE_TOKEN, SPACER, insert_token, remove_token

# Utilities
from tokenline.utils import truncate_to_width, visible_width

__all__ = [
    # Autocomplete core
    "StaticSuggestionProvider",
    "SuggestionProvider",
    "detect_trigger",
    "filter_suggestions",
    "find_marker_start",
    "open_session",
    "update_session",
    # Components
    "AutocompleteEditor",
    "DraftHandleValue",
    "EditorTheme",
    "RenderHost",
    "SuggestionList",
    "SuggestionListTheme",
    # Configuration
    "AutocompleteConfig",
    "ConfigError",
    "load_config",
    # Document model
    "Block",
    "ChangeType",
    "Document",
    "EditorState",
    "Entity",
    "Mutability",
    "SelectionState",
    # Entity rendering
    "EntityRendererRegistry",
    "find_entity_ranges",
    "render_token",
    # Keybindings
    "AUTOCOMPLETE_KEYBINDINGS",
    "DEFAULT_KEYBINDINGS",
    "KeyCommand",
    "KeyId",
    "KeybindingsManager",
    "get_keybindings",
    "matches_key",
    "parse_key",
    "set_keybindings",
    # Mutation API
    "create_entity",
    "insert_text",
    "remove_range",
    "replace_text",
    "split_block",
    # Position probing
    "CURSOR_MARKER",
    "AfterCommitQueue",
    "CaretPosition",
    "DropdownPosition",
    "PositionProbe",
    # Session
    "Session",
    "Suggestion",
    "highlight",
    "select_next",
    "select_previous",
    # Tokens
    "AUTOCOMPLETE_TOKEN",
    "SPACER",
    "insert_token",
    "remove_token",
    # Utilities
    "truncate_to_width",
    "visible_width",
]
