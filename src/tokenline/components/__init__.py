"""Editor components."""

from tokenline.components.autocomplete_editor import (
    AutocompleteEditor,
    DraftHandleValue,
    EditorTheme,
    RenderHost,
)
from tokenline.components.suggestion_list import SuggestionList, SuggestionListTheme

__all__ = [
    "AutocompleteEditor",
    "DraftHandleValue",
    "EditorTheme",
    "RenderHost",
    "SuggestionList",
    "SuggestionListTheme",
]
