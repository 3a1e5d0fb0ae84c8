"""Key commands for the autocomplete editor.

Raw input maps to a named command.  The commands the autocomplete core
cares about are checked first; anything else falls through to the
engine's default bindings, and unbound input (typed text) maps to
``None``.
"""

from __future__ import annotations

from typing import Literal

from tokenline.keys import KeyId, matches_key

KeyCommand = Literal[
    # Claimed by autocomplete while a session is open
    "arrow-down",
    "arrow-up",
    "enter",
    "tab",
    "escape",
    "backspace",
    # Engine defaults
    "delete",
    "cursor-left",
    "cursor-right",
    "line-start",
    "line-end",
    "undo",
    "redo",
]

KeybindingsConfig = dict[KeyCommand, KeyId | list[KeyId]]

AUTOCOMPLETE_KEYBINDINGS: dict[KeyCommand, KeyId | list[KeyId]] = {
    "arrow-down": "down",
    "arrow-up": "up",
    "enter": "enter",
    "tab": "tab",
    "escape": "escape",
    "backspace": "backspace",
}

DEFAULT_KEYBINDINGS: dict[KeyCommand, KeyId | list[KeyId]] = {
    "delete": ["delete", "ctrl+d"],
    "cursor-left": ["left", "ctrl+b"],
    "cursor-right": ["right", "ctrl+f"],
    "line-start": ["home", "ctrl+a"],
    "line-end": ["end", "ctrl+e"],
    "undo": ["ctrl+-", "ctrl+z"],
    "redo": "ctrl+y",
}


class KeybindingsManager:
    """Resolves raw input to key commands, with user overrides."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._command_to_keys: dict[KeyCommand, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._command_to_keys.clear()

        for bindings in (AUTOCOMPLETE_KEYBINDINGS, DEFAULT_KEYBINDINGS, config):
            for command, keys in bindings.items():
                key_array = keys if isinstance(keys, list) else [keys]
                self._command_to_keys[command] = list(key_array)

    def matches(self, data: str, command: KeyCommand) -> bool:
        """Check if input is bound to a specific command."""
        for key in self._command_to_keys.get(command, []):
            if matches_key(data, key):
                return True
        return False

    def get_keys(self, command: KeyCommand) -> list[KeyId]:
        return self._command_to_keys.get(command, [])

    def key_binding(self, data: str) -> KeyCommand | None:
        """Map raw input to a command; autocomplete commands win ties."""
        for command in AUTOCOMPLETE_KEYBINDINGS:
            if self.matches(data, command):
                return command
        return self.default_key_binding(data)

    def default_key_binding(self, data: str) -> KeyCommand | None:
        for command in self._command_to_keys:
            if command in AUTOCOMPLETE_KEYBINDINGS:
                continue
            if self.matches(data, command):
                return command
        return None

    def set_config(self, config: KeybindingsConfig) -> None:
        self._build_maps(config)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
