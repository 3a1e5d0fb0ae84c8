"""Autocomplete configuration.

Settings are plain JSON with camelCase keys, e.g.::

    {
        "candidates": ["React", "Redux"],
        "trigger": "<>",
        "maxSuggestions": 10,
        "autocompleteMaxVisible": 5,
        "undoLimit": 100
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATES: tuple[str, ...] = ("React", "Redux", "DraftJS", "TypeScript")
DEFAULT_TRIGGER = "<>"

_SETTINGS_KEYS: dict[str, str] = {
    "candidates": "candidates",
    "trigger": "trigger",
    "maxSuggestions": "max_suggestions",
    "autocompleteMaxVisible": "max_visible",
    "undoLimit": "undo_limit",
}


class ConfigError(ValueError):
    """Raised for configuration values the editor cannot work with."""


@dataclass
class AutocompleteConfig:
    """Injectable configuration for the autocomplete editor."""

    candidates: list[str] = field(default_factory=lambda: list(DEFAULT_CANDIDATES))
    trigger: str = DEFAULT_TRIGGER
    max_suggestions: int | None = None
    max_visible: int = 5
    undo_limit: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.trigger, str) or len(self.trigger) != 2:
            raise ConfigError(
                f"trigger must be exactly two characters, got {self.trigger!r}"
            )
        if "\n" in self.trigger:
            raise ConfigError("trigger must not contain a newline")
        if isinstance(self.candidates, str) or not all(
            isinstance(c, str) for c in self.candidates
        ):
            raise ConfigError("candidates must be a list of strings")
        self.candidates = list(self.candidates)
        if self.max_suggestions is not None and self.max_suggestions < 1:
            raise ConfigError("max_suggestions must be at least 1")
        if self.undo_limit is not None and self.undo_limit < 0:
            raise ConfigError("undo_limit must not be negative")
        self.max_visible = max(3, min(20, int(self.max_visible)))

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> AutocompleteConfig:
        """Build a config from a camelCase settings mapping.

        Unknown keys and ``None`` values are ignored.
        """
        kwargs: dict[str, Any] = {}
        for key, value in settings.items():
            name = _SETTINGS_KEYS.get(key)
            if name is None or value is None:
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def to_settings(self) -> dict[str, Any]:
        values = {
            "candidates": list(self.candidates),
            "trigger": self.trigger,
            "max_suggestions": self.max_suggestions,
            "max_visible": self.max_visible,
            "undo_limit": self.undo_limit,
        }
        return {key: values[name] for key, name in _SETTINGS_KEYS.items()}


def load_config(path: str) -> tuple[AutocompleteConfig, Exception | None]:
    """Load configuration from a JSON settings file.

    A missing file yields the defaults.  An unreadable or invalid file
    yields the defaults together with the error that was hit.
    """
    if not os.path.exists(path):
        return AutocompleteConfig(), None
    try:
        with open(path, encoding="utf-8") as f:
            settings = json.load(f)
        if not isinstance(settings, dict):
            raise ConfigError(f"{path}: expected a JSON object")
        return AutocompleteConfig.from_settings(settings), None
    except (OSError, json.JSONDecodeError, ConfigError, TypeError) as e:
        logger.warning("Failed to load autocomplete settings from %s: %s", path, e)
        return AutocompleteConfig(), e
