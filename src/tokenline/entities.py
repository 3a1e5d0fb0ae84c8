"""Entity renderers.

Each entity type maps to a render strategy: a function from the run's
text to its styled form.  Runs whose entity type has no strategy render
as plain text.
"""

from __future__ import annotations

from typing import Callable, Iterator

from tokenline.document import Block, Document
from tokenline.tokens import AUTOCOMPLETE_TOKEN

RenderStrategy = Callable[[str], str]

_TOKEN_STYLE = "\x1b[31;47m"
_RESET = "\x1b[0m"


def render_token(text: str) -> str:
    """Default token look: red text on a light background."""
    return f"{_TOKEN_STYLE}{text}{_RESET}"


class EntityRendererRegistry:
    """Maps entity types to render strategies."""

    def __init__(self, renderers: dict[str, RenderStrategy] | None = None) -> None:
        self._renderers: dict[str, RenderStrategy] = dict(renderers or {})

    @classmethod
    def default(cls) -> EntityRendererRegistry:
        return cls({AUTOCOMPLETE_TOKEN: render_token})

    def register(self, entity_type: str, strategy: RenderStrategy) -> None:
        self._renderers[entity_type] = strategy

    def get(self, entity_type: str) -> RenderStrategy | None:
        return self._renderers.get(entity_type)

    def render_block(
        self, document: Document, block: Block, start: int = 0, end: int | None = None
    ) -> str:
        """Render ``block.text[start:end]`` with entity runs styled."""
        end = block.length if end is None else end
        parts: list[str] = []
        for run_start, run_end, entity_type in iter_runs(document, block):
            lo = max(run_start, start)
            hi = min(run_end, end)
            if lo >= hi:
                continue
            text = block.text[lo:hi]
            strategy = self._renderers.get(entity_type) if entity_type else None
            parts.append(strategy(text) if strategy else text)
        return "".join(parts)


def iter_runs(document: Document, block: Block) -> Iterator[tuple[int, int, str | None]]:
    """Yield ``(start, end, entity_type)`` for each run of equal entity key."""
    start = 0
    for i in range(1, block.length + 1):
        if i == block.length or block.entities[i] != block.entities[start]:
            key = block.entities[start]
            entity = document.entity_map.get(key) if key is not None else None
            yield start, i, entity.type if entity else None
            start = i


def find_entity_ranges(
    document: Document, block: Block, entity_type: str
) -> list[tuple[int, int]]:
    """All ``(start, end)`` runs of *block* bound to entities of *entity_type*."""

    def is_type(key: str | None) -> bool:
        if key is None:
            return False
        entity = document.entity_map.get(key)
        return entity is not None and entity.type == entity_type

    return list(block.find_entity_ranges(is_type))
