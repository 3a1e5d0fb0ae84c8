"""Terminal width measurement for rendered editor lines.

Rendered lines carry ANSI styling (tokens) and APC cursor markers; both
are invisible.  The zero-width spacer that follows every token measures
as zero columns as well.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# CSI (SGR and friends), OSC 8 hyperlinks, APC payloads
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"
    r"|\x1b\][^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_SGR_RESET = "\x1b[0m"

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def strip_ansi(text: str) -> str:
    return _ESCAPE_RE.sub("", text)


def grapheme_width(g: str) -> int:
    """Display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ sequences, skin tones and flags render as emoji
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first) in ("Mn", "Mc", "Me", "Cf"):
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Visible terminal width of *text*, ignoring escape sequences."""
    if not text:
        return 0

    stripped = strip_ansi(text).replace("\t", "   ")
    if not stripped:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Fit *text* into *max_width* columns, appending *ellipsis* when cut.

    With *pad* the result is right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        return text + " " * (max_width - text_width) if pad else text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return take_columns(ellipsis, max_width)

    result = take_columns(text, target) + ellipsis
    if pad:
        result += " " * max(0, max_width - visible_width(result))
    return result


def apply_line_reset(line: str) -> str:
    """Append ``ESC[0m`` to a styled line that does not already end with it.

    A line cut inside a styled run would otherwise leak its style into
    whatever is drawn after it.
    """
    if "\x1b[" not in line or line.endswith(_SGR_RESET):
        return line
    return line + _SGR_RESET


def take_columns(text: str, max_cols: int) -> str:
    """Longest prefix of *text* within *max_cols* columns.

    Escape sequences are kept; text is cut on grapheme boundaries.
    """
    result: list[str] = []
    cols = 0
    pos = 0
    while pos < len(text):
        escape = _ESCAPE_RE.match(text, pos)
        if escape is not None:
            result.append(escape.group(0))
            pos = escape.end()
            continue

        # Measure up to the next escape sequence
        next_escape = _ESCAPE_RE.search(text, pos)
        chunk_end = next_escape.start() if next_escape else len(text)
        for g in grapheme.graphemes(text[pos:chunk_end]):
            w = grapheme_width(g)
            if cols + w > max_cols:
                return "".join(result)
            result.append(g)
            cols += w
        pos = chunk_end

    return "".join(result)
