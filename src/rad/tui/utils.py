"""Text width measurement for terminal cells.

Widths are measured per grapheme cluster so that combining marks,
emoji sequences and wide CJK characters occupy the right number of
cells.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterator

import grapheme
import wcwidth as _wcwidth

# CSI, OSC and APC sequences
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

# ---------------------------------------------------------------------------
# Width cache
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the number of cells a single grapheme cluster occupies."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tones, regional indicators
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def strip_ansi(text: str) -> str:
    return _STRIP_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*, ignoring escapes."""
    if not text:
        return 0

    stripped = strip_ansi(text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def cells(text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(grapheme, width)`` pairs of *text*, skipping zero-width ones."""
    for g in grapheme.graphemes(text):
        width = grapheme_width(g)
        if width > 0:
            yield g, width


def truncate_to_width(text: str, max_width: int, ellipsis: str = "") -> str:
    """Cut plain *text* so it fits in *max_width* cells.

    When the text is cut and *ellipsis* is given, the ellipsis replaces the
    tail so the result still fits.
    """
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    room = max_width - visible_width(ellipsis)
    if room < 0:
        return truncate_to_width(ellipsis, max_width)

    out: list[str] = []
    used = 0
    for g, width in cells(text):
        if used + width > room:
            break
        out.append(g)
        used += width
    return "".join(out) + ellipsis


def pad_to_width(text: str, width: int) -> str:
    """Truncate or right-pad *text* with spaces to exactly *width* cells."""
    text = truncate_to_width(text, width)
    return text + " " * max(0, width - visible_width(text))
