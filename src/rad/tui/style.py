"""Cell styles and the render theme.

A :class:`Style` is both a value stored in buffer cells and, like the
theme functions of other terminal toolkits, a callable ``text -> str`` that
wraps text in the matching SGR escape sequences.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

Color = Union[int, str, None]

RESET = "\x1b[0m"

_NAMED_COLORS: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "cyan": 6,
    "white": 7,
    "gray": 8,
    "light_red": 9,
    "light_green": 10,
    "light_yellow": 11,
    "light_blue": 12,
    "light_magenta": 13,
    "light_cyan": 14,
    "bright_white": 15,
}


def _color_params(color: Color, background: bool) -> list[str]:
    if color is None:
        return []
    if isinstance(color, str):
        if color.startswith("#") and len(color) == 7:
            r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
            return ["48" if background else "38", "2", str(r), str(g), str(b)]
        index = _NAMED_COLORS.get(color)
        if index is None:
            raise ValueError(f"unknown color: {color!r}")
        color = index
    if color < 8:
        return [str((40 if background else 30) + color)]
    if color < 16:
        return [str((100 if background else 90) + color - 8)]
    return ["48" if background else "38", "5", str(color)]


@dataclass(frozen=True)
class Style:
    fg: Color = None
    bg: Color = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    reversed: bool = False

    def sgr(self) -> str:
        """Return the SGR sequence that selects this style (``""`` if plain)."""
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.dim:
            params.append("2")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.reversed:
            params.append("7")
        params += _color_params(self.fg, background=False)
        params += _color_params(self.bg, background=True)
        if not params:
            return ""
        return "\x1b[" + ";".join(params) + "m"

    def patch(self, other: Style) -> Style:
        """Overlay *other* on this style: set attributes of *other* win."""
        return replace(
            self,
            fg=other.fg if other.fg is not None else self.fg,
            bg=other.bg if other.bg is not None else self.bg,
            bold=self.bold or other.bold,
            dim=self.dim or other.dim,
            italic=self.italic or other.italic,
            underline=self.underline or other.underline,
            reversed=self.reversed or other.reversed,
        )

    def __call__(self, text: str) -> str:
        sgr = self.sgr()
        if not sgr:
            return text
        return f"{sgr}{text}{RESET}"


PLAIN = Style()


@dataclass(frozen=True)
class Theme:
    """Styles used by the built-in widgets."""

    text: Style = PLAIN
    dim: Style = field(default_factory=lambda: Style(fg="gray"))
    border: Style = field(default_factory=lambda: Style(fg="gray"))
    focus_border: Style = field(default_factory=lambda: Style(fg="white"))
    title: Style = field(default_factory=lambda: Style(bold=True))
    highlight: Style = field(default_factory=lambda: Style(reversed=True))
    header: Style = field(default_factory=lambda: Style(bold=True))
    shortcut: Style = field(default_factory=lambda: Style(bold=True))
    shortcut_description: Style = field(default_factory=lambda: Style(fg="gray"))
    bar: Style = field(default_factory=lambda: Style(bg=236))
    cursor: Style = field(default_factory=lambda: Style(reversed=True))
    placeholder: Style = field(default_factory=lambda: Style(fg="gray", italic=True))


DEFAULT_THEME = Theme()


@dataclass(frozen=True)
class Span:
    """A run of text drawn with one style."""

    text: str
    style: Style = PLAIN


# Anything that can be drawn on a single line
Content = Union[str, Span, list[Span], tuple[Span, ...]]


def to_spans(content: Content, style: Style = PLAIN) -> list[Span]:
    """Normalize *content* to spans; plain strings get *style*."""
    if isinstance(content, str):
        return [Span(content, style)]
    if isinstance(content, Span):
        return [content]
    return [s if isinstance(s, Span) else Span(str(s), style) for s in content]


def plain_text(content: Content) -> str:
    return "".join(span.text for span in to_spans(content))
