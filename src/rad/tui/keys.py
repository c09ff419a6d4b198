"""Keyboard input parsing for raw terminal sequences.

Turns raw input such as ``"\\x1b[A"`` or ``"\\x03"`` into key identifiers
(``"up"``, ``"ctrl+c"``) and matches input against such identifiers.
Identifiers are modifier prefixes in the fixed order ``ctrl+shift+alt+``
followed by a key name or a single lower-case character.
"""

from __future__ import annotations

from typing import Callable, Union

KeyId = str

# A widget-side key filter: either an identifier, a collection of
# identifiers, or a predicate over the parsed identifier.
KeyMatcher = Union[KeyId, tuple, list, Callable[[KeyId], bool], None]


class Key:
    """Named key identifiers and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    backtab = "shift+tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    insert = "insert"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


# Final byte of CSI / SS3 sequences -> key name
_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Number of ``CSI <n> ~`` sequences -> key name
_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

# xterm modifier parameter (1 + bitmask) -> prefix
_MODIFIER_PREFIXES: dict[int, str] = {
    1: "",
    2: "shift+",
    3: "alt+",
    4: "shift+alt+",
    5: "ctrl+",
    6: "ctrl+shift+",
    7: "ctrl+alt+",
    8: "ctrl+shift+alt+",
}

_SINGLE_BYTE_KEYS: dict[str, str] = {
    "\x1b": "escape",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    " ": "space",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x00": "ctrl+space",
}


def _parse_csi(body: str) -> str | None:
    """Parse the part of a CSI sequence after ``ESC [``."""
    if not body:
        return None

    if body == "Z":
        return "shift+tab"

    final = body[-1]
    params = body[:-1].split(";") if len(body) > 1 else []

    try:
        numbers = [int(p) if p else 1 for p in params]
    except ValueError:
        return None

    modifier = numbers[1] if len(numbers) > 1 else 1
    prefix = _MODIFIER_PREFIXES.get(modifier)
    if prefix is None:
        return None

    if final in _LETTER_KEYS:
        return prefix + _LETTER_KEYS[final]

    if final == "~" and numbers:
        name = _TILDE_KEYS.get(numbers[0])
        if name is not None:
            return prefix + name
        # modifyOtherKeys: CSI 27 ; modifier ; keycode ~
        if numbers[0] == 27 and len(numbers) == 3:
            return prefix + _char_name(chr(numbers[2]))

    if final == "u" and numbers:
        # CSI <codepoint> ; <modifier> u
        return prefix + _char_name(chr(numbers[0]))

    return None


def _char_name(ch: str) -> str:
    if ch in _SINGLE_BYTE_KEYS:
        return _SINGLE_BYTE_KEYS[ch]
    return ch.lower()


def parse_key(data: str) -> KeyId | None:
    """Return the key identifier for raw terminal input, or ``None``."""
    if not data:
        return None

    if data.startswith("\x1b[") and len(data) > 2:
        return _parse_csi(data[2:])

    if data.startswith("\x1bO") and len(data) == 3:
        name = _LETTER_KEYS.get(data[2])
        return name

    if data in _SINGLE_BYTE_KEYS:
        return _SINGLE_BYTE_KEYS[data]

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        if inner is None:
            return None
        if inner.startswith("ctrl+"):
            return "ctrl+alt+" + inner[len("ctrl+"):]
        if len(data[1]) == 1 and data[1].isupper():
            return "shift+alt+" + data[1].lower()
        return "alt+" + inner

    if len(data) == 1 and data.isprintable():
        return data

    return None


def normalize_key_id(key_id: KeyId) -> KeyId:
    """Bring *key_id* into canonical modifier order (``ctrl+shift+alt+``)."""
    parts = key_id.split("+")
    # A literal "+" key is spelled "+" and splits into two empty parts
    if key_id.endswith("++") or key_id == "+":
        name = "+"
        mods = [p for p in key_id[:-1].split("+") if p]
    else:
        name = parts[-1]
        mods = parts[:-1]
    ordered = [m for m in ("ctrl", "shift", "alt") if m in mods]
    return "".join(f"{m}+" for m in ordered) + name


def matches_key(data: str, key_id: KeyId) -> bool:
    """Return ``True`` if raw *data* corresponds to *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    return parsed == normalize_key_id(key_id)


def key_matches(key: KeyId, matcher: KeyMatcher) -> bool:
    """Check a parsed identifier against a widget-side :data:`KeyMatcher`.

    ``None`` matches every key.
    """
    if matcher is None:
        return True
    if isinstance(matcher, str):
        return key == normalize_key_id(matcher)
    if isinstance(matcher, (tuple, list)):
        return any(key == normalize_key_id(m) for m in matcher)
    return bool(matcher(key))
