"""
Decoder for PostgreSQL text-encoded array literals (``{a,"b c",d}``)
"""

from collections.abc import Sequence
from typing import Any

from pgschemadiff.errors import ArrayParseError


def parse_array(text: str | None) -> list[str]:
    """Decode a one-dimensional array literal into its items.

    Double-quoted items may contain commas, braces and whitespace; a backslash
    escapes the next character. Whitespace outside quotes is ignored.

    Args:
        text: Array literal as produced by ``anyarray::text``

    Returns:
        Items in order. ``{}`` and ``None`` both decode to an empty list.

    Raises:
        ArrayParseError: If the literal is malformed or unterminated
    """
    if text is None:
        return []

    items: list[str] = []
    current: list[str] = []
    started = False
    closed = False
    quoted = False
    escaping = False
    item_seen = False

    for char in text:
        if closed:
            if char.isspace():
                continue
            raise ArrayParseError(f"Unexpected {char!r} after end of array in {text!r}")

        if escaping:
            current.append(char)
            escaping = False
            item_seen = True
            continue
        if char == "\\" and started:
            escaping = True
            continue
        if quoted:
            if char == '"':
                quoted = False
            else:
                current.append(char)
            continue

        if char == "{":
            if started:
                raise ArrayParseError(f"Unexpected '{{' in the middle of the array {text!r}")
            started = True
            continue
        if not started:
            if char.isspace():
                continue
            raise ArrayParseError(f"Array literal must start with '{{': {text!r}")

        if char == "}":
            if item_seen or current or items:
                items.append("".join(current))
            closed = True
        elif char == ",":
            items.append("".join(current))
            current = []
            item_seen = False
        elif char == '"':
            quoted = True
            item_seen = True
        elif not char.isspace():
            current.append(char)
            item_seen = True

    if not closed:
        raise ArrayParseError(f"Unterminated array literal: {text!r}")
    return items


def coerce_array(value: Any) -> list[str]:
    """Normalize a driver value that may be array text or an already-decoded list."""
    if value is None:
        return []
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return parse_array(value)
    if isinstance(value, Sequence):
        return [str(item) for item in value]
    raise ArrayParseError(f"Unsupported array value of type {type(value).__name__}")
