"""Random identifiers and their textual forms."""

from __future__ import annotations

import re
import uuid

_HEX32 = re.compile(r"[0-9a-fA-F]{32}")


def new_id() -> uuid.UUID:
    """Return a fresh random version-4 identifier."""
    return uuid.uuid4()


def parse_id(text: str) -> uuid.UUID:
    """Parse an identifier written as 32 hex digits, with or without hyphens.

    Surrounding whitespace is ignored. Raises ValueError on malformed input.
    """
    compact = text.strip().replace("-", "")
    if len(compact) != 32:
        raise ValueError("invalid uuid length")
    if not _HEX32.fullmatch(compact):
        raise ValueError(f"invalid uuid hex: {text!r}")
    return uuid.UUID(hex=compact)


def short_id(value: uuid.UUID) -> str:
    """Return the hex form of the first four bytes of an identifier."""
    return value.bytes[:4].hex()