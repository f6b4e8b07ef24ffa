"""Subprocess text decoding helpers.

Cargo output is decoded deterministically even when it contains bytes that
are not valid UTF-8.
"""

from __future__ import annotations


def to_text(value: object, *, encoding: str = "utf-8") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode(encoding, errors="replace")
    return ""


def tail_text(text: str, max_chars: int = 2000) -> str:
    if not text:
        return ""
    if len(text) <= max_chars:
        return text
    return text[-max_chars:]
