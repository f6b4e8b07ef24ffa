"""Citation keys and raw-text key scanning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from cargo_cite.patterns import PATTERNS


@dataclass(frozen=True, order=True)
class Key:
    """A citation key, as written between `[^@` and `]`."""

    value: str

    def __str__(self) -> str:
        return self.value


def scan_for_key(text: str) -> List[Key]:
    """Return every inline citation key in `text`, duplicates included.

    No block classification happens here: keys inside footnote definitions are
    returned too. Callers collect the result into a set.
    """
    return [Key(m.group(1)) for m in PATTERNS.inline_cite.finditer(text)]
