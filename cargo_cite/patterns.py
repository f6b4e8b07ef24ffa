"""Line recognizers for Rust documentation comments.

All patterns are anchored at the start of the line after optional spaces or
tabs, except the inline citation marker which may appear anywhere.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PatternSet:
    """The four recognizers used while scanning and citing."""

    # [^@key] anywhere in a line, key matched up to the first ']'
    inline_cite: "re.Pattern[str]"
    # line begins with /// or //!
    doc_comment: "re.Pattern[str]"
    # line begins with /// [^@key]:
    cite_footnote_def: "re.Pattern[str]"
    # line begins with /// [^anything]:
    generic_footnote_def: "re.Pattern[str]"

    def comment_prefix(self, line: str) -> Optional[str]:
        """Return the indentation plus marker of a doc-comment line, if any."""
        m = self.doc_comment.match(line)
        return m.group(0) if m else None


PATTERNS = PatternSet(
    inline_cite=re.compile(r"\[\^@(.*?)\]"),
    doc_comment=re.compile(r"^[ \t]*//[/!]"),
    cite_footnote_def=re.compile(r"^[ \t]*//[/!]\s*\[\^@(.*?)\]:"),
    generic_footnote_def=re.compile(r"^[ \t]*//[/!]\s*\[\^.*\]:"),
)
