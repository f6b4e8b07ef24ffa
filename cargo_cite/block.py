"""Comment and code blocks.

A source file is split into maximal runs of documentation-comment lines and
runs of everything else. Only comment blocks take part in citation; code
blocks pass their lines through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Set, Union

from loguru import logger

from cargo_cite.errors import MalformedBlockError
from cargo_cite.keys import Key
from cargo_cite.patterns import PATTERNS, PatternSet


CitationMap = Mapping[Key, str]


@dataclass
class CommentBlock:
    """A run of consecutive `///` or `//!` lines and the keys they cite."""

    lines: List[str] = field(default_factory=list)
    citekeys: Set[Key] = field(default_factory=set)
    patterns: PatternSet = field(default=PATTERNS, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.lines)

    def keys(self) -> Set[Key]:
        return self.citekeys

    def sorted_keys(self) -> List[Key]:
        return sorted(self.citekeys)

    def insert(self, line: str) -> None:
        """Add a line, recording its citation keys.

        Footnote definitions written by a previous run are dropped so that
        citing again regenerates them instead of duplicating them.
        """
        if self.patterns.inline_cite.search(line):
            if self.patterns.cite_footnote_def.match(line):
                return
            for m in self.patterns.inline_cite.finditer(line):
                logger.debug(f"Citation found: {m.group(1)}")
                self.citekeys.add(Key(m.group(1)))
        self.lines.append(line)

    def cite(self, citations: CitationMap) -> None:
        """Append one footnote definition per resolvable key, in key order."""
        # A block made only of stale footnote definitions is empty after parsing
        if not self.lines:
            return

        prefix = self.patterns.comment_prefix(self.lines[0])
        if prefix is None:
            raise MalformedBlockError(f"Comment block starts without a doc-comment marker: {self.lines[0]!r}")

        resolved = [key for key in self.sorted_keys() if key in citations]
        if not resolved:
            return

        last_line = self.lines[-1]
        if not self.patterns.generic_footnote_def.match(last_line) and last_line != prefix:
            self.lines.append(prefix)

        for key in resolved:
            self.lines.append(f"{prefix} [^@{key}]: {citations[key]}")


@dataclass
class CodeBlock:
    """A run of lines that are not documentation comments."""

    lines: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def keys(self) -> Optional[Set[Key]]:
        return None

    def insert(self, line: str) -> None:
        self.lines.append(line)

    def cite(self, citations: CitationMap) -> None:
        pass


Block = Union[CommentBlock, CodeBlock]


def new_block(line: str, patterns: PatternSet = PATTERNS) -> Block:
    """Create an empty block of the kind `line` belongs to."""
    if patterns.doc_comment.match(line):
        return CommentBlock(patterns=patterns)
    return CodeBlock()
