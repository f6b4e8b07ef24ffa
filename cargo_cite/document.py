"""Source documents.

A `Document` is a file reconstructed as an ordered list of blocks that
alternate between documentation comments and code. Citing a document appends
footnote definitions to its comment blocks; everything else is written back
exactly as it was read.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Set

from loguru import logger

from cargo_cite.block import Block, CitationMap, CodeBlock, CommentBlock, new_block
from cargo_cite.keys import Key
from cargo_cite.patterns import PATTERNS, PatternSet
from cargo_cite.utils.filesystem import (
    PathLike,
    atomic_write_text,
    detect_newline,
    ends_with_newline,
    read_text,
    split_lines,
)


class Document:
    """A source file split into comment and code blocks."""

    def __init__(
        self,
        filename: PathLike,
        blocks: Optional[List[Block]] = None,
        *,
        newline: str = "\n",
        final_newline: bool = True,
        encoding: str = "utf-8",
    ):
        self.filename = Path(filename)
        self.blocks: List[Block] = blocks if blocks is not None else []
        self.newline = newline
        self.final_newline = final_newline
        self.encoding = encoding
        self.keys: Set[Key] = set()
        for block in self.blocks:
            block_keys = block.keys()
            if block_keys:
                self.keys.update(block_keys)

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        filename: PathLike,
        *,
        newline: str = "\n",
        final_newline: bool = True,
        encoding: str = "utf-8",
        patterns: PatternSet = PATTERNS,
    ) -> "Document":
        """Build a document from lines without terminators.

        The current block switches kind whenever a line's doc-comment status
        differs from it; nothing else is looked at.
        """
        blocks: List[Block] = []
        current: Optional[Block] = None

        for line in lines:
            is_comment = patterns.doc_comment.match(line) is not None
            if current is None:
                current = new_block(line, patterns)
            elif is_comment != isinstance(current, CommentBlock):
                blocks.append(current)
                current = CommentBlock(patterns=patterns) if is_comment else CodeBlock()
            current.insert(line)

        if current is not None:
            blocks.append(current)

        return cls(filename, blocks, newline=newline, final_newline=final_newline, encoding=encoding)

    @classmethod
    def from_text(cls, text: str, filename: PathLike, *, encoding: str = "utf-8") -> "Document":
        """Build a document from file contents, keeping its line terminator."""
        return cls.from_lines(
            split_lines(text),
            filename,
            newline=detect_newline(text),
            final_newline=ends_with_newline(text),
            encoding=encoding,
        )

    @classmethod
    def open(cls, filename: PathLike, *, encoding: str = "utf-8") -> "Document":
        """Read and parse a file from disk."""
        return cls.from_text(read_text(filename, encoding=encoding), filename, encoding=encoding)

    def cite(self, citations: CitationMap) -> None:
        for block in self.blocks:
            block.cite(citations)

    def lines(self) -> List[str]:
        out: List[str] = []
        for block in self.blocks:
            out.extend(block.lines)
        return out

    def render(self) -> str:
        lines = self.lines()
        if not lines:
            return ""
        text = self.newline.join(lines)
        return text + self.newline if self.final_newline else text

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Document({str(self.filename)!r}, blocks={len(self.blocks)}, keys={len(self.keys)})"

    def save(self, filename: Optional[PathLike] = None) -> Path:
        """Atomically overwrite the file with the rendered document."""
        target = Path(filename) if filename is not None else self.filename
        atomic_write_text(target, self.render(), encoding=self.encoding)
        logger.info(f"Wrote {target}")
        return target
