"""
Block Tests
===========
Parse-time and citation-time behaviour of comment and code blocks.
"""

import pytest

from cargo_cite.block import CodeBlock, CommentBlock, new_block
from cargo_cite.errors import MalformedBlockError
from cargo_cite.keys import Key


def _comment(*lines: str) -> CommentBlock:
    block = CommentBlock()
    for line in lines:
        block.insert(line)
    return block


class TestCommentInsert:
    """Tests for CommentBlock.insert."""

    @pytest.mark.unit
    def test_plain_line_is_kept(self):
        block = _comment("/// plain")
        assert block.lines == ["/// plain"]
        assert block.keys() == set()

    @pytest.mark.unit
    def test_inline_keys_are_recorded(self):
        block = _comment("/// Uses [^@b] and [^@a]", "/// again [^@a]")
        assert block.sorted_keys() == [Key("a"), Key("b")]
        assert len(block) == 2

    @pytest.mark.unit
    def test_citation_footnote_is_dropped(self):
        block = _comment("/// Uses [^@simple]", "///", "/// [^@simple]: Doe, John.")
        assert block.lines == ["/// Uses [^@simple]", "///"]
        assert block.keys() == {Key("simple")}

    @pytest.mark.unit
    def test_footnote_only_key_is_not_counted(self):
        block = _comment("/// Text", "/// [^@orphan]: Old text.")
        assert block.keys() == set()
        assert block.lines == ["/// Text"]

    @pytest.mark.unit
    def test_generic_footnote_is_kept(self):
        block = _comment("/// Note [^n]", "/// [^n]: A note.")
        assert len(block) == 2
        assert block.keys() == set()


class TestCommentCite:
    """Tests for CommentBlock.cite."""

    @pytest.mark.unit
    def test_worked_example(self, citations):
        block = _comment("/// Uses [^@x]", "/// and [^@y]")
        block.cite(citations)
        assert block.lines == [
            "/// Uses [^@x]",
            "/// and [^@y]",
            "///",
            "/// [^@x]: X.",
            "/// [^@y]: Y.",
        ]

    @pytest.mark.unit
    def test_footnotes_are_sorted(self, citations):
        block = _comment("/// [^@y] first, then [^@x]")
        block.cite(citations)
        assert block.lines[-2:] == ["/// [^@x]: X.", "/// [^@y]: Y."]

    @pytest.mark.unit
    def test_no_blank_line_after_generic_footnote(self, citations):
        block = _comment("/// Uses [^@x] and [^n]", "///", "/// [^n]: A note.")
        block.cite(citations)
        assert block.lines == [
            "/// Uses [^@x] and [^n]",
            "///",
            "/// [^n]: A note.",
            "/// [^@x]: X.",
        ]

    @pytest.mark.unit
    def test_no_blank_line_after_blank_comment(self, citations):
        block = _comment("/// Uses [^@x]", "///")
        block.cite(citations)
        assert block.lines == ["/// Uses [^@x]", "///", "/// [^@x]: X."]

    @pytest.mark.unit
    def test_missing_key_is_skipped(self, citations):
        block = _comment("/// Uses [^@x] and [^@missing]")
        block.cite(citations)
        assert block.lines == ["/// Uses [^@x] and [^@missing]", "///", "/// [^@x]: X."]

    @pytest.mark.unit
    def test_nothing_resolves_leaves_block_untouched(self, citations):
        block = _comment("/// Uses [^@missing]")
        block.cite(citations)
        assert block.lines == ["/// Uses [^@missing]"]

    @pytest.mark.unit
    def test_prefix_keeps_indentation_and_marker(self, citations):
        block = _comment("    //! Module docs [^@x]")
        block.cite(citations)
        assert block.lines == ["    //! Module docs [^@x]", "    //!", "    //! [^@x]: X."]

    @pytest.mark.unit
    def test_block_of_stale_footnotes_becomes_empty(self, citations):
        block = _comment("/// [^@x]: Old X.")
        block.cite(citations)
        assert block.lines == []

    @pytest.mark.unit
    def test_first_line_without_marker_is_fatal(self, citations):
        block = CommentBlock(lines=["not a comment [^@x]"], citekeys={Key("x")})
        with pytest.raises(MalformedBlockError):
            block.cite(citations)


class TestCodeBlock:
    """Tests for CodeBlock passthrough."""

    @pytest.mark.unit
    def test_lines_pass_through(self, citations):
        block = CodeBlock()
        block.insert('let s = "[^@x]";')
        block.insert("/// [^@x]: not really")
        block.cite(citations)
        assert block.lines == ['let s = "[^@x]";', "/// [^@x]: not really"]
        assert block.keys() is None
        assert len(block) == 2


@pytest.mark.unit
def test_new_block_picks_variant():
    assert isinstance(new_block("/// docs"), CommentBlock)
    assert isinstance(new_block("fn main() {}"), CodeBlock)
