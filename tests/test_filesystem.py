"""
Filesystem Helper Tests
=======================
Unit tests for cargo_cite.utils.filesystem.
"""

from unittest.mock import patch

import pytest

from cargo_cite.errors import SourceIOError
from cargo_cite.utils.filesystem import atomic_write_text, detect_newline, ends_with_newline, read_text, split_lines


@pytest.mark.unit
def test_split_lines_drops_final_terminator_only():
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("a\nb") == ["a", "b"]
    assert split_lines("a\n\n") == ["a", ""]
    assert split_lines("") == []


@pytest.mark.unit
def test_split_lines_mixed_terminators():
    assert split_lines("a\r\nb\nc\r\n") == ["a", "b", "c"]
    assert split_lines("a\nb\r\n") == ["a", "b"]


@pytest.mark.unit
def test_detect_newline():
    assert detect_newline("a\r\nb\r\n") == "\r\n"
    assert detect_newline("a\nb\n") == "\n"
    assert detect_newline("") == "\n"


@pytest.mark.unit
def test_detect_newline_uses_dominant_terminator():
    assert detect_newline("a\nb\nc\r\n") == "\n"
    assert detect_newline("a\r\nb\r\nc\n") == "\r\n"


@pytest.mark.unit
def test_ends_with_newline():
    assert ends_with_newline("a\n")
    assert ends_with_newline("a\r\n")
    assert not ends_with_newline("a")
    assert not ends_with_newline("")


@pytest.mark.unit
def test_read_text_keeps_crlf(tmp_path):
    path = tmp_path / "f.rs"
    path.write_bytes(b"a\r\nb\r\n")
    assert read_text(path) == "a\r\nb\r\n"


@pytest.mark.unit
def test_read_text_invalid_utf8(tmp_path):
    path = tmp_path / "f.rs"
    path.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(SourceIOError):
        read_text(path)


@pytest.mark.unit
def test_atomic_write_creates_and_replaces(tmp_path):
    path = tmp_path / "f.rs"
    atomic_write_text(path, "one\n")
    atomic_write_text(path, "two\n")
    assert path.read_text(encoding="utf-8") == "two\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["f.rs"]


@pytest.mark.unit
def test_failed_replace_keeps_original(tmp_path):
    path = tmp_path / "f.rs"
    path.write_text("original\n", encoding="utf-8")

    with patch("cargo_cite.utils.filesystem.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(SourceIOError):
            atomic_write_text(path, "new\n")

    assert path.read_text(encoding="utf-8") == "original\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["f.rs"]
