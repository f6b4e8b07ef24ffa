"""Filesystem helpers.

Source files are read as text with their line terminator detected, and
written back atomically: the new content goes to a temporary file in the same
directory, which then replaces the target in one rename.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Union

from cargo_cite.errors import SourceIOError


PathLike = Union[str, "os.PathLike[str]"]


def detect_newline(text: str) -> str:
    """Return the dominant line terminator: "\\r\\n" when most lines use it, else "\\n"."""
    crlf = text.count("\r\n")
    return "\r\n" if crlf and crlf * 2 >= text.count("\n") else "\n"


def split_lines(text: str) -> List[str]:
    """Split text on "\\n" into lines without terminators.

    A "\\r" before each "\\n" is dropped, so files with mixed terminators still
    give one entry per physical line. A trailing terminator does not produce
    an empty last line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def ends_with_newline(text: str) -> bool:
    return text.endswith("\n")


def read_text(path: PathLike, *, encoding: str = "utf-8") -> str:
    # newline="" keeps "\r\n" intact so it can be written back unchanged
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceIOError(f"Could not read {path}: {e}") from e


def atomic_write_text(path: PathLike, text: str, *, encoding: str = "utf-8") -> None:
    """Replace the contents of `path` with `text` without partial writes.

    The file mode of an existing target is preserved.
    """
    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")

    try:
        mode = target.stat().st_mode & 0o7777
    except FileNotFoundError:
        mode = None
    except OSError as e:
        raise SourceIOError(f"Could not stat {target}: {e}") from e

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(directory))
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        raise SourceIOError(f"Could not write {target}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
