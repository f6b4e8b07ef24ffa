"""Target file discovery.

Files to cite come either from explicit paths (files, or folders searched for
`*.rs`) or from a Cargo manifest. For a manifest, `cargo metadata` lists the
targets of every workspace package, and each target's files are found by
following `mod name;` declarations from its root file, the way rustc resolves
them.
"""

from __future__ import annotations

import json
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from cargo_cite.errors import DiscoveryError, SourceIOError
from cargo_cite.utils.filesystem import PathLike, read_text
from cargo_cite.utils.subprocess_text import tail_text, to_text


_RE_MOD_DECL = re.compile(
    r"^\s*(?:pub(?:\s*\([^)]*\))?\s+)?mod\s+(?:r#)?([A-Za-z_][A-Za-z0-9_]*)\s*;"
)
_RE_PATH_ATTR = re.compile(r'^\s*#\[\s*path\s*=\s*"([^"]+)"\s*\]')
_RE_OTHER_ATTR = re.compile(r"^\s*#\[")
_RE_LINE_COMMENT = re.compile(r"^\s*//")

# Files whose submodules live next to them rather than in a folder named after them
_MOD_RS_NAMES = {"mod.rs", "lib.rs", "main.rs"}


@dataclass(frozen=True)
class Target:
    """A Cargo build target (lib, bin, test, example, bench, ...)."""

    name: str
    kinds: Tuple[str, ...]
    src_path: Path
    package: str = ""


def _run_cargo_metadata(manifest_path: Optional[PathLike], *, cargo: str, timeout_s: int) -> str:
    cmd = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        cmd += ["--manifest-path", str(manifest_path)]

    try:
        proc = subprocess.run(
            cmd,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            timeout=timeout_s,
        )
    except FileNotFoundError as e:
        raise DiscoveryError(f"Could not run {cargo!r}: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise DiscoveryError(
            f"cargo metadata timed out after {timeout_s}s: {tail_text(to_text(e.stderr))}"
        ) from e

    if proc.returncode != 0:
        raise DiscoveryError(
            f"cargo metadata failed with exit code {proc.returncode}: {tail_text(proc.stderr or '')}"
        )
    return proc.stdout or ""


def parse_targets(metadata_json: str) -> List[Target]:
    """Extract build targets from `cargo metadata` JSON output."""
    try:
        payload = json.loads(metadata_json)
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"cargo metadata returned invalid JSON: {e}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("packages"), list):
        raise DiscoveryError("cargo metadata output has no packages list")

    targets: List[Target] = []
    for package in payload["packages"]:
        if not isinstance(package, dict):
            continue
        for raw in package.get("targets") or []:
            if not isinstance(raw, dict) or not raw.get("src_path"):
                continue
            targets.append(
                Target(
                    name=str(raw.get("name", "")),
                    kinds=tuple(str(k) for k in raw.get("kind") or []),
                    src_path=Path(raw["src_path"]),
                    package=str(package.get("name", "")),
                )
            )
    return targets


def get_targets(
    manifest_path: Optional[PathLike] = None,
    *,
    cargo: str = "cargo",
    timeout_s: int = 120,
) -> List[Target]:
    """List the targets of the workspace owning `manifest_path` (or the cwd)."""
    targets = parse_targets(_run_cargo_metadata(manifest_path, cargo=cargo, timeout_s=timeout_s))
    logger.info(f"Found {len(targets)} cargo targets")
    return targets


def find_module_declarations(text: str) -> List[Tuple[str, Optional[str]]]:
    """Return `(name, path_attribute)` for each out-of-line `mod name;`."""
    decls: List[Tuple[str, Optional[str]]] = []
    pending_path: Optional[str] = None

    for line in text.splitlines():
        if _RE_LINE_COMMENT.match(line):
            continue

        path_attr = _RE_PATH_ATTR.match(line)
        if path_attr:
            pending_path = path_attr.group(1)
            rest = line[path_attr.end():]
            if not rest.strip():
                continue
            line = rest

        m = _RE_MOD_DECL.match(line)
        if m:
            decls.append((m.group(1), pending_path))
            pending_path = None
        elif line.strip() and not _RE_OTHER_ATTR.match(line):
            pending_path = None

    return decls


def _resolve_module(parent_file: Path, name: str, path_attr: Optional[str], is_root: bool) -> Tuple[Optional[Path], bool]:
    """Return the file implementing module `name` and whether it owns its folder."""
    if path_attr is not None:
        candidate = parent_file.parent / path_attr
        return (candidate if candidate.is_file() else None), True

    if is_root or parent_file.name in _MOD_RS_NAMES:
        base = parent_file.parent
    else:
        base = parent_file.parent / parent_file.stem

    flat = base / f"{name}.rs"
    if flat.is_file():
        return flat, False
    nested = base / name / "mod.rs"
    if nested.is_file():
        return nested, True
    return None, False


def get_target_files(target: Target, *, encoding: str = "utf-8") -> List[Path]:
    """Return the target's root file and every module file reachable from it."""
    root = target.src_path
    files: List[Path] = []
    seen = set()

    # (file, treated as a mod.rs-style file)
    stack: List[Tuple[Path, bool]] = [(root, True)]
    while stack:
        path, owns_folder = stack.pop()
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        files.append(path)

        text = read_text(path, encoding=encoding)
        children: List[Tuple[Path, bool]] = []
        for name, path_attr in find_module_declarations(text):
            child, child_owns_folder = _resolve_module(path, name, path_attr, owns_folder)
            if child is None:
                logger.warning(f"Module {name!r} declared in {path} not found")
                continue
            children.append((child, child_owns_folder))
        # Keep declaration order when popping
        stack.extend(reversed(children))

    return files


def expand_paths(paths: Iterable[PathLike]) -> List[Path]:
    """Expand folders to the `*.rs` files below them; keep files as given."""
    found: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(sorted(p for p in path.rglob("*.rs") if p.is_file()))
        elif path.exists():
            found.append(path)
        else:
            raise SourceIOError(f"No such file or directory: {path}")
    return found


def _dedupe(paths: Iterable[Path]) -> List[Path]:
    out: List[Path] = []
    seen = set()
    for path in paths:
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        out.append(path)
    return out


def discover_files(
    files: Sequence[PathLike] = (),
    manifest_path: Optional[PathLike] = None,
    *,
    encoding: str = "utf-8",
) -> List[Path]:
    """Return the files to cite, without duplicates.

    Explicit `files` take precedence; otherwise the targets of the Cargo
    manifest (or of the workspace around the current directory) are used.
    """
    if files:
        return _dedupe(expand_paths(files))

    found: List[Path] = []
    for target in get_targets(manifest_path):
        found.extend(get_target_files(target, encoding=encoding))
    return _dedupe(found)
