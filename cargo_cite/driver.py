"""Batch citation driver.

Citing a batch of files happens in three phases:

1. scan: read each file and collect the citation keys it uses;
2. render: render the union of all keys with a single renderer call;
3. apply: parse each file that has keys, append its footnotes and save it.

The single render call matters for styles whose labels depend on the whole
bibliography (e.g. numbering by appearance): rendering file by file would
restart or disagree between files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Set, Tuple

from loguru import logger

from cargo_cite.bibliography import RenderResult
from cargo_cite.config import CiteConfig
from cargo_cite.document import Document
from cargo_cite.errors import CiteError, MissingKeyWarning
from cargo_cite.keys import Key, scan_for_key
from cargo_cite.tracing import get_tracer, safe_set_current_span_attributes
from cargo_cite.utils.filesystem import PathLike, read_text


Renderer = Callable[[Iterable[Key]], RenderResult]


@dataclass
class FileFailure:
    path: Path
    error: str


@dataclass
class BatchResult:
    """Outcome of one driver run."""

    files_scanned: List[Path] = field(default_factory=list)
    files_cited: List[Path] = field(default_factory=list)
    # Files whose content changed (or, in check mode, would change)
    files_changed: List[Path] = field(default_factory=list)
    keys: Set[Key] = field(default_factory=set)
    diagnostics: List[MissingKeyWarning] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class CiteDriver:
    """Cite a set of files against one renderer."""

    def __init__(self, renderer: Renderer, config: CiteConfig = CiteConfig()):
        self.renderer = renderer
        self.config = config

    def _fail(self, result: BatchResult, path: Path, error: CiteError) -> None:
        if not self.config.keep_going:
            raise error
        logger.error(f"{path}: {error}")
        result.failures.append(FileFailure(path=path, error=str(error)))

    def scan(self, paths: Iterable[PathLike], result: BatchResult) -> List[Tuple[Path, Set[Key]]]:
        """Return the files that cite at least one key, with their keys."""
        to_process: List[Tuple[Path, Set[Key]]] = []
        for raw in paths:
            path = Path(raw)
            result.files_scanned.append(path)
            try:
                keys = scan_for_key(read_text(path, encoding=self.config.encoding))
            except CiteError as e:
                self._fail(result, path, e)
                continue

            if not keys:
                logger.debug(f"Nothing to do for {path}")
                continue

            file_keys = set(keys)
            logger.info(f"Found keys in {path}: {sorted(k.value for k in file_keys)}")
            to_process.append((path, file_keys))
            result.keys.update(file_keys)
        return to_process

    def render(self, keys: Set[Key], result: BatchResult) -> Mapping[Key, str]:
        if not keys:
            return MappingProxyType({})
        rendered = self.renderer(keys)
        result.diagnostics.extend(rendered.diagnostics)
        return MappingProxyType(dict(rendered.citations))

    def apply(self, path: Path, citations: Mapping[Key, str], result: BatchResult) -> None:
        logger.info(f"Beginning citation for {path}")
        try:
            before = read_text(path, encoding=self.config.encoding)
            document = Document.from_text(before, path, encoding=self.config.encoding)
            document.cite(citations)
            after = document.render()
            result.files_cited.append(path)
            if after == before:
                return
            result.files_changed.append(path)
            if self.config.check:
                logger.warning(f"{path} needs citation updates")
            else:
                document.save()
        except CiteError as e:
            self._fail(result, path, e)

    def run(self, paths: Iterable[PathLike]) -> BatchResult:
        """Scan, render once, then cite every file that references a key."""
        tracer = get_tracer(__name__)
        result = BatchResult()

        with tracer.start_as_current_span("cite.scan"):
            to_process = self.scan(paths, result)
            safe_set_current_span_attributes({
                "cite.files_scanned": len(result.files_scanned),
                "cite.files_with_keys": len(to_process),
                "cite.keys": len(result.keys),
            })

        with tracer.start_as_current_span("cite.render"):
            citations = self.render(result.keys, result)
            safe_set_current_span_attributes({
                "cite.rendered": len(citations),
                "cite.missing": len(result.diagnostics),
            })

        with tracer.start_as_current_span("cite.apply"):
            for path, _keys in to_process:
                self.apply(path, citations, result)
            safe_set_current_span_attributes({
                "cite.files_changed": len(result.files_changed),
                "cite.check": self.config.check,
            })

        return result


def cite_files(paths: Iterable[PathLike], renderer: Renderer, config: CiteConfig = CiteConfig()) -> BatchResult:
    """Convenience wrapper around `CiteDriver.run`."""
    return CiteDriver(renderer, config).run(paths)
