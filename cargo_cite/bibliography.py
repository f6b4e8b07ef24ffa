"""Bibliography loading and citation rendering.

Thin layer over pybtex:

- `load_bibliography` reads a BibTeX/BibLaTeX file and parses it into
  `BibliographyData`.
- `load_style` resolves a pybtex formatting style by name.
- `render_citations` formats the entries for a set of keys in one pass, so
  that order-dependent labels (numbering by appearance, alpha suffixes) are
  computed over the whole batch.

Keys without a bibliography entry never fail a run. They are returned as
`MissingKeyWarning` diagnostics and logged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from loguru import logger
from pybtex.database import BibliographyData, parse_string
from pybtex.exceptions import PybtexError
from pybtex.plugin import PluginNotFound, find_plugin
from pybtex.style.formatting import BaseStyle

from cargo_cite.config import DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS, CiteConfig
from cargo_cite.errors import (
    BibliographyIOError,
    BibliographyParseError,
    DependentStyleNotSupportedError,
    MissingKeyWarning,
    UnknownStyleError,
)
from cargo_cite.keys import Key


# Style components that exist in pybtex but cannot format a bibliography alone.
_COMPONENT_STYLE_GROUPS = (
    "pybtex.style.labels",
    "pybtex.style.sorting",
    "pybtex.style.names",
)


@dataclass(frozen=True)
class RenderResult:
    """Rendered citations plus the keys that could not be rendered."""

    citations: Mapping[Key, str] = field(default_factory=lambda: MappingProxyType({}))
    diagnostics: List[MissingKeyWarning] = field(default_factory=list)


def load_bibliography(path, *, encoding: str = "utf-8") -> BibliographyData:
    """Read and parse a bibliography file.

    The file is read here rather than by pybtex, which would fall back to a
    kpsewhich search and report a missing file as a parse error.

    Raises:
        BibliographyIOError: the file cannot be read.
        BibliographyParseError: the file is not valid BibTeX.
    """
    try:
        with open(path, "r", encoding=encoding) as f:
            text = f.read()
    except OSError as e:
        raise BibliographyIOError(f"Could not read bibliography {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise BibliographyParseError(f"Could not decode bibliography {path}: {e}") from e

    try:
        return parse_string(text, "bibtex")
    except PybtexError as e:
        raise BibliographyParseError(f"Could not parse bibliography {path}: {e}") from e


def load_style(name: str) -> BaseStyle:
    """Load a formatting style by name, e.g. plain, unsrt, alpha, unsrtalpha.

    Raises:
        UnknownStyleError: no style of any kind has this name.
        DependentStyleNotSupportedError: the name is only a label, sorting or
            name style, which cannot render entries on its own.
    """
    if not name:
        raise UnknownStyleError("Style name must be a non-empty string")

    try:
        style_cls = find_plugin("pybtex.style.formatting", name)
    except PluginNotFound:
        for group in _COMPONENT_STYLE_GROUPS:
            try:
                find_plugin(group, name)
            except PluginNotFound:
                continue
            raise DependentStyleNotSupportedError(
                f"Style {name!r} is a {group.rsplit('.', 1)[-1]} style and cannot render a bibliography"
            )
        raise UnknownStyleError(f"Invalid style name {name!r}, see pybtex.style.formatting plugins")

    return style_cls()


def render_citations(
    keys: Iterable[Key],
    bibliography: BibliographyData,
    style: BaseStyle,
    *,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    with_labels: bool = False,
) -> RenderResult:
    """Render every key that has a bibliography entry.

    Keys are processed in sorted order and the style sorts and labels the
    resulting entries together, so every key gets the label it would have in
    a single bibliography.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"output_format must be one of {OUTPUT_FORMATS}, got {output_format!r}")

    diagnostics: List[MissingKeyWarning] = []

    # Entry keys are case-insensitive in pybtex; several spellings can share an entry.
    keys_by_entry: Dict[str, List[Key]] = {}
    entries = []
    for key in sorted(set(keys)):
        if key.value not in bibliography.entries:
            diagnostics.append(MissingKeyWarning(key.value))
            continue
        entry = bibliography.entries[key.value]
        if entry.key not in keys_by_entry:
            keys_by_entry[entry.key] = []
            entries.append(entry)
        keys_by_entry[entry.key].append(key)

    citations: Dict[Key, str] = {}
    if entries:
        sorted_entries = list(style.sort(entries))
        labels = list(style.format_labels(sorted_entries))
        for label, entry in zip(labels, sorted_entries):
            try:
                formatted = style.format_entry(label, entry, bib_data=bibliography)
            except (PybtexError, AttributeError, KeyError) as e:
                for key in keys_by_entry[entry.key]:
                    diagnostics.append(
                        MissingKeyWarning(key.value, f"could not be formatted: {type(e).__name__}: {e}")
                    )
                continue

            text = formatted.text.render_as(output_format)
            if with_labels:
                text = f"[{formatted.label}] {text}"
            for key in keys_by_entry[entry.key]:
                citations[key] = text

    for diagnostic in diagnostics:
        logger.warning(str(diagnostic))

    return RenderResult(citations=MappingProxyType(citations), diagnostics=diagnostics)


def keys_to_citations(
    keys: Iterable[Key],
    bibliography: BibliographyData,
    style: BaseStyle,
    **kwargs,
) -> Mapping[Key, str]:
    """Render citations and return only the key to text mapping."""
    return render_citations(keys, bibliography, style, **kwargs).citations


@dataclass(frozen=True)
class BibliographyRenderer:
    """A loaded bibliography and style, callable as `keys -> RenderResult`."""

    bibliography: BibliographyData
    style: BaseStyle
    output_format: str = DEFAULT_OUTPUT_FORMAT
    with_labels: bool = False

    @classmethod
    def from_config(cls, bib_path, config: CiteConfig) -> "BibliographyRenderer":
        """Load the bibliography and style named by the configuration."""
        return cls(
            bibliography=load_bibliography(bib_path, encoding=config.encoding),
            style=load_style(config.style),
            output_format=config.output_format,
            with_labels=config.with_labels,
        )

    def __call__(self, keys: Iterable[Key]) -> RenderResult:
        return render_citations(
            keys,
            self.bibliography,
            self.style,
            output_format=self.output_format,
            with_labels=self.with_labels,
        )
