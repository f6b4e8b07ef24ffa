"""Error types and diagnostics.

Every fatal condition raised by the package derives from `CiteError`, so the
CLI can turn any of them into a non-zero exit with a single handler.

Missing bibliography entries are not errors: they are reported as
`MissingKeyWarning` diagnostics and the footnote is simply omitted.
"""

from __future__ import annotations

from dataclasses import dataclass


class CiteError(Exception):
    """Base class for all cargo-cite errors."""


class SourceIOError(CiteError, OSError):
    """Raised when a source file cannot be read or written."""


class BibliographyIOError(SourceIOError):
    """Raised when the bibliography file cannot be read."""


class BibliographyParseError(CiteError, ValueError):
    """Raised when the bibliography file is not valid BibTeX/BibLaTeX."""


class StyleError(CiteError, ValueError):
    """Raised when a citation style cannot be loaded."""


class UnknownStyleError(StyleError):
    """No citation style of any kind is registered under the given name."""


class DependentStyleNotSupportedError(StyleError):
    """The name refers to a style component that cannot render on its own."""


class DiscoveryError(CiteError):
    """Raised when target files cannot be discovered from a Cargo manifest."""


class MalformedBlockError(CiteError, ValueError):
    """Raised when a comment block does not start with a doc-comment marker."""


@dataclass(frozen=True)
class MissingKeyWarning:
    """A key referenced in source that produced no footnote."""

    key: str
    reason: str = "not found in the bibliography"

    def __str__(self) -> str:
        return f"Key @{self.key} {self.reason}"
