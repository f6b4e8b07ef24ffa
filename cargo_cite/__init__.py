"""cargo-cite package.

Appends rendered bibliography footnotes to Rust doc comments that cite
entries inline with `[^@key]`.
"""

from .keys import Key, scan_for_key
from .patterns import PATTERNS, PatternSet
from .block import Block, CitationMap, CodeBlock, CommentBlock

from .document import Document

from .bibliography import (
    BibliographyRenderer,
    RenderResult,
    keys_to_citations,
    load_bibliography,
    load_style,
    render_citations,
)

from .driver import BatchResult, CiteDriver, cite_files

from .errors import (
    BibliographyIOError,
    BibliographyParseError,
    CiteError,
    DependentStyleNotSupportedError,
    DiscoveryError,
    MalformedBlockError,
    MissingKeyWarning,
    SourceIOError,
    StyleError,
    UnknownStyleError,
)

__all__ = [
    "Key",
    "scan_for_key",
    "PATTERNS",
    "PatternSet",

    "Block",
    "CitationMap",
    "CodeBlock",
    "CommentBlock",
    "Document",

    "BibliographyRenderer",
    "RenderResult",
    "keys_to_citations",
    "load_bibliography",
    "load_style",
    "render_citations",

    "BatchResult",
    "CiteDriver",
    "cite_files",

    "BibliographyIOError",
    "BibliographyParseError",
    "CiteError",
    "DependentStyleNotSupportedError",
    "DiscoveryError",
    "MalformedBlockError",
    "MissingKeyWarning",
    "SourceIOError",
    "StyleError",
    "UnknownStyleError",
]
