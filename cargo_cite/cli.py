"""Command-line entry point: `cargo cite` / `cargo-cite`.

Loads the bibliography and style first, so a bad `--bib` or `--style` fails
before any source file is touched, then cites the selected files.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Optional, Sequence

from loguru import logger

from cargo_cite.bibliography import BibliographyRenderer
from cargo_cite.config import OUTPUT_FORMATS, CiteConfig
from cargo_cite.discovery import discover_files
from cargo_cite.driver import CiteDriver
from cargo_cite.errors import CiteError


EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_ERROR = 2


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr: warnings by default, info with --verbose."""
    logger.remove()
    if quiet:
        return
    logger.add(
        sys.stderr,
        level="INFO" if verbose else "WARNING",
        format="<level>{level: <8}</level> {message}",
    )


def build_parser(defaults: Optional[CiteConfig] = None) -> argparse.ArgumentParser:
    defaults = defaults or CiteConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="cargo-cite",
        description="Add bibliography footnotes to Rust doc comments that cite [^@key]",
    )
    # cargo runs `cargo-cite cite ...` for `cargo cite ...`
    parser.add_argument("subcommand", nargs="?", choices=["cite"], help=argparse.SUPPRESS)
    parser.add_argument("-b", "--bib", required=True, help="BibTeX/BibLaTeX file with the cited entries")
    parser.add_argument(
        "-s",
        "--style",
        default=defaults.style,
        help=f"Citation style, e.g. plain, unsrt, alpha, unsrtalpha (default: {defaults.style})",
    )

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("-m", "--manifest", dest="manifest_path", help="Cargo.toml of the crate or workspace to cite")
    selection.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        default=[],
        help="File or folder to cite. Can be specified multiple times.",
    )

    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=defaults.output_format,
        help=f"Footnote text format (default: {defaults.output_format})",
    )
    parser.add_argument(
        "--labels",
        action="store_true",
        default=defaults.with_labels,
        help="Prefix each footnote with the style's label, e.g. [1]",
    )
    parser.add_argument("--check", action="store_true", help="Report files that need updates without writing them")
    parser.add_argument("--keep-going", action="store_true", help="Continue past files that cannot be read or written")

    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress information")
    parser.add_argument("-q", "--quiet", action="store_true", help="Silence all output")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    defaults = CiteConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    config = replace(
        defaults,
        style=args.style,
        output_format=args.output_format,
        with_labels=bool(args.labels),
        check=bool(args.check),
        keep_going=bool(args.keep_going),
    )

    try:
        renderer = BibliographyRenderer.from_config(args.bib, config)
        files = discover_files(args.files, args.manifest_path, encoding=config.encoding)
        result = CiteDriver(renderer, config).run(files)
    except CiteError as e:
        logger.error(str(e))
        return EXIT_ERROR

    if result.failures:
        for failure in result.failures:
            logger.error(f"Failed: {failure.path}: {failure.error}")
        return EXIT_ERROR

    if config.check and result.files_changed:
        for path in result.files_changed:
            logger.warning(f"Would update {path}")
        return EXIT_CHECK_FAILED

    logger.info(
        f"Cited {len(result.files_cited)} of {len(result.files_scanned)} files, "
        f"{len(result.files_changed)} updated, {len(result.diagnostics)} keys missing"
    )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
