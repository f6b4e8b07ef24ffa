"""
Configuration
=============
Centralized defaults for citation rendering, batch behaviour and tracing.

Values can be overridden through environment variables:

- CARGO_CITE_STYLE: default citation style name (default: unsrt)
- CARGO_CITE_FORMAT: footnote text format, "text" or "markdown" (default: text)
- CARGO_CITE_LABELS: prefix footnotes with the style's label, e.g. "[1]"
- CARGO_CITE_TRACING: enable OpenTelemetry export (default: false)
- OTEL_EXPORTER_OTLP_ENDPOINT: OTLP/HTTP traces endpoint
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Mapping, Optional


OutputFormat = Literal["text", "markdown"]

OUTPUT_FORMATS = ("text", "markdown")
DEFAULT_STYLE = "unsrt"
DEFAULT_OUTPUT_FORMAT: OutputFormat = "text"


def _as_bool(val: Optional[str], default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CiteConfig:
    """Options for one cargo-cite run."""

    style: str = DEFAULT_STYLE
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    with_labels: bool = False

    # Report files that would change instead of writing them.
    check: bool = False
    # Record per-file failures and continue with the remaining files.
    keep_going: bool = False

    encoding: str = "utf-8"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CiteConfig":
        env = os.environ if environ is None else environ

        style = (env.get("CARGO_CITE_STYLE") or "").strip() or DEFAULT_STYLE

        output_format = (env.get("CARGO_CITE_FORMAT") or "").strip().lower()
        if output_format not in OUTPUT_FORMATS:
            output_format = DEFAULT_OUTPUT_FORMAT

        return cls(
            style=style,
            output_format=output_format,  # type: ignore[arg-type]
            with_labels=_as_bool(env.get("CARGO_CITE_LABELS")),
        )


@dataclass(frozen=True)
class TracingConfig:
    SERVICE_NAME: str = "cargo-cite"
    OTLP_ENDPOINT: str = "http://localhost:4318/v1/traces"
    ENABLED: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TracingConfig":
        env = os.environ if environ is None else environ
        return cls(
            SERVICE_NAME=env.get("OTEL_SERVICE_NAME", cls.SERVICE_NAME),
            OTLP_ENDPOINT=env.get("OTEL_EXPORTER_OTLP_ENDPOINT", cls.OTLP_ENDPOINT),
            ENABLED=_as_bool(env.get("CARGO_CITE_TRACING")),
        )


TRACING = TracingConfig.from_env()
