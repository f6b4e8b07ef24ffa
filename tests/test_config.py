"""Tests for environment-driven configuration."""

import pytest

from cargo_cite.config import CiteConfig, TracingConfig


@pytest.mark.unit
def test_defaults_without_env():
    config = CiteConfig.from_env({})
    assert config.style == "unsrt"
    assert config.output_format == "text"
    assert config.with_labels is False
    assert config.check is False
    assert config.keep_going is False


@pytest.mark.unit
def test_values_from_env():
    config = CiteConfig.from_env({
        "CARGO_CITE_STYLE": " alpha ",
        "CARGO_CITE_FORMAT": "Markdown",
        "CARGO_CITE_LABELS": "yes",
    })
    assert config.style == "alpha"
    assert config.output_format == "markdown"
    assert config.with_labels is True


@pytest.mark.unit
def test_unknown_format_falls_back():
    assert CiteConfig.from_env({"CARGO_CITE_FORMAT": "html"}).output_format == "text"


@pytest.mark.unit
def test_tracing_config():
    cfg = TracingConfig.from_env({"CARGO_CITE_TRACING": "1", "OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4318/v1/traces"})
    assert cfg.ENABLED is True
    assert cfg.OTLP_ENDPOINT == "http://collector:4318/v1/traces"
    assert cfg.SERVICE_NAME == "cargo-cite"
    assert TracingConfig.from_env({}).ENABLED is False
