"""
Pytest Configuration and Shared Fixtures
=========================================
Common fixtures and configuration for all tests.
"""

import sys
from pathlib import Path
from types import MappingProxyType
from unittest.mock import Mock

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cargo_cite.bibliography import RenderResult  # noqa: E402
from cargo_cite.errors import MissingKeyWarning  # noqa: E402
from cargo_cite.keys import Key  # noqa: E402


TESTS_DIR = Path(__file__).parent


# =============================================================================
# Fixtures: Sources
# =============================================================================

COMMENTED_SOURCE = """\
//! Crate docs citing [^@knuth1984].
use std::fmt;

/// This is a comment
/// that spans multiple lines
/// And has a citation [^@simple]
/// And another citation [^@another] that's not in the bib file
/// And another footnote [^footnote] that's not a citation
fn main() {
    color = v_color;
}
"""


@pytest.fixture
def commented_source() -> str:
    return COMMENTED_SOURCE


@pytest.fixture
def ref_bib_path() -> Path:
    return TESTS_DIR / "ref.bib"


# =============================================================================
# Fixtures: Renderer
# =============================================================================

@pytest.fixture
def fake_renderer():
    """Renderer stub that formats every key except those starting with 'missing'."""
    def _render(keys):
        citations = {}
        diagnostics = []
        for key in sorted(keys):
            if key.value.startswith("missing"):
                diagnostics.append(MissingKeyWarning(key.value))
            else:
                citations[key] = f"Rendered {key.value}."
        return RenderResult(citations=MappingProxyType(citations), diagnostics=diagnostics)

    return Mock(side_effect=_render)


@pytest.fixture
def citations():
    return MappingProxyType({Key("x"): "X.", Key("y"): "Y."})


# =============================================================================
# Markers Registration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests without external deps")
    config.addinivalue_line("markers", "integration: Tests requiring cargo or other external tools")
