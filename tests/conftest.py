"""
Pytest configuration and shared fixtures for all pkggraph tests.

Every test gets its own on-disk workspace (fake GOROOT and GOPATH) below
pytest's tmp_path; the header parser is shared because it is stateless
between parse() calls.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from pkggraph.frontend.parser import HeaderParser
from pkggraph.loader.inspector import SourceInspector
from tests.test_utils import Workspace


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def header_parser():
    """Session-scoped header parser (Lark grammar analysis is cached on disk)."""
    return HeaderParser()


# =============================================================================
# Function-scoped fixtures
# =============================================================================

@pytest.fixture
def inspector(header_parser):
    return SourceInspector(header_parser)


@pytest.fixture
def workspace(tmp_path) -> Workspace:
    """Fresh fake GOROOT/GOPATH tree."""
    return Workspace(tmp_path)


@pytest.fixture(autouse=True)
def _quiet_environment(monkeypatch):
    """Keep the caller's Go settings and terminal from leaking into tests."""
    monkeypatch.delenv("GO15VENDOREXPERIMENT", raising=False)
    monkeypatch.delenv("PKGGRAPH_VISIBILITY", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
