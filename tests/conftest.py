"""Root-level pytest fixtures for all tests.

Provides:
- USPS response fixtures loaded from tests/fixtures/usps/
- Common test packages
- A canned transport for service-layer tests
"""

from pathlib import Path

import pytest

from src.models.package import Package

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "usps"


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external services"
    )


# ============================================================================
# Response Fixtures
# ============================================================================


def load_xml_fixture(name: str) -> str:
    """Read tests/fixtures/usps/<name>.xml as text."""
    return (FIXTURES_DIR / f"{name}.xml").read_text(encoding="utf-8")


@pytest.fixture
def xml_fixture():
    """Loader for USPS response fixtures by name."""
    return load_xml_fixture


# ============================================================================
# Package Fixtures
# ============================================================================


@pytest.fixture
def book() -> Package:
    """250 g paperback, 19 x 14 x 2 cm."""
    return Package(weight=250, dimensions=[14, 19, 2], units="metric")


@pytest.fixture
def american_wii() -> Package:
    """Boxed console, 3.5 lb, 15 x 10 x 4.5 in."""
    return Package(weight=56, dimensions=[15, 10, 4.5])


@pytest.fixture
def canned_transport():
    """Build a transport that returns a fixture body and records calls."""
    def _make(name: str):
        calls: list[tuple[str, dict]] = []

        def transport(action: str, request: dict) -> str:
            calls.append((action, request))
            return load_xml_fixture(name)

        transport.calls = calls
        return transport

    return _make
