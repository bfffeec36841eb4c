"""
Pytest configuration and fixtures for the load generator tests.

This module provides shared fixtures, Hypothesis profiles and an optional
live gateway URL.
"""

import httpx
import pytest
from hypothesis import settings, Verbosity

# Configure Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Load the default hypothesis profile
    settings.load_profile("default")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--pag-host",
        action="store",
        default=None,
        help="Base URL of a running aggregation gateway for live tests",
    )


class ScriptedRandom:
    """Random source returning a fixed sequence of floats."""

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self._values[self.calls]
        self.calls += 1
        return value


class RecordingTransport(httpx.MockTransport):
    """Mock transport answering with a fixed status and keeping every request."""

    def __init__(self, status_code: int = 202):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return httpx.Response(self.status_code)


@pytest.fixture
def pag_host(request):
    """Get the live gateway URL from the command line, skipping if unset."""
    host = request.config.getoption("--pag-host")
    if not host:
        pytest.skip("--pag-host not given")
    return host


@pytest.fixture
def transport():
    """Mock transport that accepts every push."""
    return RecordingTransport()


@pytest.fixture
def client(transport):
    """HTTP client routed through the mock transport."""
    with httpx.Client(transport=transport) as c:
        yield c
