"""
Pytest integration for Pact consumer tests.

Registered through the ``pytest11`` entry point, so the fixtures below are
available in any project that installs the package.
"""

from __future__ import annotations

from typing import Callable, Generator

import pytest

from .config import Settings, get_settings
from .core.mock_service import MockService
from .core.reporting import ErrorReporter
from .mock_server.client import TransferProtocol


def pytest_configure(config):
    """Register Pact markers."""
    config.addinivalue_line(
        "markers", "pact: mark test as a Pact contract test"
    )
    config.addinivalue_line(
        "markers", "consumer: mark test as a consumer contract test"
    )
    config.addinivalue_line(
        "markers", "provider: mark test as a provider verification test"
    )


@pytest.fixture(scope="session")
def pact_settings() -> Settings:
    """Pact configuration read from the environment."""
    return get_settings()


@pytest.fixture
def pact_error_reporter() -> Generator[ErrorReporter, None, None]:
    """
    Reporter collecting Pact failures during a test.

    Any failure reported while the test ran fails it at teardown.
    """
    reporter = ErrorReporter()
    yield reporter
    reporter.raise_for_failures()


@pytest.fixture
def mock_service_factory(
    pact_settings: Settings, pact_error_reporter: ErrorReporter
) -> Callable[..., MockService]:
    """
    Build ``MockService`` instances wired to the test's error reporter.

    Usage:
        def test_account(mock_service_factory):
            mock_service = mock_service_factory("mobile-app", "auth-service")
    """
    def factory(
        consumer: str,
        provider: str,
        scheme: TransferProtocol = TransferProtocol.STANDARD,
        **kwargs,
    ) -> MockService:
        kwargs.setdefault("settings", pact_settings)
        kwargs.setdefault("error_reporter", pact_error_reporter)
        return MockService(consumer, provider, scheme=scheme, **kwargs)

    return factory
