import os
from typing import Any, Dict, List, Optional

import pytest

from pact_consumer.config import Settings
from pact_consumer.core.mock_service import MockService
from pact_consumer.core.reporting import ErrorReporter
from pact_consumer.mock_server.client import TransferProtocol


@pytest.fixture(scope="session", autouse=True)
def set_env(tmp_path_factory):
    os.environ.setdefault("PACT_DIR", str(tmp_path_factory.mktemp("pacts")))
    os.environ.setdefault("LOG_LEVEL", "INFO")


class FakeMockServer:
    """In-memory stand-in for the Pact mock service that records every call."""

    base_url = "http://localhost:1234"

    def __init__(
        self,
        setup_error: Optional[Exception] = None,
        verify_error: Optional[Exception] = None,
        finalize_error: Optional[Exception] = None,
        finalize_message: str = "Pact written to: /tmp/pacts/mobile-app-auth-service.json",
    ):
        self.setup_error = setup_error
        self.verify_error = verify_error
        self.finalize_error = finalize_error
        self.finalize_message = finalize_message
        self.setup_calls: List[Dict[str, Any]] = []
        self.schemes: List[TransferProtocol] = []
        self.verify_calls = 0
        self.finalize_calls: List[Dict[str, Any]] = []

    def setup(self, pact_data: Dict[str, Any], scheme: TransferProtocol) -> None:
        self.setup_calls.append(pact_data)
        self.schemes.append(scheme)
        if self.setup_error:
            raise self.setup_error

    def verify(self) -> None:
        self.verify_calls += 1
        if self.verify_error:
            raise self.verify_error

    def finalize(self, pact_data: Dict[str, Any]) -> str:
        self.finalize_calls.append(pact_data)
        if self.finalize_error:
            raise self.finalize_error
        return self.finalize_message


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(PACT_DIR=str(tmp_path), PACT_TIMEOUT=2.0)


@pytest.fixture()
def fake_server() -> FakeMockServer:
    return FakeMockServer()


@pytest.fixture()
def reporter() -> ErrorReporter:
    return ErrorReporter()


@pytest.fixture()
def mock_service(settings, fake_server, reporter) -> MockService:
    return MockService(
        consumer="mobile-app",
        provider="auth-service",
        mock_server=fake_server,
        error_reporter=reporter,
        settings=settings,
    )
