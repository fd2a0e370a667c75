"""
Client for the Pact mock service administration API.

The mock service serves the registered interactions to the code under test,
records the requests it receives and, on request, writes the contract file.
This module talks to its admin endpoints, which are distinguished from
ordinary traffic by the ``X-Pact-Mock-Service`` header.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import requests

from ..core.errors import (
    create_startup_error,
    create_verification_error,
    create_write_error,
)
from ..core.pact import pact_file_name

logger = logging.getLogger(__name__)

MOCK_SERVICE_HEADERS = {
    "X-Pact-Mock-Service": "true",
    "Content-Type": "application/json",
}


class TransferProtocol(Enum):
    """Scheme the mock service listens on. ``SECURE`` uses a self-signed certificate."""
    STANDARD = "http"
    SECURE = "https"


class MockServer(Protocol):
    """What ``MockService`` needs from a simulated provider."""

    @property
    def base_url(self) -> str:
        ...

    def setup(self, pact_data: Dict[str, Any], scheme: TransferProtocol) -> None:
        """Serve the interactions in ``pact_data``; raises StartupError."""
        ...

    def verify(self) -> None:
        """Check recorded requests against the interactions; raises VerificationMismatchError."""
        ...

    def finalize(self, pact_data: Dict[str, Any]) -> str:
        """Write the contract file and return a message naming it; raises PactWriteError."""
        ...


class MockServiceClient:
    """
    ``MockServer`` backed by a running ``pact-mock-service`` process.

    Each ``setup`` replaces the interactions the service expects, so one
    test step never sees interactions registered for another.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 1234,
        pact_dir: str = "/tmp/pacts",
        scheme: TransferProtocol = TransferProtocol.STANDARD,
        request_timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.host = host
        self.port = port
        self.pact_dir = pact_dir
        self.scheme = scheme
        self.request_timeout = request_timeout
        self.session = session or self._create_http_session()

    def _create_http_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(MOCK_SERVICE_HEADERS)
        # The secure mock service uses a self-signed certificate
        session.verify = False
        return session

    @property
    def base_url(self) -> str:
        return f"{self.scheme.value}://{self.host}:{self.port}"

    def setup(self, pact_data: Dict[str, Any], scheme: TransferProtocol) -> None:
        self.scheme = scheme
        interactions = pact_data.get("interactions", [])

        try:
            response = self._request("DELETE", "/interactions")
            self._raise_for_status(response, "clear interactions")

            response = self._request("PUT", "/interactions", json={"interactions": interactions})
            self._raise_for_status(response, "register interactions")
        except requests.RequestException as e:
            raise create_startup_error(
                f"Could not reach Pact mock service at {self.base_url}",
                details=str(e),
                cause=e,
            ) from e
        except _AdminCallFailed as e:
            raise create_startup_error(
                f"Pact mock service failed to {e.action}",
                details=e.body,
            ) from e

        logger.debug(f"Registered {len(interactions)} interaction(s) with mock service at {self.base_url}")

    def verify(self) -> None:
        try:
            response = self._request("GET", "/interactions/verification")
        except requests.RequestException as e:
            raise create_verification_error(f"Could not reach Pact mock service: {e}") from e

        if response.status_code != 200:
            raise create_verification_error(response.text)

        logger.debug("Mock service verified recorded interactions")

    def finalize(self, pact_data: Dict[str, Any]) -> str:
        consumer = pact_data["consumer"]["name"]
        provider = pact_data["provider"]["name"]
        payload = {
            "consumer": {"name": consumer},
            "provider": {"name": provider},
            "pact_dir": self.pact_dir,
        }

        try:
            response = self._request(
                "PUT", "/interactions", json={"interactions": pact_data.get("interactions", [])}
            )
            self._raise_for_status(response, "register interactions")

            response = self._request("POST", "/pact", json=payload)
            self._raise_for_status(response, "write pact")
        except requests.RequestException as e:
            raise create_write_error(
                f"Could not reach Pact mock service at {self.base_url}",
                details=str(e),
                cause=e,
            ) from e
        except _AdminCallFailed as e:
            raise create_write_error(f"Pact mock service failed to {e.action}", details=e.body) from e

        pact_file = Path(self.pact_dir) / pact_file_name(consumer, provider)
        message = f"Pact written to: {pact_file}"
        logger.info(message)
        return message

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        return self.session.request(
            method,
            f"{self.base_url}{path}",
            timeout=self.request_timeout,
            **kwargs,
        )

    @staticmethod
    def _raise_for_status(response: requests.Response, action: str) -> None:
        if response.status_code != 200:
            raise _AdminCallFailed(action, response.text)


class _AdminCallFailed(Exception):
    def __init__(self, action: str, body: str):
        super().__init__(f"{action}: {body}")
        self.action = action
        self.body = body
