"""
Lifecycle of a local ``pact-mock-service`` process.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import IO, List, Optional

import requests

from ..config import Settings
from ..core.errors import create_startup_error
from .client import MOCK_SERVICE_HEADERS, TransferProtocol

logger = logging.getLogger(__name__)


class MockServiceProcess:
    """
    Start and stop a ``pact-mock-service`` for one consumer/provider pair.

    Usable as a context manager:

        with MockServiceProcess("mobile-app", "auth-service", port=1234):
            ...
    """

    def __init__(
        self,
        consumer: str,
        provider: str,
        host: str = "localhost",
        port: int = 1234,
        pact_dir: str = "/tmp/pacts",
        scheme: TransferProtocol = TransferProtocol.STANDARD,
        binary: str = "pact-mock-service",
        start_timeout: float = 10.0,
        poll_interval: float = 0.1,
    ):
        self.consumer = consumer
        self.provider = provider
        self.host = host
        self.port = port
        self.pact_dir = pact_dir
        self.scheme = scheme
        self.binary = binary
        self.start_timeout = start_timeout
        self.poll_interval = poll_interval
        self._process: Optional[subprocess.Popen] = None
        self._log_file: Optional[IO[bytes]] = None
        self._log_offset = 0

    @classmethod
    def from_settings(
        cls,
        consumer: str,
        provider: str,
        settings: Settings,
        scheme: TransferProtocol = TransferProtocol.STANDARD,
    ) -> "MockServiceProcess":
        """Build a process listening where a MockService with the same settings will look for it."""
        return cls(
            consumer,
            provider,
            host=settings.PACT_MOCK_SERVICE_HOST,
            port=settings.PACT_MOCK_SERVICE_PORT,
            pact_dir=settings.PACT_DIR,
            scheme=scheme,
            binary=settings.PACT_MOCK_SERVICE_BINARY,
            start_timeout=settings.PACT_MOCK_SERVICE_START_TIMEOUT,
        )

    @property
    def base_url(self) -> str:
        return f"{self.scheme.value}://{self.host}:{self.port}"

    @property
    def log_path(self) -> Path:
        return Path(self.pact_dir) / "pact-mock-service.log"

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def command(self) -> List[str]:
        """Build the command line used to launch the mock service."""
        executable = shutil.which(self.binary) or self.binary
        cmd = [
            executable, "service",
            "--host", self.host,
            "--port", str(self.port),
            "--consumer", self.consumer,
            "--provider", self.provider,
            "--pact-dir", self.pact_dir,
            "--log", str(self.log_path),
        ]
        if self.scheme is TransferProtocol.SECURE:
            cmd.append("--ssl")
        return cmd

    def start(self) -> None:
        if self.is_running:
            return

        Path(self.pact_dir).mkdir(parents=True, exist_ok=True)
        cmd = self.command()
        logger.info(f"Starting Pact mock service: {' '.join(cmd)}")

        # stderr goes to the service log so a long-running service never blocks on a full pipe
        self._log_file = open(self.log_path, "ab")
        self._log_offset = self._log_file.tell()
        try:
            self._process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=self._log_file)
        except OSError as e:
            self._close_log()
            raise create_startup_error(
                f"Could not launch '{self.binary}'",
                details=str(e),
                cause=e,
            ) from e

        self._wait_until_ready()

    def _wait_until_ready(self) -> None:
        deadline = time.monotonic() + self.start_timeout

        while time.monotonic() < deadline:
            if self._process is not None and self._process.poll() is not None:
                returncode = self._process.returncode
                self._process = None
                output = self._read_log()
                self._close_log()
                raise create_startup_error(
                    f"Pact mock service exited with code {returncode}",
                    details=output or None,
                )
            try:
                response = requests.get(self.base_url, headers=MOCK_SERVICE_HEADERS, timeout=1, verify=False)
                if response.status_code == 200:
                    logger.info(f"Pact mock service ready at {self.base_url}")
                    return
            except requests.RequestException:
                pass
            time.sleep(self.poll_interval)

        self.stop()
        raise create_startup_error(
            f"Pact mock service did not start within {self.start_timeout} seconds",
            details=self.base_url,
        )

    def stop(self, grace_period: float = 5.0) -> None:
        if self._process is None:
            return

        process, self._process = self._process, None
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=grace_period)
            except subprocess.TimeoutExpired:
                logger.warning("Pact mock service did not terminate, killing it")
                process.kill()
                process.wait()
        self._close_log()
        logger.info("Pact mock service stopped")

    def _read_log(self) -> str:
        try:
            with open(self.log_path, "rb") as log:
                log.seek(self._log_offset)
                return log.read().decode(errors="replace").strip()
        except OSError:
            return ""

    def _close_log(self) -> None:
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def __enter__(self) -> "MockServiceProcess":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
