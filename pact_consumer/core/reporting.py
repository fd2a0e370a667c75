"""
Failure reporting for Pact test steps.

Failures inside ``MockService.run`` happen on worker threads and in
callbacks, where raising would not reach the test. They are handed to an
error reporter instead, which records them so the surrounding test can fail.
"""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLocation:
    """File and line a failure is attributed to."""
    file: str
    line: int

    @classmethod
    def from_caller(cls, depth: int = 1) -> Optional["SourceLocation"]:
        """Location of the frame ``depth`` levels above the caller of this method."""
        frame = inspect.currentframe()
        try:
            for _ in range(depth + 1):
                if frame is None:
                    return None
                frame = frame.f_back
            if frame is None:
                return None
            return cls(file=frame.f_code.co_filename, line=frame.f_lineno)
        finally:
            del frame

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class FailureReport:
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ErrorReportable(Protocol):
    def report_failure(self, message: str, location: Optional[SourceLocation] = None) -> None:
        ...


class ErrorReporter:
    """
    Default reporter: logs each failure and keeps it for the test to assert on.

    Call ``raise_for_failures()`` at the end of a test (the pytest plugin does
    this automatically) to turn recorded failures into a test failure.
    """

    def __init__(self) -> None:
        self._failures: List[FailureReport] = []
        self._lock = threading.Lock()

    @property
    def failures(self) -> List[FailureReport]:
        with self._lock:
            return list(self._failures)

    def report_failure(self, message: str, location: Optional[SourceLocation] = None) -> None:
        report = FailureReport(message=message, location=location)
        with self._lock:
            self._failures.append(report)
        logger.error(
            f"Pact failure: {message}",
            extra={"extra": {"location": str(location) if location else None}},
        )

    def raise_for_failures(self) -> None:
        failures = self.failures
        if not failures:
            return
        lines = "\n".join(f"  - {failure}" for failure in failures)
        raise AssertionError(f"{len(failures)} Pact failure(s):\n{lines}")

    def clear(self) -> None:
        with self._lock:
            self._failures.clear()
