"""
Structured error taxonomy for the Pact consumer client.

Every failure the orchestration can hit maps to one error code, so test
output and logs carry an actionable category for triage.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    """High-level error categories."""
    STARTUP = "STARTUP"
    TEST = "TEST"
    VERIFY = "VERIFY"
    VALID = "VALID"
    TIMEOUT = "TIMEOUT"
    WRITE = "WRITE"
    CONFIG = "CONFIG"


class PactErrorCode(str, Enum):
    """
    Structured error codes.

    Format: {CATEGORY}_{SPECIFIC_CODE}
    """

    # Mock service could not be configured with the interaction (STARTUP_xx)
    STARTUP_MOCK_SERVICE_FAILED = "STARTUP_001"

    # Caller-supplied test function raised (TEST_xx)
    TEST_FUNCTION_RAISED = "TEST_001"

    # Recorded traffic did not match expectations (VERIFY_xx)
    VERIFY_INTERACTION_MISMATCH = "VERIFY_001"

    # Finalize preconditions (VALID_xx)
    VALID_INTERACTIONS_FAILED = "VALID_001"
    VALID_PACT_MALFORMED = "VALID_002"

    # Blocking wait exceeded its budget (TIMEOUT_xx)
    TIMEOUT_WAIT_EXCEEDED = "TIMEOUT_001"

    # Contract file could not be written (WRITE_xx)
    WRITE_PACT_FAILED = "WRITE_001"

    # Usage and configuration errors (CONFIG_xx)
    CONFIG_RUN_IN_PROGRESS = "CONFIG_001"


class PactErrorDetail(BaseModel):
    """Actionable information about one failure."""
    code: PactErrorCode
    message: str
    details: Optional[str] = None
    location: Optional[str] = None  # file:line of the failing test step
    context: Dict[str, Any] = {}

    @property
    def category(self) -> ErrorCategory:
        """Extract error category from code."""
        return ErrorCategory(self.code.value.split("_")[0])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {
            "error_code": self.code.value,
            "category": self.category.value,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details
        if self.location:
            result["location"] = self.location
        if self.context:
            result["context"] = self.context

        return result


class PactException(Exception):
    """
    Base exception class with structured error information.

    All client-specific exceptions inherit from this so they can be reported
    uniformly.
    """

    def __init__(self, error_detail: PactErrorDetail, cause: Optional[Exception] = None):
        self.error_detail = error_detail
        self.cause = cause
        super().__init__(error_detail.message)

    @property
    def code(self) -> PactErrorCode:
        return self.error_detail.code

    @property
    def category(self) -> ErrorCategory:
        return self.error_detail.category

    @property
    def description(self) -> str:
        """Human readable description used when reporting the failure."""
        if self.error_detail.details:
            return f"{self.error_detail.message}: {self.error_detail.details}"
        return self.error_detail.message


class StartupError(PactException):
    """The mock service failed to initialize with the given interactions."""
    pass


class TestBodyError(PactException):
    """The caller-supplied test function raised."""
    __test__ = False


class VerificationMismatchError(PactException):
    """Requests recorded by the mock service did not match expectations."""
    pass


class ValidationFailure(PactException):
    """Finalize was attempted while an interaction failed or the pact is malformed."""
    pass


class WaitTimeoutError(PactException):
    """A blocking wait exceeded its timeout."""
    pass


class PactWriteError(PactException):
    """The mock service could not write the contract file."""
    pass


class RunInProgressError(PactException):
    """``run`` was called while another run was still in flight."""
    pass


def create_startup_error(message: str, details: Optional[str] = None,
                         cause: Optional[Exception] = None) -> StartupError:
    return StartupError(PactErrorDetail(
        code=PactErrorCode.STARTUP_MOCK_SERVICE_FAILED,
        message=message,
        details=details,
    ), cause=cause)


def create_test_body_error(
    error: Exception,
    description: Optional[str] = None,
    location: Optional[str] = None
) -> TestBodyError:
    """Wrap an exception raised by a test function."""
    context = {"exception_type": type(error).__name__}
    if description:
        context["interaction"] = description

    return TestBodyError(PactErrorDetail(
        code=PactErrorCode.TEST_FUNCTION_RAISED,
        message=f"Error thrown in test function: {error}",
        location=location,
        context=context,
    ), cause=error)


def create_verification_error(details: str, description: Optional[str] = None) -> VerificationMismatchError:
    context = {}
    if description:
        context["interaction"] = description

    return VerificationMismatchError(PactErrorDetail(
        code=PactErrorCode.VERIFY_INTERACTION_MISMATCH,
        message=get_error_message(PactErrorCode.VERIFY_INTERACTION_MISMATCH),
        details=details,
        context=context,
    ))


def create_validation_failure(code: PactErrorCode, interaction_count: int = 0) -> ValidationFailure:
    return ValidationFailure(PactErrorDetail(
        code=code,
        message=get_error_message(code),
        context={"interaction_count": interaction_count},
    ))


def create_timeout_error(timeout: float, location: Optional[str] = None) -> WaitTimeoutError:
    return WaitTimeoutError(PactErrorDetail(
        code=PactErrorCode.TIMEOUT_WAIT_EXCEEDED,
        message=f"Waited more than {timeout} seconds",
        location=location,
        context={"timeout": timeout},
    ))


def create_write_error(message: str, details: Optional[str] = None,
                       cause: Optional[Exception] = None) -> PactWriteError:
    return PactWriteError(PactErrorDetail(
        code=PactErrorCode.WRITE_PACT_FAILED,
        message=message,
        details=details,
    ), cause=cause)


def create_run_in_progress_error() -> RunInProgressError:
    return RunInProgressError(PactErrorDetail(
        code=PactErrorCode.CONFIG_RUN_IN_PROGRESS,
        message=get_error_message(PactErrorCode.CONFIG_RUN_IN_PROGRESS),
    ))


# Error code mapping for quick lookup
ERROR_MESSAGES = {
    PactErrorCode.STARTUP_MOCK_SERVICE_FAILED: "Mock service failed to set up interactions",
    PactErrorCode.TEST_FUNCTION_RAISED: "Error thrown in test function",
    PactErrorCode.VERIFY_INTERACTION_MISMATCH: "Mock service verification failed",
    PactErrorCode.VALID_INTERACTIONS_FAILED: "Not all interactions passed validation",
    PactErrorCode.VALID_PACT_MALFORMED: "Pact has no complete interactions to write",
    PactErrorCode.TIMEOUT_WAIT_EXCEEDED: "Wait for test step exceeded its timeout",
    PactErrorCode.WRITE_PACT_FAILED: "Failed to write Pact contract file",
    PactErrorCode.CONFIG_RUN_IN_PROGRESS: "MockService.run() is already in progress for this mock service",
}


def get_error_message(code: PactErrorCode) -> str:
    """Get standard error message for error code."""
    return ERROR_MESSAGES.get(code, f"Unknown error: {code.value}")
