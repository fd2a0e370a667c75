"""
pact-consumer

Consumer-driven contract testing against a Pact mock service.
"""

from .core.errors import (
    PactException,
    PactWriteError,
    RunInProgressError,
    StartupError,
    TestBodyError,
    ValidationFailure,
    VerificationMismatchError,
    WaitTimeoutError,
)
from .core.interaction import Interaction
from .core.matchers import EachLike, Like, Matcher, SomethingLike, Term, render
from .core.mock_service import MockService, RunState
from .core.pact import Pact, Pacticipant
from .core.reporting import ErrorReporter, SourceLocation
from .mock_server import MockServiceClient, MockServiceProcess, TransferProtocol

__version__ = "0.1.0"

__all__ = [
    "EachLike",
    "ErrorReporter",
    "Interaction",
    "Like",
    "Matcher",
    "MockService",
    "MockServiceClient",
    "MockServiceProcess",
    "Pact",
    "PactException",
    "PactWriteError",
    "Pacticipant",
    "RunInProgressError",
    "RunState",
    "SomethingLike",
    "SourceLocation",
    "StartupError",
    "Term",
    "TestBodyError",
    "TransferProtocol",
    "ValidationFailure",
    "VerificationMismatchError",
    "WaitTimeoutError",
    "render",
]
