"""
Pact interaction testing against a mock service.

``MockService`` is the entry point of a consumer contract test:

    mock_service = MockService(consumer="mobile-app", provider="auth-service")

    (mock_service
     .upon_receiving("a request for an account")
     .given("an account exists")
     .with_request("GET", "/accounts/1")
     .will_respond_with(200, body={"id": Like(12345)}))

    def test_function(done):
        response = requests.get(f"{mock_service.base_url}/accounts/1")
        assert response.json()["id"] == 12345
        done()

    mock_service.run(test_function)
    ...
    mock_service.finalize()

Each ``run`` configures the mock service with the most recently registered
interaction only, runs the test function against it and verifies the
requests it recorded. ``finalize`` writes the contract with every
interaction, provided all of them passed.
"""

from __future__ import annotations

import functools
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from ..config import Settings, get_settings
from ..mock_server.client import MockServer, MockServiceClient, TransferProtocol
from .errors import (
    PactErrorCode,
    PactWriteError,
    StartupError,
    VerificationMismatchError,
    create_run_in_progress_error,
    create_test_body_error,
    create_validation_failure,
)
from .interaction import Interaction
from .pact import Pact, Pacticipant
from .reporting import ErrorReportable, ErrorReporter, SourceLocation
from .waiting import Done, wait_until

logger = logging.getLogger(__name__)

TestFunction = Callable[[Done], None]
FinalizeCompletion = Callable[[Optional[str], Optional[Exception]], None]


class RunState(str, Enum):
    """Phases of a single ``MockService.run``."""
    IDLE = "idle"
    PROVIDER_STARTING = "provider_starting"
    TEST_RUNNING = "test_running"
    VERIFYING = "verifying"
    COMPLETED_PASSED = "completed_passed"
    COMPLETED_FAILED = "completed_failed"


class MockService:
    """
    Handles Pact interaction testing for one consumer/provider pair.

    Usage contract: ``run`` and ``finalize`` are called from a single test
    thread. A second ``run`` started while one is in flight raises
    ``RunInProgressError``.

    When initialized with ``TransferProtocol.SECURE`` the mock service uses a
    self-signed certificate.
    """

    def __init__(
        self,
        consumer: str,
        provider: str,
        scheme: TransferProtocol = TransferProtocol.STANDARD,
        mock_server: Optional[MockServer] = None,
        error_reporter: Optional[ErrorReportable] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Args:
            consumer: Name of the API consumer (e.g. "mobile-app")
            provider: Name of the API provider (e.g. "auth-service")
            scheme: Scheme the mock service listens on
            mock_server: Simulated provider; defaults to a MockServiceClient
                built from settings
            error_reporter: Receives every failure; defaults to ErrorReporter
            timeout: Default seconds for each wait in ``run``; overrides
                PACT_TIMEOUT
            settings: Configuration; defaults to ``get_settings()``
        """
        self.settings = settings or get_settings()
        self.pact = Pact(
            consumer=Pacticipant(name=consumer),
            provider=Pacticipant(name=provider),
            specification_version=self.settings.PACT_SPECIFICATION_VERSION,
        )
        self.scheme = scheme
        self.mock_server: MockServer = mock_server or MockServiceClient(
            host=self.settings.PACT_MOCK_SERVICE_HOST,
            port=self.settings.PACT_MOCK_SERVICE_PORT,
            pact_dir=self.settings.PACT_DIR,
            scheme=scheme,
        )
        self.error_reporter: ErrorReportable = error_reporter or ErrorReporter()
        self.timeout = timeout if timeout is not None else self.settings.PACT_TIMEOUT

        self._interactions: List[Interaction] = []
        self._current_interaction: Optional[Interaction] = None
        self._all_validated = True
        self._state = RunState.IDLE
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        """URL the code under test should send its requests to."""
        return self.mock_server.base_url

    @property
    def interactions(self) -> List[Interaction]:
        with self._lock:
            return list(self._interactions)

    @property
    def current_interaction(self) -> Optional[Interaction]:
        return self._current_interaction

    @property
    def all_validated(self) -> bool:
        with self._lock:
            return self._all_validated

    @property
    def state(self) -> RunState:
        return self._state

    def upon_receiving(self, description: str) -> Interaction:
        """
        Describe a new interaction between the consumer and provider.

        The description and provider state combination must be unique within
        the contract; this is not checked here, the provider-side verifier
        relies on it.

        Returns:
            Interaction: the new interaction, to be completed by the caller
        """
        interaction = Interaction().upon_receiving(description)
        with self._lock:
            self._interactions.append(interaction)
            self._current_interaction = interaction
        return interaction

    def run(
        self,
        test_function: TestFunction,
        timeout: Optional[float] = None,
        location: Optional[SourceLocation] = None,
    ) -> None:
        """
        Run the current interaction against the mock service.

        ``test_function`` receives a ``done`` callback and must call it once
        the request under test has completed. If it does not, the run fails
        after ``timeout`` seconds with a "Waited more than" failure.

        Failures are not raised; they are sent to the error reporter and
        mark the session as failed, so ``finalize`` will refuse to write the
        contract.

        Args:
            test_function: Code that makes the API request
            timeout: Seconds to wait for each step; defaults to the service timeout
            location: Where failures are reported; defaults to the caller's line

        Raises:
            RuntimeError: If no interaction has been registered
            RunInProgressError: If another run is in flight on this service
        """
        location = location or SourceLocation.from_caller()
        interaction = self._current_interaction
        if interaction is None:
            raise RuntimeError("No interaction to run; call upon_receiving() first")

        if not self._run_lock.acquire(blocking=False):
            raise create_run_in_progress_error()
        try:
            self._run(interaction, test_function, timeout if timeout is not None else self.timeout, location)
        finally:
            self._run_lock.release()

    def _run(
        self,
        interaction: Interaction,
        test_function: TestFunction,
        timeout: float,
        location: Optional[SourceLocation],
    ) -> None:
        description = interaction.description
        run = _RunToken(description)
        fail = functools.partial(self._fail_for_run, run)

        fragment = self.pact.model_copy(update={"interactions": [interaction]}).data()
        if fragment is None:
            fail(f"[{description}] Interaction is missing its request or response", location)
            self._finish(run)
            return

        logger.info(f"Running Pact interaction '{description}'")

        def start_and_test(done: Done) -> None:
            self._set_state(run, RunState.PROVIDER_STARTING)
            try:
                self.mock_server.setup(fragment, self.scheme)
            except StartupError as e:
                fail(f"[{description}] {e.description}", location)
                done()
                return

            # Setup may return after the wait gave up; the next run owns the mock service by then.
            if run.setup_expired.is_set() or run.finished.is_set():
                logger.warning(f"Skipping test function for '{description}': setup finished after the wait expired")
                return

            self._set_state(run, RunState.TEST_RUNNING)
            try:
                test_function(done)
            except Exception as e:
                error = create_test_body_error(e, description, str(location) if location else None)
                fail(f"[{description}] {error.description}", location)
                done()

        wait_until(timeout, start_and_test, fail, location, expired=run.setup_expired)

        def verify(done: Done) -> None:
            if run.finished.is_set():
                return
            self._set_state(run, RunState.VERIFYING)
            try:
                self.mock_server.verify()
            except VerificationMismatchError as e:
                fail(f"[{description}] {e.description}", location)
            done()

        wait_until(timeout, verify, fail, location)

        if self._finish(run) is RunState.COMPLETED_FAILED:
            logger.warning(f"Pact interaction '{description}' failed")
        else:
            logger.info(f"Pact interaction '{description}' passed")

    def _set_state(self, run: _RunToken, state: RunState) -> None:
        with self._lock:
            if not run.finished.is_set():
                self._state = state

    def _finish(self, run: _RunToken) -> RunState:
        with self._lock:
            run.finished.set()
            self._state = RunState.COMPLETED_FAILED if run.failures else RunState.COMPLETED_PASSED
            return self._state

    def finalize(self, completion: Optional[FinalizeCompletion] = None) -> str:
        """
        Verify all interactions passed and write the Pact contract.

        By default contracts are written to ``/tmp/pacts``; set ``PACT_DIR``
        to change the location. Writing is only as idempotent as the mock
        service's own write.

        Args:
            completion: Optional callback receiving ``(message, None)`` on
                success or ``(None, error)`` on failure

        Returns:
            str: Message from the mock service naming the written file

        Raises:
            ValidationFailure: If any interaction failed or there is nothing
                to write; the mock service is not contacted
            PactWriteError: If the mock service could not write the file
        """
        with self._lock:
            interactions = list(self._interactions)
            all_validated = self._all_validated
        self.pact.interactions = interactions
        pact_data = self.pact.data()

        if not all_validated or pact_data is None:
            code = (
                PactErrorCode.VALID_INTERACTIONS_FAILED
                if not all_validated
                else PactErrorCode.VALID_PACT_MALFORMED
            )
            error = create_validation_failure(code, interaction_count=len(interactions))
            logger.warning(error.description, extra={"extra": error.error_detail.to_dict()})
            if completion:
                completion(None, error)
            raise error

        try:
            message = self.mock_server.finalize(pact_data)
        except PactWriteError as e:
            self._fail_with(e.description)
            if completion:
                completion(None, e)
            raise

        if completion:
            completion(message, None)
        return message

    def _fail_with(self, message: str, location: Optional[SourceLocation] = None) -> None:
        with self._lock:
            self._all_validated = False
        self.error_reporter.report_failure(message, location)

    def _fail_for_run(self, run: _RunToken, message: str, location: Optional[SourceLocation] = None) -> None:
        with self._lock:
            stale = run.finished.is_set()
            if not stale:
                run.failures += 1
                self._all_validated = False
        if stale:
            logger.warning(f"Ignoring failure reported after '{run.description}' completed: {message}")
            return
        self.error_reporter.report_failure(message, location)


class _RunToken:
    """
    One call to ``MockService.run``.

    Worker threads left behind by an expired wait keep a reference to their
    token, so anything they report after the run finished is dropped instead
    of landing on the run that follows.
    """

    def __init__(self, description: str):
        self.description = description
        self.failures = 0
        self.setup_expired = threading.Event()
        self.finished = threading.Event()
