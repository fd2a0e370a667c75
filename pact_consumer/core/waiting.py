"""
Blocking wait used to turn callback completion into a synchronous test step.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .errors import create_timeout_error
from .reporting import SourceLocation

logger = logging.getLogger(__name__)

Done = Callable[[], None]
FailureHandler = Callable[[str, Optional[SourceLocation]], None]


def wait_until(
    timeout: float,
    action: Callable[[Done], None],
    on_failure: FailureHandler,
    location: Optional[SourceLocation] = None,
    expired: Optional[threading.Event] = None,
) -> bool:
    """
    Run ``action`` and block until it calls ``done`` or ``timeout`` elapses.

    The action runs on a daemon thread so that an action which never returns
    cannot block the caller past the timeout.

    Args:
        timeout: Seconds to wait for ``done``
        action: Callable receiving the completion callback
        on_failure: Receives the failure message and location on timeout,
            or when the action raises before calling ``done``
        location: Source location failures are attributed to
        expired: Set as soon as the wait gives up, so an action still running
            on the worker thread can tell it no longer owns the step

    Returns:
        bool: True if ``done`` was called in time, False otherwise
    """
    completed = threading.Event()

    def done() -> None:
        completed.set()

    def runner() -> None:
        try:
            action(done)
        except Exception as e:
            logger.exception("Unhandled error in waited action")
            on_failure(f"Unhandled error while waiting: {e}", location)
            completed.set()

    worker = threading.Thread(target=runner, name="pact-wait", daemon=True)
    worker.start()

    if completed.wait(timeout):
        return True
    if expired is not None:
        expired.set()

    error = create_timeout_error(timeout, location=str(location) if location else None)
    logger.warning(error.description, extra={"extra": error.error_detail.to_dict()})
    on_failure(error.description, location)
    return False
