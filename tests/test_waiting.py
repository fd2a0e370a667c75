import threading
import time

from pact_consumer.core.reporting import SourceLocation
from pact_consumer.core.waiting import wait_until


class Failures:
    def __init__(self):
        self.reports = []

    def __call__(self, message, location=None):
        self.reports.append((message, location))


def test_returns_true_when_done_is_called():
    failures = Failures()

    assert wait_until(1, lambda done: done(), failures) is True
    assert failures.reports == []


def test_done_may_be_called_from_another_thread():
    failures = Failures()

    def action(done):
        threading.Timer(0.05, done).start()

    assert wait_until(1, action, failures) is True


def test_timeout_is_reported_with_location():
    failures = Failures()
    location = SourceLocation("test_account.py", 42)

    started = time.monotonic()
    assert wait_until(0.1, lambda done: None, failures, location) is False

    assert time.monotonic() - started < 1
    assert failures.reports == [("Waited more than 0.1 seconds", location)]


def test_action_that_never_returns_does_not_block_past_timeout():
    failures = Failures()
    release = threading.Event()

    started = time.monotonic()
    assert wait_until(0.1, lambda done: release.wait(5), failures) is False
    release.set()

    assert time.monotonic() - started < 1


def test_exception_in_action_is_reported_and_releases_wait():
    failures = Failures()

    def action(done):
        raise KeyError("interactions")

    started = time.monotonic()
    assert wait_until(5, action, failures) is True

    assert time.monotonic() - started < 5
    assert len(failures.reports) == 1
    assert "interactions" in failures.reports[0][0]


def test_expired_event_is_set_before_failure_is_reported():
    expired = threading.Event()
    seen = []

    def on_failure(message, location=None):
        seen.append(expired.is_set())

    assert wait_until(0.1, lambda done: None, on_failure, expired=expired) is False

    assert seen == [True]


def test_expired_event_stays_clear_when_done_in_time():
    expired = threading.Event()

    assert wait_until(1, lambda done: done(), Failures(), expired=expired) is True
    assert not expired.is_set()
