"""Tests for the cancellation token used to stop in-flight exchanges."""

from PyXHR.cancellation import CancellationToken


def test_cancel_runs_callbacks_once() -> None:
    """Only the first ``cancel`` should report success and run callbacks."""

    calls = []
    token = CancellationToken()
    token.add_callback(lambda: calls.append("closed"))

    assert token.cancel() is True
    assert token.cancel() is False
    assert token.is_cancelled()
    assert calls == ["closed"]


def test_callback_added_after_cancel_runs_immediately() -> None:
    calls = []
    token = CancellationToken()
    token.cancel()

    token.add_callback(lambda: calls.append("late"))

    assert calls == ["late"]


def test_removed_callback_does_not_run() -> None:
    calls = []

    def _callback():
        calls.append("x")

    token = CancellationToken()
    token.add_callback(_callback)
    token.remove_callback(_callback)
    token.cancel()

    assert calls == []


def test_failing_callback_does_not_block_others() -> None:
    calls = []

    def _boom():
        raise OSError("already closed")

    token = CancellationToken()
    token.add_callback(_boom)
    token.add_callback(lambda: calls.append("ran"))
    token.cancel()

    assert calls == ["ran"]


def test_wait_returns_after_cancel() -> None:
    token = CancellationToken()
    assert token.wait(0.01) is False

    token.cancel()
    assert token.wait(0.01) is True
