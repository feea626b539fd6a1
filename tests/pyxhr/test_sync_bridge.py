"""Synchronous sends through the thread-pool bridge."""

from __future__ import annotations

import threading

import httpx
import pytest

from PyXHR import ReadyState, RequestTimeoutError, SyncBridge, TransportError
from PyXHR.network.transport import HttpTransport, RequestSpec


def _transport(handler) -> HttpTransport:
    return HttpTransport(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestSyncBridge:
    def setup_method(self):
        self.threads = []
        self.release = threading.Event()

    def teardown_method(self):
        self.release.set()

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.threads.append(threading.current_thread().name)
        if request.url.path == "/slow":
            self.release.wait(5)
        if request.url.path == "/broken":
            raise httpx.ConnectError("refused", request=request)
        if request.url.path == "/bug":
            raise RuntimeError("handler bug")
        return httpx.Response(200, headers={"X-Sync": "yes"}, text="sync body")

    def test_run_returns_completed_response_on_named_worker(self):
        ids = iter(["first", "second"])
        bridge = SyncBridge(_transport(self._handler), id_factory=lambda: next(ids))

        one = bridge.run(RequestSpec("GET", "example.org", 80, "/a"))
        two = bridge.run(RequestSpec("GET", "example.org", 80, "/b"))

        assert one.status == 200
        assert one.text == "sync body"
        assert two.text == "sync body"
        assert self.threads[0].startswith("pyxhr-sync-first")
        assert self.threads[1].startswith("pyxhr-sync-second")
        assert threading.current_thread().name not in self.threads

    def test_deadline_raises_timeout(self):
        bridge = SyncBridge(_transport(self._handler))

        with pytest.raises(RequestTimeoutError) as excinfo:
            bridge.run(RequestSpec("GET", "example.org", 80, "/slow"), timeout_ms=30)

        assert excinfo.value.timeout_ms == 30

    def test_transport_failure_is_wrapped(self):
        bridge = SyncBridge(_transport(self._handler))

        with pytest.raises(TransportError) as excinfo:
            bridge.run(RequestSpec("GET", "example.org", 80, "/broken"))

        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        assert excinfo.value.url == "http://example.org:80/broken"

    def test_unexpected_failure_is_wrapped(self):
        bridge = SyncBridge(_transport(self._handler))

        with pytest.raises(TransportError) as excinfo:
            bridge.run(RequestSpec("GET", "example.org", 80, "/bug"))

        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert str(excinfo.value) == "RuntimeError: handler bug"


def test_sync_request_event_sequence(make_xhr, event_log):
    """Sync sends fire loadstart, then DONE's readystatechange, load and loadend."""

    xhr = make_xhr(lambda request: httpx.Response(200, headers={"X-Sync": "yes"}, text="sync body"))
    xhr.open("GET", "http://example.org/", False)
    log = event_log(xhr)

    xhr.send()

    assert log.events == ["loadstart", "readystatechange", "load", "loadend"]
    assert log.states == [ReadyState.DONE]
    assert xhr.status == 200
    assert xhr.status_text == "OK"
    assert xhr.response_text == "sync body"
    assert xhr.get_response_header("X-Sync") == "yes"
    assert xhr.wait(0)


def test_sync_transport_error_dispatches_underlying_exception(make_xhr, event_log):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    xhr = make_xhr(handler)
    xhr.open("POST", "http://example.org/", False)
    log = event_log(xhr)

    xhr.send("x")

    assert xhr.ready_state == ReadyState.DONE
    assert xhr.status == 0
    assert isinstance(log.details["error"], httpx.ConnectError)
    assert xhr.status_text == "ConnectError: refused"


def test_sync_request_does_not_follow_redirects(make_xhr):
    xhr = make_xhr(lambda request: httpx.Response(302, headers={"Location": "/elsewhere"}))
    xhr.open("GET", "http://example.org/", False)

    xhr.send()

    assert xhr.status == 302
    assert xhr.get_response_header("location") == "/elsewhere"
