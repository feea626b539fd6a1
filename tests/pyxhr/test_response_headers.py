"""Response header accessors across the request lifecycle."""

from __future__ import annotations

import threading

import httpx

from PyXHR import ReadyState, XMLHttpRequest

_EXPECTED_ALL = "x-a: 1, 2\r\ncontent-length: 4"


def _headers(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        headers=[("X-A", "1"), ("Set-Cookie", "a=b"), ("X-A", "2"), ("Set-Cookie2", "c=d")],
        content=b"body",
    )


def test_headers_are_unavailable_before_send():
    xhr = XMLHttpRequest()
    assert xhr.get_all_response_headers() is None
    assert xhr.get_response_header("x-a") is None

    xhr.open("GET", "http://example.org/")

    assert xhr.get_all_response_headers() is None
    assert xhr.get_response_header("x-a") is None


def test_headers_are_unavailable_while_waiting_for_response(make_xhr):
    release = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        release.wait(5)
        return _headers(request)

    xhr = make_xhr(handler)
    xhr.open("GET", "http://example.org/")
    xhr.send()
    try:
        assert xhr.ready_state == ReadyState.OPENED
        assert xhr.get_all_response_headers() is None
        assert xhr.get_response_header("x-a") is None
    finally:
        release.set()
    assert xhr.wait(5)
    assert xhr.get_all_response_headers() == _EXPECTED_ALL


def test_all_headers_at_headers_received_and_done(make_xhr):
    """Lines are CRLF-joined, repeated names merged, cookie headers left out."""

    xhr = make_xhr(_headers)
    xhr.open("GET", "http://example.org/")
    seen = {}

    def _capture(event):
        state = event.target.ready_state
        seen[state] = event.target.get_all_response_headers()

    xhr.onreadystatechange = _capture
    xhr.send()
    assert xhr.wait(5)

    assert seen[ReadyState.OPENED] is None
    assert seen[ReadyState.HEADERS_RECEIVED] == _EXPECTED_ALL
    assert seen[ReadyState.DONE] == _EXPECTED_ALL
    assert not seen[ReadyState.DONE].endswith("\r\n")
    assert "set-cookie" not in seen[ReadyState.DONE]


def test_single_header_lookup(make_xhr):
    xhr = make_xhr(_headers)
    xhr.open("GET", "http://example.org/")
    xhr.send()
    assert xhr.wait(5)

    assert xhr.get_response_header("x-a") == "1, 2"
    assert xhr.getResponseHeader("X-A") == "1, 2"
    assert xhr.get_response_header("content-length") == "4"
    assert xhr.get_response_header("x-missing") is None


def test_sync_request_exposes_same_header_block(make_xhr):
    xhr = make_xhr(_headers)
    xhr.open("GET", "http://example.org/", False)

    xhr.send()

    assert xhr.ready_state == ReadyState.DONE
    assert xhr.getAllResponseHeaders() == _EXPECTED_ALL
    assert xhr.get_response_header("x-a") == "1, 2"


def test_headers_are_cleared_by_abort(make_xhr):
    xhr = make_xhr(_headers)
    xhr.open("GET", "http://example.org/")
    xhr.send()
    assert xhr.wait(5)
    assert xhr.get_all_response_headers() == _EXPECTED_ALL

    xhr.abort()

    assert xhr.get_all_response_headers() is None
    assert xhr.get_response_header("x-a") is None
