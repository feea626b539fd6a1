"""Redirect following: hop limit, method rewriting, Host recomputation."""

from __future__ import annotations

import logging

import httpx
import pytest

from PyXHR import MaxRedirectsExceeded, ReadyState
from PyXHR.settings import RedirectSettings, XHRSettings


def _chain(final_hop: int):
    """Handler redirecting ``/r/<n>`` to ``/r/<n+1>`` until ``final_hop``."""

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        hop = int(request.url.path.rsplit("/", 1)[-1])
        if final_hop < 0 or hop < final_hop:
            return httpx.Response(302, headers={"Location": f"/r/{hop + 1}"})
        return httpx.Response(200, text=f"arrived at {hop}")

    return handler, seen


def test_ten_redirects_succeed(make_xhr, event_log, caplog):
    handler, seen = _chain(final_hop=10)
    xhr = make_xhr(handler)
    xhr.open("GET", "http://example.org/r/0")
    log = event_log(xhr)

    with caplog.at_level(logging.INFO, logger="PyXHR.request"):
        xhr.send()
        assert xhr.wait(5)

    assert len(seen) == 11
    assert xhr.status == 200
    assert xhr.response_text == "arrived at 10"
    assert xhr.response_url == "http://example.org/r/10"
    assert log.count("load") == 1
    assert log.count("loadstart") == 1
    assert ReadyState.HEADERS_RECEIVED in log.states
    assert any(record.message == "Redirects followed" for record in caplog.records)


def test_eleventh_redirect_is_fatal(make_xhr, event_log):
    """The 11th hop raises from ``wait`` and the request never reaches DONE."""

    handler, seen = _chain(final_hop=-1)
    xhr = make_xhr(handler)
    xhr.open("GET", "http://example.org/r/0")
    log = event_log(xhr)

    xhr.send()
    with pytest.raises(MaxRedirectsExceeded) as excinfo:
        xhr.wait(5)

    assert len(seen) == 11
    assert excinfo.value.max_hops == 10
    assert "too many redirects" in str(excinfo.value)
    assert xhr.ready_state != ReadyState.DONE
    assert log.count("loadend") == 0
    assert log.count("error") == 0
    assert log.count("load") == 0

    # The object is reusable after the fatal error.
    xhr.abort()
    assert xhr.ready_state == ReadyState.UNSENT


def test_redirect_limit_comes_from_settings(make_xhr):
    handler, seen = _chain(final_hop=-1)
    xhr = make_xhr(handler, settings=XHRSettings(redirects=RedirectSettings(max_hops=2)))
    xhr.open("GET", "http://example.org/r/0")
    xhr.send()

    with pytest.raises(MaxRedirectsExceeded):
        xhr.wait(5)
    assert len(seen) == 3


def test_see_other_switches_to_get_and_drops_body(make_xhr):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        seen.append(request)
        if request.url.path == "/form":
            return httpx.Response(303, headers={"Location": "/result"})
        return httpx.Response(200, text="result")

    xhr = make_xhr(handler)
    xhr.open("POST", "http://example.org/form")
    xhr.send("field=value")
    assert xhr.wait(5)

    assert [r.method for r in seen] == ["POST", "GET"]
    assert seen[0].content == b"field=value"
    assert seen[1].content == b""
    assert "content-length" not in seen[1].headers
    assert "content-type" not in seen[1].headers
    assert xhr.response_text == "result"


@pytest.mark.parametrize("status", [301, 302, 307])
def test_other_redirects_resend_method_and_body(make_xhr, status):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        request.read()
        seen.append(request)
        if request.url.path == "/old":
            return httpx.Response(status, headers={"Location": "/new"})
        return httpx.Response(200)

    xhr = make_xhr(handler)
    xhr.open("PUT", "http://example.org/old")
    xhr.send("payload")
    assert xhr.wait(5)

    assert [r.method for r in seen] == ["PUT", "PUT"]
    assert seen[1].content == b"payload"


def test_cross_host_redirect_recomputes_host_header(make_xhr):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "a.example":
            return httpx.Response(302, headers={"Location": "http://b.example:8080/landing"})
        return httpx.Response(200, text="b")

    xhr = make_xhr(handler)
    xhr.open("GET", "http://a.example/start")
    xhr.send()
    assert xhr.wait(5)

    assert seen[0].headers["host"] == "a.example"
    assert seen[1].headers["host"] == "b.example:8080"
    assert seen[1].url.port == 8080
    assert xhr.responseURL == "http://b.example:8080/landing"


def test_redirect_without_location_is_a_plain_response(make_xhr):
    xhr = make_xhr(lambda request: httpx.Response(302, text="nowhere"))
    xhr.open("GET", "http://example.org/")
    xhr.send()
    assert xhr.wait(5)

    assert xhr.status == 302
    assert xhr.response_text == "nowhere"


def test_redirect_to_unsupported_scheme_follows_error_path(make_xhr, event_log):
    xhr = make_xhr(lambda request: httpx.Response(302, headers={"Location": "ftp://example.org/file"}))
    xhr.open("GET", "http://example.org/")
    log = event_log(xhr)
    xhr.send()
    assert xhr.wait(5)

    assert xhr.ready_state == ReadyState.DONE
    assert xhr.status == 0
    assert log.count("error") == 1
    assert xhr.status_text.startswith("RedirectError:")


def test_redirect_to_out_of_range_port_follows_error_path(make_xhr, event_log):
    xhr = make_xhr(lambda request: httpx.Response(302, headers={"Location": "http://example.test:99999/x"}))
    xhr.open("GET", "http://example.org/")
    log = event_log(xhr)
    xhr.send()
    assert xhr.wait(5)

    assert xhr.ready_state == ReadyState.DONE
    assert xhr.status == 0
    assert log.count("error") == 1
    assert log.count("loadend") == 1
