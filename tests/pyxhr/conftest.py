"""Shared fixtures for the PyXHR suite."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List

import httpx
import pytest

from PyXHR.network.client import reset_http_client
from PyXHR.network.transport import HttpTransport
from PyXHR.request import XMLHttpRequest
from PyXHR.settings import reset_settings


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Give every test a fresh settings cache, HTTP client and package logger."""

    reset_settings()
    reset_http_client()
    yield
    reset_http_client()
    reset_settings()
    package_logger = logging.getLogger("PyXHR")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_pyxhr_managed", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


class EventLog:
    """Records events fired by a request object, in order."""

    def __init__(self, xhr: XMLHttpRequest) -> None:
        self.xhr = xhr
        self.events: List[str] = []
        self.states: List[int] = []
        self.details: Dict[str, object] = {}
        self.loadend = threading.Event()
        for name in ("readystatechange", "loadstart", "load", "loadend", "error", "abort", "timeout"):
            xhr.add_event_listener(name, self._record)

    def _record(self, event) -> None:
        name = event.type.value
        self.events.append(name)
        if name == "readystatechange":
            self.states.append(int(event.target.ready_state))
        if event.detail is not None:
            self.details[name] = event.detail
        if name == "loadend":
            self.loadend.set()

    def count(self, name: str) -> int:
        return self.events.count(name)


@pytest.fixture
def make_xhr() -> Callable[..., XMLHttpRequest]:
    """Build request objects whose exchanges are served by an httpx MockTransport handler."""

    clients: List[httpx.Client] = []

    def _factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> XMLHttpRequest:
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=False)
        clients.append(client)
        return XMLHttpRequest(transport=HttpTransport(client=client), **kwargs)

    yield _factory
    for client in clients:
        client.close()


@pytest.fixture
def event_log() -> Callable[[XMLHttpRequest], EventLog]:
    return EventLog
