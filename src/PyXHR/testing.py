"""Testing utilities for exercising request objects without a network."""

from __future__ import annotations

import contextlib
from typing import Iterator

import httpx

from .network.client import configure_http_client, reset_http_client

__all__ = ["use_mock_http_client"]


@contextlib.contextmanager
def use_mock_http_client(transport: httpx.BaseTransport, **client_kwargs) -> Iterator[httpx.Client]:
    """Temporarily install a shared HTTPX client backed by ``transport``.

    Request objects created without an explicit transport pick the client up
    on their next exchange.
    """

    client = httpx.Client(transport=transport, follow_redirects=False, **client_kwargs)
    configure_http_client(client)
    try:
        yield client
    finally:
        reset_http_client()
        client.close()
