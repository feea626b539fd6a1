"""Network subsystem: HTTP client, transport adapter, and redirect handling.

This package provides the HTTP stack request objects run on, based on:
- HTTPX: HTTP/1.1 client, used in streaming mode
- certifi: CA bundle for TLS verification

Modules:
- client: HTTPX client factory with lazy singleton pattern
- policy: Scheme, port, redirect and pooling constants
- transport: Streamed exchange delivered as listener callbacks
- redirect: Redirect detection, target resolution and hop accounting

Example:
    >>> from PyXHR.network import HttpTransport, RequestSpec
    >>>
    >>> transport = HttpTransport()
    >>> spec = RequestSpec(method="GET", host="example.org", port=443, path="/", secure=True)
    >>> response = transport.fetch(spec)
"""

from PyXHR.network.client import (
    close_http_client,
    configure_http_client,
    get_http_client,
    reset_http_client,
)
from PyXHR.network.policy import (
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_REDIRECT_HOPS,
    REDIRECT_STATUSES,
)
from PyXHR.network.redirect import (
    MaxRedirectsExceeded,
    RedirectError,
    RedirectHop,
    RedirectTracker,
    format_audit_trail,
    resolve_redirect,
)
from PyXHR.network.transport import (
    CompletedResponse,
    HttpTransport,
    RequestSpec,
    TransportHandle,
    TransportListener,
)

__all__ = [
    # Client lifecycle
    "get_http_client",
    "configure_http_client",
    "close_http_client",
    "reset_http_client",
    # Ports and pooling
    "DEFAULT_HTTP_PORT",
    "DEFAULT_HTTPS_PORT",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    # Redirects
    "MAX_REDIRECT_HOPS",
    "REDIRECT_STATUSES",
    "RedirectError",
    "MaxRedirectsExceeded",
    "RedirectHop",
    "RedirectTracker",
    "format_audit_trail",
    "resolve_redirect",
    # Transport
    "RequestSpec",
    "CompletedResponse",
    "TransportListener",
    "TransportHandle",
    "HttpTransport",
]
