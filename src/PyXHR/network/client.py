# === NAVMAP v1 ===
# {
#   "module": "PyXHR.network.client",
#   "purpose": "HTTPX client factory shared by request objects.",
#   "sections": [
#     {
#       "id": "get-http-client",
#       "name": "get_http_client",
#       "anchor": "function-get-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "configure-http-client",
#       "name": "configure_http_client",
#       "anchor": "function-configure-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "close-http-client",
#       "name": "close_http_client",
#       "anchor": "function-close-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "reset-http-client",
#       "name": "reset_http_client",
#       "anchor": "function-reset-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "create-ssl-context",
#       "name": "_create_ssl_context",
#       "anchor": "function-create-ssl-context",
#       "kind": "function"
#     },
#     {
#       "id": "create-http-client",
#       "name": "_create_http_client",
#       "anchor": "function-create-http-client",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTPX client factory.

Provides the process-wide ``httpx.Client`` that request objects stream
through when no transport is injected.

Key design:
- **Lazy initialization**: Client created on first use, not at import time.
- **PID-aware**: If the process forks, the child detects this and rebuilds the
  client on first use to avoid sharing sockets with the parent.
- **Thread-safe**: A ``threading.Lock`` guards creation; request objects run
  their exchanges on worker threads.
- **No redirects**: ``follow_redirects=False``; the request object follows
  redirects itself so it can rewrite its URL and ``Host`` header per hop.
- **No pooling**: keep-alive is disabled; each exchange opens a connection.

Example:
    >>> from PyXHR.network import get_http_client, close_http_client
    >>> client = get_http_client()
    >>> close_http_client()  # at process shutdown or test cleanup
"""

import logging
import os
import ssl
import threading
from typing import Optional

import certifi
import httpx

from PyXHR.network.policy import MAX_CONNECTIONS, MAX_KEEPALIVE_CONNECTIONS
from PyXHR.settings import HttpSettings, get_settings

logger = logging.getLogger(__name__)


# ============================================================================
# Global Client State
# ============================================================================

_client: Optional[httpx.Client] = None
_client_lock = threading.Lock()
_client_bind_pid: Optional[int] = None
_client_external = False


# ============================================================================
# Public API
# ============================================================================


def get_http_client() -> httpx.Client:
    """Get or create the shared HTTPX client.

    Behavior:
        - First call: Creates client, binds to the current PID.
        - Subsequent calls: Returns same client (thread-safe).
        - Process forked: Child detects PID change, rebuilds client on first call.
        - Client installed with :func:`configure_http_client`: returned as-is.
    """
    global _client, _client_bind_pid

    if _client is not None and (_client_external or _client_bind_pid == os.getpid()):
        return _client

    with _client_lock:
        if _client is not None and (_client_external or _client_bind_pid == os.getpid()):
            return _client

        if _client is not None:
            logger.debug("Process forked; closing old HTTP client and rebuilding.")
            try:
                _client.close()
            except Exception as e:
                logger.debug(f"Error closing old client: {e}")
            _client = None

        _client = _create_http_client(get_settings().http)
        _client_bind_pid = os.getpid()

        logger.debug("HTTP client initialized", extra={"pid": _client_bind_pid})
        return _client


def configure_http_client(client: httpx.Client) -> None:
    """Install ``client`` as the shared client (tests, custom transports).

    The previous shared client is closed unless it was itself installed by
    the caller, in which case the caller owns it.
    """
    global _client, _client_bind_pid, _client_external

    with _client_lock:
        if _client is not None and not _client_external and _client is not client:
            _client.close()
        _client = client
        _client_bind_pid = os.getpid()
        _client_external = True


def close_http_client() -> None:
    """Close the HTTP client and release resources.

    Safe to call multiple times or when no client has been created. A client
    installed with :func:`configure_http_client` is detached but not closed.
    """
    global _client, _client_external

    with _client_lock:
        if _client is not None:
            try:
                if not _client_external:
                    _client.close()
                    logger.debug("HTTP client closed")
            except Exception as e:
                logger.error(f"Error closing HTTP client: {e}")
            finally:
                _client = None
                _client_external = False


def reset_http_client() -> None:
    """Reset the HTTP client (primarily for testing)."""
    global _client_bind_pid

    close_http_client()
    _client_bind_pid = None


# ============================================================================
# Implementation Details
# ============================================================================


def _create_ssl_context(http: HttpSettings) -> ssl.SSLContext:
    """Create SSL context with secure defaults (system + certifi bundle)."""
    if not http.verify_tls:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS verification DISABLED (development only!)")
        return ctx

    ctx = ssl.create_default_context(cafile=certifi.where())
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx


def _create_http_client(http: HttpSettings) -> httpx.Client:
    """Create the HTTPX client from ``http`` settings.

    Configuration:
    - Timeouts: per-phase from settings
    - Connections: no keep-alive reuse
    - Redirects: disabled (followed by the request object)
    """
    ssl_ctx = _create_ssl_context(http)

    client = httpx.Client(
        timeout=httpx.Timeout(
            connect=http.timeout_connect,
            read=http.timeout_read,
            write=http.timeout_write,
            pool=http.timeout_pool,
        ),
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
        ),
        follow_redirects=False,
        trust_env=http.trust_env,
        verify=ssl_ctx,
    )

    logger.debug(
        "HTTPX client created",
        extra={"verify_tls": http.verify_tls, "max_connections": MAX_CONNECTIONS},
    )
    return client


__all__ = [
    "get_http_client",
    "configure_http_client",
    "close_http_client",
    "reset_http_client",
]
