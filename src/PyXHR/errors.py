# === NAVMAP v1 ===
# {
#   "module": "PyXHR.errors",
#   "purpose": "Exception hierarchy for request lifecycle failures.",
#   "sections": [
#     {"id": "pyxhrerror", "name": "PyXHRError", "anchor": "class-pyxhrerror", "kind": "class"},
#     {"id": "invalidstateerror", "name": "InvalidStateError", "anchor": "class-invalidstateerror", "kind": "class"},
#     {"id": "securityerror", "name": "SecurityError", "anchor": "class-securityerror", "kind": "class"},
#     {"id": "requesttimeouterror", "name": "RequestTimeoutError", "anchor": "class-requesttimeouterror", "kind": "class"},
#     {"id": "transporterror", "name": "TransportError", "anchor": "class-transporterror", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared by the request object, transport, and sync bridge.

Failures fall into three groups. Caller contract violations
(:class:`InvalidStateError`, :class:`SecurityError`,
:class:`MethodNotSupportedError`, :class:`ProtocolNotSupportedError`) are
raised synchronously from the public methods. Transport failures and
timeouts never escape ``send()``; they are routed through the request's
error path and surface as the payload of the ``error`` / ``timeout`` events
(:class:`RequestTimeoutError`, :class:`TransportError`). The redirect loop
error lives in :mod:`PyXHR.network.redirect` and is fatal.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "PyXHRError",
    "InvalidStateError",
    "SecurityError",
    "MethodNotSupportedError",
    "ProtocolNotSupportedError",
    "RequestTimeoutError",
    "TransportError",
]


class PyXHRError(RuntimeError):
    """Base exception for request lifecycle failures."""


class InvalidStateError(PyXHRError):
    """Raised when a method is called in a ready state that does not allow it."""


class SecurityError(PyXHRError):
    """Raised when ``open()`` is called with a forbidden request method."""


class MethodNotSupportedError(PyXHRError):
    """Raised when a ``file:`` URL is requested with a method other than GET."""


class ProtocolNotSupportedError(PyXHRError):
    """Raised when the URL scheme is neither http, https, file nor empty."""


class RequestTimeoutError(PyXHRError):
    """Raised (or dispatched) when a request exceeds its configured timeout."""

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class TransportError(PyXHRError):
    """Wraps a transport failure observed by the synchronous bridge."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url
