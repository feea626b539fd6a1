# === NAVMAP v1 ===
# {
#   "module": "PyXHR",
#   "purpose": "Package initialization for PyXHR",
#   "sections": []
# }
# === /NAVMAP ===

"""Public API for PyXHR, an XMLHttpRequest client for Python.

The facade exposes the request object, its ready states and events, the
error types raised or dispatched during a request, and the lower-level
transport, synchronous bridge and settings it is assembled from.
"""

from __future__ import annotations

from .errors import (
    InvalidStateError,
    MethodNotSupportedError,
    ProtocolNotSupportedError,
    PyXHRError,
    RequestTimeoutError,
    SecurityError,
    TransportError,
)
from .events import EventName, XHREvent
from .files import FileReader
from .headers import HeaderTable
from .network.redirect import MaxRedirectsExceeded, RedirectError
from .network.transport import HttpTransport, RequestSpec
from .request import ReadyState, XMLHttpRequest
from .settings import XHRSettings, get_settings
from .sync_bridge import SyncBridge

__version__ = "0.1.0"

__all__ = [
    "XMLHttpRequest",
    "ReadyState",
    "EventName",
    "XHREvent",
    "HeaderTable",
    "PyXHRError",
    "InvalidStateError",
    "SecurityError",
    "MethodNotSupportedError",
    "ProtocolNotSupportedError",
    "RequestTimeoutError",
    "TransportError",
    "RedirectError",
    "MaxRedirectsExceeded",
    "HttpTransport",
    "RequestSpec",
    "SyncBridge",
    "FileReader",
    "XHRSettings",
    "get_settings",
    "__version__",
]
