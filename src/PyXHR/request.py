# === NAVMAP v1 ===
# {
#   "module": "PyXHR.request",
#   "purpose": "XMLHttpRequest state machine over the httpx transport.",
#   "sections": [
#     {"id": "readystate", "name": "ReadyState", "anchor": "class-readystate", "kind": "class"},
#     {"id": "xmlhttprequest", "name": "XMLHttpRequest", "anchor": "class-xmlhttprequest", "kind": "class"},
#     {"id": "open", "name": "XMLHttpRequest.open", "anchor": "method-open", "kind": "method"},
#     {"id": "send", "name": "XMLHttpRequest.send", "anchor": "method-send", "kind": "method"},
#     {"id": "abort", "name": "XMLHttpRequest.abort", "anchor": "method-abort", "kind": "method"},
#     {"id": "transport-callbacks", "name": "Transport callbacks", "anchor": "section-transport-callbacks", "kind": "section"},
#     {"id": "set-state", "name": "XMLHttpRequest._set_state", "anchor": "method-set-state", "kind": "method"}
#   ]
# }
# === /NAVMAP ===

"""Client-side ``XMLHttpRequest`` for Python.

The object follows the browser contract: ``open()`` then optional
``setRequestHeader()`` calls, then ``send()``; progress is observed through
``readyState`` and the ``readystatechange``, ``loadstart``, ``load``,
``loadend``, ``error``, ``abort`` and ``timeout`` events.

Asynchronous sends (the default) return immediately; the exchange runs on a
transport worker thread and every delivery is applied under the instance's
re-entrant lock, so handlers see a consistent object and may call
``abort()`` or ``open()`` themselves. Synchronous sends
(``open(method, url, False)``) block in :class:`~PyXHR.sync_bridge.SyncBridge`
until the response is complete or the timeout passes.

Example:
    >>> xhr = XMLHttpRequest()
    >>> xhr.open("GET", "https://example.org/")
    >>> xhr.onload = lambda event: print(event.target.status)
    >>> xhr.send()
    >>> xhr.wait(5.0)
    200
    True
"""

from __future__ import annotations

import base64
import logging
import threading
import traceback
from enum import IntEnum
from functools import partial
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import SplitResult, unquote, urlsplit

from .cancellation import CancellationToken
from .errors import (
    InvalidStateError,
    MethodNotSupportedError,
    ProtocolNotSupportedError,
    RequestTimeoutError,
    SecurityError,
    TransportError,
)
from .events import EventDispatcher, EventHandler, EventName, EventSlot
from .files import FileReader
from .headers import DEFAULT_REQUEST_HEADERS, HeaderTable, is_allowed_header, is_allowed_method
from .network.policy import (
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    DEFAULT_TEXT_CONTENT_TYPE,
    FILE_SCHEME,
    HTTP_SCHEME,
    HTTPS_SCHEME,
    LOCAL_HOST,
    SEE_OTHER_STATUSES,
)
from .network.redirect import (
    MaxRedirectsExceeded,
    RedirectError,
    RedirectTracker,
    format_audit_trail,
    is_redirect,
    redirect_method,
)
from .network.transport import HttpTransport, RequestSpec, TransportHandle
from .settings import RequestSettings, XHRSettings, get_settings
from .sync_bridge import SyncBridge

logger = logging.getLogger(__name__)

__all__ = ["ReadyState", "XMLHttpRequest"]

_EXCLUDED_RESPONSE_HEADERS = frozenset({"set-cookie", "set-cookie2"})

Body = Union[str, bytes, bytearray, memoryview, None]


class ReadyState(IntEnum):
    """Lifecycle phase of a request object."""

    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


class _LocalTransfer:
    """Identity of a file read or synchronous exchange."""

    def __init__(self) -> None:
        self.token = CancellationToken()

    def abort(self) -> None:
        self.token.cancel()


class _TransferListener:
    """Routes transport callbacks into the owning request object."""

    def __init__(self, owner: "XMLHttpRequest") -> None:
        self._owner = owner

    def on_response(self, handle, status, reason, headers):
        return self._owner._on_response(handle, status, reason, headers)

    def on_data(self, handle, text):
        self._owner._on_data(handle, text)

    def on_end(self, handle):
        self._owner._on_end(handle)

    def on_error(self, handle, error):
        self._owner._on_transport_error(handle, error)

    def on_fatal(self, handle, error):
        self._owner._on_fatal(handle, error)


def _encode_body(body: Body) -> bytes:
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    return str(body).encode("utf-8")


def _describe_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


def _host_header(host: str, target: SplitResult) -> str:
    """Build the ``Host`` value: bracket IPv6 literals, keep explicit ports only."""
    value = host
    if target.netloc.rpartition("@")[2].startswith("["):
        value = f"[{value}]"
    if target.port is not None:
        value = f"{value}:{target.port}"
    return value


def _request_path(target: SplitResult) -> str:
    path = target.path or "/"
    if target.query:
        path = f"{path}?{target.query}"
    return path


def _alias(name: str, *, writable: bool = False, doc: Optional[str] = None) -> property:
    """camelCase property forwarding to the snake_case attribute ``name``."""

    def fget(self: Any) -> Any:
        return getattr(self, name)

    def fset(self: Any, value: Any) -> None:
        setattr(self, name, value)

    return property(fget, fset if writable else None, doc=doc or f"Alias of ``{name}``.")


class XMLHttpRequest:
    """One client request, driven through the XHR ready-state lifecycle.

    Args:
        transport: Transport for http/https exchanges (defaults to one using
            the shared httpx client).
        file_reader: Reader for ``file:`` URLs.
        sync_bridge: Bridge used for synchronous sends (defaults to one
            sharing ``transport``).
        settings: Process settings; defaults to :func:`PyXHR.settings.get_settings`.
    """

    UNSENT = ReadyState.UNSENT
    OPENED = ReadyState.OPENED
    HEADERS_RECEIVED = ReadyState.HEADERS_RECEIVED
    LOADING = ReadyState.LOADING
    DONE = ReadyState.DONE

    onreadystatechange = EventSlot(EventName.READYSTATECHANGE)
    onloadstart = EventSlot(EventName.LOADSTART)
    onload = EventSlot(EventName.LOAD)
    onloadend = EventSlot(EventName.LOADEND)
    onerror = EventSlot(EventName.ERROR)
    onabort = EventSlot(EventName.ABORT)
    ontimeout = EventSlot(EventName.TIMEOUT)

    def __init__(
        self,
        *,
        transport: Optional[HttpTransport] = None,
        file_reader: Optional[FileReader] = None,
        sync_bridge: Optional[SyncBridge] = None,
        settings: Optional[XHRSettings] = None,
    ) -> None:
        self._config = settings or get_settings()
        self._transport = transport or HttpTransport()
        self._file_reader = file_reader or FileReader()
        self._sync_bridge = sync_bridge or SyncBridge(self._transport)
        self._events = EventDispatcher(self)
        self._listener = _TransferListener(self)
        self._lock = threading.RLock()

        self.ready_state = ReadyState.UNSENT
        self.response_text = ""
        self.status = 0
        self.status_text = ""
        self.response_url = ""
        #: Timeout in milliseconds; 0 disables it.
        self.timeout = 0
        self.with_credentials = False
        #: Non-standard: skip the forbidden header and method checks.
        self.disable_header_check = False

        self._headers = HeaderTable()
        self._response_headers: Optional[List[Tuple[str, str]]] = None
        self._settings: Optional[RequestSettings] = None
        self._error_flag = False
        self._send_flag = False
        self._transfer: Optional[Union[TransportHandle, _LocalTransfer]] = None
        self._current_spec: Optional[RequestSpec] = None
        self._timer: Optional[threading.Timer] = None
        self._redirects: Optional[RedirectTracker] = None
        self._fatal_error: Optional[BaseException] = None
        self._settled = threading.Event()
        self._settled.set()

    readyState = _alias("ready_state")
    responseText = _alias("response_text")
    statusText = _alias("status_text")
    responseURL = _alias("response_url")
    withCredentials = _alias("with_credentials", writable=True)
    disableHeaderCheck = _alias("disable_header_check", writable=True)

    @property
    def responseXML(self) -> None:
        """Always ``None``; response bodies are not parsed."""
        return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def open(
        self,
        method: str,
        url: str,
        asynchronous: bool = True,
        user: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """Abort any request in progress and prepare a new one.

        Raises:
            SecurityError: ``method`` is TRACE, TRACK or CONNECT.
        """
        with self._lock:
            self.abort()
            self._error_flag = False

            if not is_allowed_method(method, disable_check=self.disable_header_check):
                raise SecurityError("SecurityError: Request method not allowed")

            self._settings = RequestSettings(
                method=method,
                url=url,
                asynchronous=asynchronous if isinstance(asynchronous, bool) else True,
                user=user,
                password=password,
            )
            self._headers = HeaderTable()
            self._response_headers = None
            self._fatal_error = None
            self._redirects = None
            self._current_spec = None
            self.status = 0
            self.status_text = ""
            self.response_text = ""
            self.response_url = url
            self._set_state(ReadyState.OPENED)

    def set_disable_header_check(self, state: bool) -> None:
        """Enable or disable the forbidden header/method checks (non-standard)."""
        self.disable_header_check = bool(state)

    def set_request_header(self, header: str, value: str) -> None:
        """Set a request header, appending to an existing value.

        Forbidden headers are refused with a warning and no error.

        Raises:
            InvalidStateError: Not ``OPENED``, or ``send()`` already started.
        """
        with self._lock:
            if self.ready_state != ReadyState.OPENED:
                raise InvalidStateError(
                    "INVALID_STATE_ERR: setRequestHeader can only be called when state is OPEN"
                )
            if not is_allowed_header(header, disable_check=self.disable_header_check):
                logger.warning('Refused to set unsafe header "%s"', header)
                return
            if self._send_flag:
                raise InvalidStateError("INVALID_STATE_ERR: send flag is true")
            self._headers.set(header, str(value))

    def get_request_header(self, name: str) -> Optional[str]:
        """Return a request header set on this object, or ``None`` (non-standard)."""
        if not isinstance(name, str):
            return None
        with self._lock:
            return self._headers.get(name)

    def get_response_header(self, name: str) -> Optional[str]:
        """Return a response header (repeated values joined with ``", "``), or ``None``."""
        with self._lock:
            if (
                not isinstance(name, str)
                or self.ready_state <= ReadyState.OPENED
                or self._response_headers is None
                or self._error_flag
            ):
                return None
            wanted = name.lower()
            values = [value for key, value in self._response_headers if key == wanted]
            return ", ".join(values) if values else None

    def get_all_response_headers(self) -> Optional[str]:
        """Return all response headers as CRLF-separated ``name: value`` lines.

        ``None`` before headers arrive or after an error. Cookie-setting
        headers are left out.
        """
        with self._lock:
            if self.ready_state < ReadyState.HEADERS_RECEIVED or self._error_flag:
                return None
            grouped: Dict[str, List[str]] = {}
            for key, value in self._response_headers or ():
                if key in _EXCLUDED_RESPONSE_HEADERS:
                    continue
                grouped.setdefault(key, []).append(value)
            return "\r\n".join(f"{key}: {', '.join(values)}" for key, values in grouped.items())

    def send(self, body: Body = None) -> None:
        """Send the request.

        Raises:
            InvalidStateError: ``open()`` was not called, or a send is in progress.
            MethodNotSupportedError: Non-GET request for a ``file:`` URL.
            ProtocolNotSupportedError: Unsupported URL scheme.
        """
        with self._lock:
            settings = self._settings
            if settings is None:
                raise InvalidStateError(
                    "INVALID_STATE_ERR: connection must be opened before send() is called"
                )
            if self.ready_state != ReadyState.OPENED:
                raise InvalidStateError(
                    "INVALID_STATE_ERR: connection must be opened before send() is called"
                )
            if self._send_flag:
                raise InvalidStateError("INVALID_STATE_ERR: send has already been called")

            target = urlsplit(settings.url)
            scheme = target.scheme.lower()
            if scheme in (HTTP_SCHEME, HTTPS_SCHEME):
                secure = scheme == HTTPS_SCHEME
                host = target.hostname or LOCAL_HOST
            elif scheme == FILE_SCHEME:
                self._send_file(settings, target)
                return
            elif not scheme:
                secure = False
                host = LOCAL_HOST
            else:
                raise ProtocolNotSupportedError(f"Protocol not supported: {scheme}:")

            spec = self._prepare_request(settings, target, host, secure, body)
            self._error_flag = False
            self._response_headers = None
            self._current_spec = spec
            logger.debug(
                "Sending request",
                extra={"method": spec.method, "url": spec.url, "async": settings.asynchronous},
            )
            if settings.asynchronous:
                self._send_async(spec)
            else:
                self._send_sync(spec)

    def abort(self) -> None:
        """Cancel the request in progress and reset the object to ``UNSENT``.

        A request that was sent and has not finished passes through ``DONE``
        first, so ``loadend`` fires. ``abort`` is always dispatched.
        """
        with self._lock:
            settled = self._settled
            self._release_transfer()

            self._headers = HeaderTable(self._default_headers())
            self._response_headers = None
            self.status = 0
            self.status_text = ""
            self.response_text = ""
            self._error_flag = True

            if (
                self.ready_state != ReadyState.UNSENT
                and (self.ready_state != ReadyState.OPENED or self._send_flag)
                and self.ready_state != ReadyState.DONE
            ):
                self._send_flag = False
                self._set_state(ReadyState.DONE)

            self._send_flag = False
            self.ready_state = ReadyState.UNSENT
            self._dispatch(EventName.ABORT)
            settled.set()

    def add_event_listener(self, event: Union[str, EventName], callback: EventHandler) -> None:
        """Register ``callback`` for ``event``; duplicates are allowed."""
        with self._lock:
            self._events.add_listener(event, callback)

    def remove_event_listener(self, event: Union[str, EventName], callback: EventHandler) -> None:
        """Remove every registration of ``callback`` for ``event``."""
        with self._lock:
            self._events.remove_listener(event, callback)

    def dispatch_event(self, event: Union[str, EventName], detail: Any = None) -> None:
        """Fire ``event``: the ``on<event>`` handler first, then listeners."""
        with self._lock:
            self._dispatch(event, detail)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current send settles (non-standard).

        Args:
            timeout: Seconds to wait; ``None`` waits indefinitely.

        Returns:
            ``True`` when the send reached ``DONE``, was aborted, or failed
            fatally; ``False`` on timeout.

        Raises:
            MaxRedirectsExceeded: The send was stopped by a redirect loop.
        """
        settled = self._settled
        finished = settled.wait(timeout)
        if self._fatal_error is not None:
            raise self._fatal_error
        return finished

    # XHR spelling of the public API.
    setDisableHeaderCheck = set_disable_header_check
    setRequestHeader = set_request_header
    getRequestHeader = get_request_header
    getResponseHeader = get_response_header
    getAllResponseHeaders = get_all_response_headers
    addEventListener = add_event_listener
    removeEventListener = remove_event_listener
    dispatchEvent = dispatch_event

    # ------------------------------------------------------------------
    # Request preparation
    # ------------------------------------------------------------------

    def _default_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self._config.http.user_agent}
        headers.update(DEFAULT_REQUEST_HEADERS)
        return headers

    def _prepare_request(
        self,
        settings: RequestSettings,
        target: SplitResult,
        host: str,
        secure: bool,
        body: Body,
    ) -> RequestSpec:
        port = target.port or (DEFAULT_HTTPS_PORT if secure else DEFAULT_HTTP_PORT)

        self._headers.merge_defaults(self._default_headers())
        self._headers.replace("Host", _host_header(host, target))

        if settings.user:
            credentials = f"{settings.user}:{settings.password or ''}".encode("utf-8")
            self._headers.replace(
                "Authorization", "Basic " + base64.b64encode(credentials).decode("ascii")
            )

        method = settings.method
        payload: Optional[bytes] = None
        if method.upper() in ("GET", "HEAD"):
            payload = None
        elif body:
            payload = _encode_body(body)
            self._headers.replace("Content-Length", str(len(payload)))
            if self._headers.get("Content-Type") is None:
                self._headers.replace("Content-Type", DEFAULT_TEXT_CONTENT_TYPE)
        elif method.upper() == "POST":
            # Some servers reject a bodyless POST without a length.
            self._headers.replace("Content-Length", "0")

        return RequestSpec(
            method=method,
            host=host,
            port=port,
            path=_request_path(target),
            headers=self._headers.as_dict(),
            body=payload,
            secure=secure,
        )

    def _redirect_request(self, previous: RequestSpec, status: int, url: str) -> RequestSpec:
        target = urlsplit(url)
        scheme = target.scheme.lower()
        if scheme not in (HTTP_SCHEME, HTTPS_SCHEME):
            raise RedirectError(f"Redirect to unsupported scheme {scheme!r}: {url}")
        secure = scheme == HTTPS_SCHEME
        host = target.hostname or LOCAL_HOST

        headers = HeaderTable(previous.headers)
        headers.replace("Host", _host_header(host, target))
        method = redirect_method(status, previous.method)
        body = previous.body
        if status in SEE_OTHER_STATUSES:
            body = None
            headers.remove("Content-Length")
            headers.remove("Content-Type")

        return RequestSpec(
            method=method,
            host=host,
            port=target.port or (DEFAULT_HTTPS_PORT if secure else DEFAULT_HTTP_PORT),
            path=_request_path(target),
            headers=headers.as_dict(),
            body=body,
            secure=secure,
        )

    # ------------------------------------------------------------------
    # Send paths
    # ------------------------------------------------------------------

    def _begin_transfer(self, transfer: Union[TransportHandle, _LocalTransfer, None]) -> None:
        self._transfer = transfer
        self._send_flag = True
        self._settled = threading.Event()

    def _send_async(self, spec: RequestSpec) -> None:
        self._begin_transfer(None)
        settled = self._settled
        self._redirects = RedirectTracker(self._config.redirects.max_hops)

        self._dispatch(EventName.READYSTATECHANGE)
        self._dispatch(EventName.LOADSTART)
        if not self._send_flag or self._settled is not settled:
            # A handler aborted or reopened the request.
            return

        handle = self._transport.request(spec, self._listener)
        self._transfer = handle
        self._arm_timeout(handle)

    def _send_sync(self, spec: RequestSpec) -> None:
        transfer = _LocalTransfer()
        self._begin_transfer(transfer)
        settled = self._settled

        self._dispatch(EventName.LOADSTART)
        if self._transfer is not transfer:
            return
        self._set_state(ReadyState.LOADING)

        timeout_ms = self.timeout or self._config.sync.default_timeout_ms
        try:
            completed = self._sync_bridge.run(spec, timeout_ms=timeout_ms)
        except RequestTimeoutError as exc:
            if self._transfer is transfer:
                self._handle_error(exc, EventName.TIMEOUT)
            return
        except TransportError as exc:
            if self._transfer is transfer:
                self._handle_error(exc.__cause__ or exc)
            return

        if self._transfer is not transfer:
            return
        self._release_transfer()
        self._send_flag = False
        self._response_headers = list(completed.headers)
        self.status = completed.status
        self.status_text = completed.reason
        self.response_text = completed.text
        self.response_url = self._settings.url
        self._set_state(ReadyState.DONE)
        settled.set()

    def _send_file(self, settings: RequestSettings, target: SplitResult) -> None:
        if settings.method.upper() != "GET":
            raise MethodNotSupportedError("XMLHttpRequest: Only GET method is supported")

        path = unquote(target.path) or "/"
        transfer = _LocalTransfer()
        self._error_flag = False
        self._response_headers = None
        self._begin_transfer(transfer)

        self._dispatch(EventName.LOADSTART)
        if self._transfer is not transfer:
            return

        if settings.asynchronous:
            self._arm_timeout(transfer)
            self._file_reader.read_all_async(path, partial(self._on_file_read, transfer))
            return

        try:
            data = self._file_reader.read_all(path)
        except OSError as exc:
            self._on_file_read(transfer, exc, None)
        else:
            self._on_file_read(transfer, None, data)

    # ------------------------------------------------------------------
    # Transport callbacks
    # ------------------------------------------------------------------

    def _on_response(
        self,
        handle: TransportHandle,
        status: int,
        reason: str,
        headers: List[Tuple[str, str]],
    ) -> Optional[RequestSpec]:
        with self._lock:
            if handle is not self._transfer or not self._send_flag:
                return None
            settings = self._settings
            location = next((value for key, value in headers if key == "location"), None)

            if is_redirect(status, location) and self._redirects is not None:
                try:
                    url = self._redirects.record(settings.url, status, location)
                    follow = self._redirect_request(self._current_spec, status, url)
                except MaxRedirectsExceeded:
                    # Fatal; the transport worker routes it to on_fatal.
                    raise
                except (RedirectError, ValueError) as exc:
                    self._handle_error(exc)
                    return None
                settings.url = url
                self._current_spec = follow
                return follow

            if self._redirects is not None and self._redirects.hops:
                logger.info(
                    "Redirects followed",
                    extra={"trail": format_audit_trail(self._redirects.hops)},
                )
            self._response_headers = list(headers)
            self.status = status
            self.status_text = reason
            self.response_url = settings.url
            self._set_state(ReadyState.HEADERS_RECEIVED)
            return None

    def _on_data(self, handle: TransportHandle, text: str) -> None:
        with self._lock:
            if handle is not self._transfer:
                return
            if text:
                self.response_text += text
            if self._send_flag:
                self._set_state(ReadyState.LOADING)

    def _on_end(self, handle: TransportHandle) -> None:
        with self._lock:
            if handle is not self._transfer or not self._send_flag:
                return
            settled = self._settled
            self._release_transfer()
            self._send_flag = False
            self._set_state(ReadyState.DONE)
            settled.set()

    def _on_transport_error(self, handle: TransportHandle, error: BaseException) -> None:
        with self._lock:
            if handle is not self._transfer:
                return
            logger.debug("Transport error", extra={"error": _describe_error(error)})
            self._handle_error(error)

    def _on_fatal(self, handle: TransportHandle, error: BaseException) -> None:
        with self._lock:
            if handle is not self._transfer:
                return
            settled = self._settled
            self._release_transfer()
            self._send_flag = False
            self._fatal_error = error
            logger.error(
                "Request stopped",
                extra={
                    "url": self._settings.url if self._settings else None,
                    "error": _describe_error(error),
                },
            )
            settled.set()

    def _on_file_read(
        self,
        transfer: _LocalTransfer,
        error: Optional[BaseException],
        data: Optional[bytes],
    ) -> None:
        with self._lock:
            if transfer is not self._transfer:
                return
            text = ""
            if error is None and data is not None:
                try:
                    text = data.decode("utf-8")
                except UnicodeDecodeError as exc:
                    error = exc
            if error is not None:
                self._handle_error(error)
                return
            settled = self._settled
            self._release_transfer()
            self._send_flag = False
            self.status = 200
            self.status_text = "OK"
            self.response_text = text
            self._set_state(ReadyState.DONE)
            settled.set()

    # ------------------------------------------------------------------
    # Timeout & error path
    # ------------------------------------------------------------------

    def _arm_timeout(self, transfer: Union[TransportHandle, _LocalTransfer]) -> None:
        if self.timeout < 1:
            return
        timer = threading.Timer(
            self.timeout / 1000.0, self._on_timeout, args=(transfer, self.timeout)
        )
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _on_timeout(self, transfer: Union[TransportHandle, _LocalTransfer], timeout_ms: int) -> None:
        with self._lock:
            if transfer is not self._transfer or self.ready_state == ReadyState.DONE:
                return
            logger.info(
                "Request timed out",
                extra={"url": self._settings.url if self._settings else None, "timeout_ms": timeout_ms},
            )
            self._handle_error(RequestTimeoutError(timeout_ms), EventName.TIMEOUT)

    def _handle_error(self, error: BaseException, event: EventName = EventName.ERROR) -> None:
        settled = self._settled
        self._release_transfer()
        self._send_flag = False
        self.status = 0
        self.status_text = _describe_error(error)
        self.response_text = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        self._error_flag = True
        self._dispatch(event, error)
        self._set_state(ReadyState.DONE)
        settled.set()

    def _release_transfer(self) -> None:
        transfer, self._transfer = self._transfer, None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        if transfer is not None:
            transfer.abort()

    # ------------------------------------------------------------------
    # State & dispatch
    # ------------------------------------------------------------------

    def _set_state(self, state: ReadyState) -> None:
        if state != ReadyState.LOADING and self.ready_state == state:
            return
        self.ready_state = ReadyState(state)

        settings = self._settings
        if (
            (settings is not None and settings.asynchronous)
            or state < ReadyState.OPENED
            or state == ReadyState.DONE
        ):
            self._dispatch(EventName.READYSTATECHANGE)

        if state == ReadyState.DONE:
            if not self._error_flag:
                self._dispatch(EventName.LOAD)
            self._dispatch(EventName.LOADEND)

    def _dispatch(self, event: Union[str, EventName], detail: Any = None) -> None:
        self._events.dispatch(event, detail)

    def __repr__(self) -> str:
        url = self._settings.url if self._settings else None
        return f"<XMLHttpRequest {self.ready_state.name} status={self.status} url={url!r}>"
