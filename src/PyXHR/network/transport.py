# === NAVMAP v1 ===
# {
#   "module": "PyXHR.network.transport",
#   "purpose": "Transport adapter: one streamed HTTP exchange delivered as callbacks.",
#   "sections": [
#     {"id": "requestspec", "name": "RequestSpec", "anchor": "class-requestspec", "kind": "class"},
#     {"id": "completedresponse", "name": "CompletedResponse", "anchor": "class-completedresponse", "kind": "class"},
#     {"id": "transportlistener", "name": "TransportListener", "anchor": "class-transportlistener", "kind": "class"},
#     {"id": "transporthandle", "name": "TransportHandle", "anchor": "class-transporthandle", "kind": "class"},
#     {"id": "httptransport", "name": "HttpTransport", "anchor": "class-httptransport", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Transport adapter between request objects and httpx.

:meth:`HttpTransport.request` runs one streamed exchange on a daemon worker
thread and reports it to a :class:`TransportListener`:

- ``on_response(handle, status, reason, headers)`` once the status line and
  headers arrive. Returning a new :class:`RequestSpec` makes the worker close
  the current response and issue that request on the same handle, which is
  how redirects are followed without a new ``send()``.
- ``on_data(handle, text)`` per decoded body chunk.
- ``on_end(handle)`` when the body is complete.
- ``on_error(handle, exc)`` for transport failures (``httpx.HTTPError``,
  ``OSError``).
- ``on_fatal(handle, exc)`` when a listener callback raised a
  :class:`~PyXHR.errors.PyXHRError` (the redirect-loop error).

After :meth:`TransportHandle.abort` nothing more is delivered. Aborting
closes the live response so a worker blocked on a read wakes up.

:meth:`HttpTransport.fetch` is the blocking counterpart used by the
synchronous bridge; it returns the whole response at once.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

import httpx

from ..cancellation import CancellationToken
from ..errors import PyXHRError
from .client import get_http_client
from .policy import HTTP_SCHEME, HTTPS_SCHEME

logger = logging.getLogger(__name__)

__all__ = [
    "RequestSpec",
    "CompletedResponse",
    "TransportListener",
    "TransportHandle",
    "HttpTransport",
]

HeaderPairs = List[Tuple[str, str]]

_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)


@dataclass(frozen=True)
class RequestSpec:
    """Fully resolved description of one HTTP request."""

    method: str
    host: str
    port: int
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    secure: bool = False

    @property
    def scheme(self) -> str:
        return HTTPS_SCHEME if self.secure else HTTP_SCHEME

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"{self.scheme}://{host}:{self.port}{path}"


@dataclass(frozen=True)
class CompletedResponse:
    """A response read to completion."""

    status: int
    reason: str
    headers: HeaderPairs
    text: str
    url: str


class TransportListener(Protocol):
    """Receiver of exchange progress. Every method gets the originating handle."""

    def on_response(
        self, handle: "TransportHandle", status: int, reason: str, headers: HeaderPairs
    ) -> Optional[RequestSpec]: ...

    def on_data(self, handle: "TransportHandle", text: str) -> None: ...

    def on_end(self, handle: "TransportHandle") -> None: ...

    def on_error(self, handle: "TransportHandle", error: BaseException) -> None: ...

    def on_fatal(self, handle: "TransportHandle", error: BaseException) -> None: ...


class TransportHandle:
    """Owner's grip on one in-flight exchange."""

    def __init__(self, spec: RequestSpec) -> None:
        self.id = uuid.uuid4().hex[:12]
        self.spec = spec
        self.token = CancellationToken()
        self._thread: Optional[threading.Thread] = None

    @property
    def aborted(self) -> bool:
        return self.token.is_cancelled()

    def abort(self) -> None:
        """Stop the exchange; safe to call repeatedly and from any thread."""
        if self.token.cancel():
            logger.debug("Transfer aborted", extra={"transfer_id": self.id})

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker thread; ``True`` once it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __repr__(self) -> str:
        state = "aborted" if self.aborted else "active"
        return f"<TransportHandle {self.id} {self.spec.method} {self.spec.url} {state}>"


class HttpTransport:
    """Performs HTTP exchanges through an ``httpx.Client``.

    Args:
        client: Client to use. Defaults to the shared client from
            :func:`PyXHR.network.client.get_http_client`, looked up per
            exchange so that a client installed later is honoured.
    """

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        self._client = client

    @property
    def client(self) -> httpx.Client:
        return self._client if self._client is not None else get_http_client()

    # ------------------------------------------------------------------
    # Streaming exchange
    # ------------------------------------------------------------------

    def request(self, spec: RequestSpec, listener: TransportListener) -> TransportHandle:
        """Start ``spec`` on a worker thread and return its handle."""
        handle = TransportHandle(spec)
        thread = threading.Thread(
            target=self._run,
            args=(handle, listener),
            name=f"pyxhr-transfer-{handle.id}",
            daemon=True,
        )
        handle._thread = thread
        logger.debug(
            "Starting transfer",
            extra={"transfer_id": handle.id, "method": spec.method, "url": spec.url},
        )
        thread.start()
        return handle

    def _run(self, handle: TransportHandle, listener: TransportListener) -> None:
        current: Optional[RequestSpec] = handle.spec
        try:
            while current is not None and not handle.aborted:
                current = self._exchange(handle, current, listener)
        except _TRANSPORT_ERRORS as exc:
            if handle.aborted:
                logger.debug(
                    "Transfer ended after abort",
                    extra={"transfer_id": handle.id, "error": repr(exc)},
                )
                return
            logger.debug(
                "Transfer failed",
                extra={"transfer_id": handle.id, "error": repr(exc)},
            )
            listener.on_error(handle, exc)
        except PyXHRError as exc:
            listener.on_fatal(handle, exc)
        except Exception as exc:
            if handle.aborted:
                return
            logger.warning(
                "Transfer raised unexpectedly",
                extra={"transfer_id": handle.id, "error": repr(exc)},
            )
            listener.on_error(handle, exc)

    def _exchange(
        self, handle: TransportHandle, spec: RequestSpec, listener: TransportListener
    ) -> Optional[RequestSpec]:
        with self.client.stream(
            spec.method, spec.url, headers=spec.headers, content=spec.body
        ) as response:
            handle.token.add_callback(response.close)
            try:
                if handle.aborted:
                    return None
                follow = listener.on_response(
                    handle,
                    response.status_code,
                    response.reason_phrase,
                    response.headers.multi_items(),
                )
                if follow is not None:
                    return follow
                for chunk in response.iter_text():
                    if handle.aborted:
                        return None
                    listener.on_data(handle, chunk)
            finally:
                handle.token.remove_callback(response.close)
        if not handle.aborted:
            listener.on_end(handle)
        return None

    # ------------------------------------------------------------------
    # Blocking exchange
    # ------------------------------------------------------------------

    def fetch(
        self,
        spec: RequestSpec,
        *,
        token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> CompletedResponse:
        """Perform ``spec`` and read the whole body.

        Args:
            spec: Request to perform.
            token: Cancelling it closes the live response.
            timeout: Per-phase httpx timeout in seconds; client default when ``None``.

        Raises:
            httpx.HTTPError: For transport failures.
        """
        kwargs = {} if timeout is None else {"timeout": timeout}
        with self.client.stream(
            spec.method, spec.url, headers=spec.headers, content=spec.body, **kwargs
        ) as response:
            if token is not None:
                token.add_callback(response.close)
            try:
                text = "".join(response.iter_text())
            finally:
                if token is not None:
                    token.remove_callback(response.close)
            return CompletedResponse(
                status=response.status_code,
                reason=response.reason_phrase,
                headers=response.headers.multi_items(),
                text=text,
                url=str(response.url),
            )
