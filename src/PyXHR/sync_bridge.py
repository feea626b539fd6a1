# === NAVMAP v1 ===
# {
#   "module": "PyXHR.sync_bridge",
#   "purpose": "Blocking send: run one exchange on a dedicated worker and wait with a deadline.",
#   "sections": [
#     {"id": "syncbridge", "name": "SyncBridge", "anchor": "class-syncbridge", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Synchronous request bridge.

``open(method, url, False)`` asks for a ``send()`` that blocks the caller
until the response is complete. :class:`SyncBridge` performs the fully
resolved request on a single-worker ``ThreadPoolExecutor`` and waits on the
resulting ``Future`` for at most the configured timeout.

Every exit path (success, transport failure, timeout) cancels the worker's
token, which closes any live response, and shuts the executor down without
waiting. The completed response is handed back in memory; nothing is
written to disk.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Optional

import httpx

from .cancellation import CancellationToken
from .errors import RequestTimeoutError, TransportError
from .network.transport import CompletedResponse, HttpTransport, RequestSpec

logger = logging.getLogger(__name__)

__all__ = ["SyncBridge"]


def _default_invocation_id() -> str:
    return uuid.uuid4().hex[:12]


class SyncBridge:
    """Runs a request to completion on a worker thread, blocking the caller.

    Args:
        transport: Transport whose :meth:`~HttpTransport.fetch` performs the exchange.
        id_factory: Produces the unique id used to name each invocation's worker.
    """

    def __init__(
        self,
        transport: HttpTransport,
        *,
        id_factory: Callable[[], str] = _default_invocation_id,
    ) -> None:
        self._transport = transport
        self._id_factory = id_factory

    def run(self, spec: RequestSpec, *, timeout_ms: int = 0) -> CompletedResponse:
        """Perform ``spec`` and return the complete response.

        Args:
            spec: Request to perform.
            timeout_ms: Caller deadline in milliseconds; ``0`` waits indefinitely.

        Raises:
            RequestTimeoutError: The deadline passed first.
            TransportError: The exchange failed; the cause is chained.
        """
        invocation_id = self._id_factory()
        deadline: Optional[float] = timeout_ms / 1000.0 if timeout_ms > 0 else None
        token = CancellationToken()
        executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"pyxhr-sync-{invocation_id}"
        )
        logger.debug(
            "Synchronous request started",
            extra={"invocation_id": invocation_id, "method": spec.method, "url": spec.url},
        )
        try:
            future = executor.submit(self._transport.fetch, spec, token=token, timeout=deadline)
            try:
                return future.result(timeout=deadline)
            except FuturesTimeoutError:
                future.cancel()
                logger.info(
                    "Synchronous request timed out",
                    extra={"invocation_id": invocation_id, "timeout_ms": timeout_ms},
                )
                raise RequestTimeoutError(timeout_ms) from None
            except httpx.TimeoutException as exc:
                if deadline is None:
                    raise TransportError(f"{type(exc).__name__}: {exc}", url=spec.url) from exc
                raise RequestTimeoutError(timeout_ms) from exc
            except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
                raise TransportError(f"{type(exc).__name__}: {exc}", url=spec.url) from exc
            except Exception as exc:
                logger.warning(
                    "Synchronous request raised unexpectedly",
                    extra={"invocation_id": invocation_id, "error": repr(exc)},
                )
                raise TransportError(f"{type(exc).__name__}: {exc}", url=spec.url) from exc
        finally:
            token.cancel()
            executor.shutdown(wait=False, cancel_futures=True)
            logger.debug("Synchronous worker released", extra={"invocation_id": invocation_id})
