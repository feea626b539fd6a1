"""Cooperative cancellation for in-flight transfers.

A :class:`CancellationToken` is shared between the thread that owns a
request object and the worker thread performing the HTTP exchange. The
owner cancels; the worker checks :meth:`CancellationToken.is_cancelled`
between deliveries. Callbacks registered with
:meth:`CancellationToken.add_callback` run exactly once on cancellation and
are used to close a live response so that a blocked read returns promptly.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)

__all__ = ["CancellationToken"]


class CancellationToken:
    """Thread-safe, one-shot cancellation token.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel()
        True
        >>> token.cancel()
        False
    """

    def __init__(self) -> None:
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    def cancel(self) -> bool:
        """Request cancellation.

        Returns:
            ``True`` for the call that actually cancelled the token, ``False``
            when it was already cancelled.
        """
        with self._lock:
            if self._is_cancelled.is_set():
                return False
            self._is_cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.debug("Cancellation callback failed", exc_info=True)
        return True

    def is_cancelled(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""
        return self._is_cancelled.is_set()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        with self._lock:
            if not self._is_cancelled.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Forget ``callback`` if it has not run yet."""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                # Already ran or never registered.
                pass

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` seconds pass."""
        return self._is_cancelled.wait(timeout)
