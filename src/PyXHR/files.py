"""Local file reads backing ``file:`` URLs."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

__all__ = ["FileReader", "ReadCallback"]

PathLike = Union[str, Path]
ReadCallback = Callable[[Optional[BaseException], Optional[bytes]], None]


class FileReader:
    """Reads whole files, blocking or on a background thread."""

    def read_all(self, path: PathLike) -> bytes:
        """Return the contents of ``path``.

        Raises:
            OSError: When the file cannot be read.
        """
        return Path(path).read_bytes()

    def read_all_async(self, path: PathLike, callback: ReadCallback) -> threading.Thread:
        """Read ``path`` on a daemon thread and report ``(error, data)`` to ``callback``.

        Exactly one of ``error`` and ``data`` is ``None``.
        """

        def _worker() -> None:
            try:
                data = self.read_all(path)
            except OSError as exc:
                logger.debug("File read failed", extra={"path": str(path), "error": repr(exc)})
                callback(exc, None)
                return
            callback(None, data)

        thread = threading.Thread(target=_worker, name="pyxhr-file-read", daemon=True)
        thread.start()
        return thread
