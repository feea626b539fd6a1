# === NAVMAP v1 ===
# {
#   "module": "PyXHR.headers",
#   "purpose": "Case-insensitive request header table and the forbidden header/method policy.",
#   "sections": [
#     {"id": "forbidden-request-headers", "name": "FORBIDDEN_REQUEST_HEADERS", "anchor": "const-forbidden-request-headers", "kind": "constant"},
#     {"id": "headertable", "name": "HeaderTable", "anchor": "class-headertable", "kind": "class"},
#     {"id": "is-allowed-header", "name": "is_allowed_header", "anchor": "function-is-allowed-header", "kind": "function"},
#     {"id": "is-allowed-method", "name": "is_allowed_method", "anchor": "function-is-allowed-method", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Request header storage with cumulative values and first-casing-wins names.

The table keeps two mappings: canonical name -> value, and lower-cased name
-> canonical name. The casing used by the first :meth:`HeaderTable.set` for a
given header is kept for every later read and write, and setting a header
that already exists appends ``", <value>"``.

Example:
    >>> table = HeaderTable()
    >>> table.set("X-Foo", "a")
    >>> table.set("x-foo", "b")
    >>> table.get("X-FOO")
    'a, b'
    >>> table.as_dict()
    {'X-Foo': 'a, b'}
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

__all__ = [
    "DEFAULT_REQUEST_HEADERS",
    "FORBIDDEN_REQUEST_HEADERS",
    "FORBIDDEN_REQUEST_METHODS",
    "HeaderTable",
    "is_allowed_header",
    "is_allowed_method",
]

FORBIDDEN_REQUEST_HEADERS = frozenset(
    {
        "accept-charset",
        "accept-encoding",
        "access-control-request-headers",
        "access-control-request-method",
        "connection",
        "content-length",
        "content-transfer-encoding",
        "cookie",
        "cookie2",
        "date",
        "expect",
        "host",
        "keep-alive",
        "origin",
        "referer",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
        "via",
    }
)

FORBIDDEN_REQUEST_METHODS = frozenset({"TRACE", "TRACK", "CONNECT"})

# User-Agent is filled in from settings at send time.
DEFAULT_REQUEST_HEADERS: Tuple[Tuple[str, str], ...] = (("Accept", "*/*"),)


def is_allowed_header(name: str, *, disable_check: bool = False) -> bool:
    """Return ``True`` when ``name`` may be set by the caller."""
    if disable_check:
        return True
    return bool(name) and name.lower() not in FORBIDDEN_REQUEST_HEADERS


def is_allowed_method(method: str, *, disable_check: bool = False) -> bool:
    """Return ``True`` when ``method`` may be used with ``open()``."""
    if disable_check:
        return True
    return bool(method) and method.upper() not in FORBIDDEN_REQUEST_METHODS


class HeaderTable:
    """Case-insensitive header mapping with cumulative ``set`` semantics."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = {}
        self._names: Dict[str, str] = {}
        if initial:
            for name, value in initial.items():
                self.replace(name, value)

    def canonical_name(self, name: str) -> str:
        """Return the casing under which ``name`` is (or would be) stored."""
        return self._names.get(name.lower(), name)

    def set(self, name: str, value: str) -> None:
        """Set ``name``, appending to any existing value with ``", "``."""
        canonical = self.canonical_name(name)
        self._names[canonical.lower()] = canonical
        existing = self._values.get(canonical)
        self._values[canonical] = f"{existing}, {value}" if existing else value

    def replace(self, name: str, value: str) -> None:
        """Set ``name`` to exactly ``value``, keeping the established casing."""
        canonical = self.canonical_name(name)
        self._names[canonical.lower()] = canonical
        self._values[canonical] = value

    def get(self, name: str) -> Optional[str]:
        """Case-insensitive lookup; ``None`` when the header is absent."""
        canonical = self._names.get(name.lower())
        if canonical is None:
            return None
        return self._values.get(canonical)

    def remove(self, name: str) -> None:
        canonical = self._names.pop(name.lower(), None)
        if canonical is not None:
            self._values.pop(canonical, None)

    def merge_defaults(self, defaults: Mapping[str, str]) -> None:
        """Add each default header the caller has not set."""
        for name, value in defaults.items():
            if name.lower() not in self._names:
                self.replace(name, value)

    def clear(self) -> None:
        self._values.clear()
        self._names.clear()

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"
