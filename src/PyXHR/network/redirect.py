# === NAVMAP v1 ===
# {
#   "module": "PyXHR.network.redirect",
#   "purpose": "Redirect detection, target resolution, hop accounting and audit formatting.",
#   "sections": [
#     {"id": "redirecterror", "name": "RedirectError", "anchor": "class-redirecterror", "kind": "class"},
#     {"id": "maxredirectsexceeded", "name": "MaxRedirectsExceeded", "anchor": "class-maxredirectsexceeded", "kind": "class"},
#     {"id": "redirecthop", "name": "RedirectHop", "anchor": "class-redirecthop", "kind": "class"},
#     {"id": "redirecttracker", "name": "RedirectTracker", "anchor": "class-redirecttracker", "kind": "class"},
#     {"id": "is-redirect", "name": "is_redirect", "anchor": "function-is-redirect", "kind": "function"},
#     {"id": "resolve-redirect", "name": "resolve_redirect", "anchor": "function-resolve-redirect", "kind": "function"},
#     {"id": "format-audit-trail", "name": "format_audit_trail", "anchor": "function-format-audit-trail", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Redirect handling for the asynchronous HTTP path.

The httpx client is built with ``follow_redirects=False``; the request
object follows 301/302/303/307 responses itself so that it can rewrite its
URL, recompute the ``Host`` header and keep redirects invisible to event
listeners. This module holds the rules it applies at each hop:

- **Detection**: a redirect status *and* a ``Location`` header.
- **Resolution**: relative locations are joined onto the current URL.
- **Method**: 303 switches to GET; every other code keeps the method.
- **Max hops**: the hop after the limit raises :class:`MaxRedirectsExceeded`.
- **Audit trail**: every hop is recorded as a :class:`RedirectHop`.

Example:
    >>> tracker = RedirectTracker(max_hops=2)
    >>> tracker.record("http://a/", 301, "/b")
    'http://a/b'
    >>> format_audit_trail(tracker.hops)
    'http://a/ (301) → http://a/b'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx

from ..errors import PyXHRError
from .policy import MAX_REDIRECT_HOPS, REDIRECT_STATUSES, SEE_OTHER_STATUSES

logger = logging.getLogger(__name__)

__all__ = [
    "RedirectError",
    "MaxRedirectsExceeded",
    "RedirectHop",
    "RedirectTracker",
    "is_redirect",
    "redirect_method",
    "resolve_redirect",
    "format_audit_trail",
]


# ============================================================================
# Exceptions
# ============================================================================


class RedirectError(PyXHRError):
    """Base exception for redirect handling errors."""


class MaxRedirectsExceeded(RedirectError):
    """Redirect chain exceeds maximum allowed hops."""

    def __init__(self, max_hops: int, hops: Sequence["RedirectHop"]):
        self.max_hops = max_hops
        self.hops = list(hops)
        super().__init__(
            f"Request failed - too many redirects (limit {max_hops}). "
            f"Hops: {format_audit_trail(self.hops)}"
        )


# ============================================================================
# Rules
# ============================================================================


@dataclass(frozen=True)
class RedirectHop:
    """One followed redirect: where it came from, its status, and its target."""

    source: str
    status: int
    target: str


def is_redirect(status: int, location: Optional[str]) -> bool:
    """Return ``True`` when a response must be followed as a redirect."""
    return status in REDIRECT_STATUSES and bool(location)


def redirect_method(status: int, method: str) -> str:
    """Return the method used for the next hop."""
    return "GET" if status in SEE_OTHER_STATUSES else method


def resolve_redirect(current_url: str, location: str) -> str:
    """Resolve ``location`` against ``current_url`` (RFC 7231 §7.1.2)."""
    try:
        return str(httpx.URL(current_url).join(location))
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise RedirectError(f"Invalid redirect location {location!r}: {exc}") from exc


class RedirectTracker:
    """Counts hops for one ``send()`` and raises once the limit is passed."""

    def __init__(self, max_hops: int = MAX_REDIRECT_HOPS) -> None:
        self.max_hops = max_hops
        self.hops: List[RedirectHop] = []

    @property
    def count(self) -> int:
        return len(self.hops)

    def record(self, current_url: str, status: int, location: str) -> str:
        """Record one hop and return the resolved target URL.

        Raises:
            MaxRedirectsExceeded: When this hop would exceed ``max_hops``.
            RedirectError: When ``location`` cannot be resolved.
        """
        target = resolve_redirect(current_url, location)
        hop = RedirectHop(source=current_url, status=status, target=target)
        if len(self.hops) >= self.max_hops:
            raise MaxRedirectsExceeded(self.max_hops, [*self.hops, hop])
        self.hops.append(hop)
        logger.debug(
            "Following redirect",
            extra={"from": current_url, "to": target, "status": status, "hop": len(self.hops)},
        )
        return target


def format_audit_trail(hops: Sequence[RedirectHop]) -> str:
    """Format hops like ``"http://a (301) → http://b (302) → http://c"``."""
    if not hops:
        return ""
    parts = [f"{hop.source} ({hop.status})" for hop in hops]
    parts.append(hops[-1].target)
    return " → ".join(parts)
