# === NAVMAP v1 ===
# {
#   "module": "PyXHR.network.policy",
#   "purpose": "HTTP constants: schemes, default ports, redirect codes and connection limits.",
#   "sections": [
#     {"id": "schemes", "name": "Schemes & Ports", "anchor": "section-schemes", "kind": "section"},
#     {"id": "redirects", "name": "Redirects", "anchor": "section-redirects", "kind": "section"},
#     {"id": "connections", "name": "Connections", "anchor": "section-connections", "kind": "section"}
#   ]
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Keep-alive reuse is disabled: every request opens its own connection, so no
state is shared between request objects beyond the client configuration.
"""

# ============================================================================
# Schemes & Ports
# ============================================================================

HTTP_SCHEME = "http"

HTTPS_SCHEME = "https"

FILE_SCHEME = "file"

DEFAULT_HTTP_PORT = 80

DEFAULT_HTTPS_PORT = 443

LOCAL_HOST = "localhost"

# ============================================================================
# Redirects
# ============================================================================

REDIRECT_STATUSES = frozenset({301, 302, 303, 307})

# Status codes whose redirect switches the method to GET and drops the body.
SEE_OTHER_STATUSES = frozenset({303})

MAX_REDIRECT_HOPS = 10

# ============================================================================
# Connections
# ============================================================================

MAX_CONNECTIONS = 100

MAX_KEEPALIVE_CONNECTIONS = 0

DEFAULT_TEXT_CONTENT_TYPE = "text/plain;charset=UTF-8"

__all__ = [
    "HTTP_SCHEME",
    "HTTPS_SCHEME",
    "FILE_SCHEME",
    "DEFAULT_HTTP_PORT",
    "DEFAULT_HTTPS_PORT",
    "LOCAL_HOST",
    "REDIRECT_STATUSES",
    "SEE_OTHER_STATUSES",
    "MAX_REDIRECT_HOPS",
    "MAX_CONNECTIONS",
    "MAX_KEEPALIVE_CONNECTIONS",
    "DEFAULT_TEXT_CONTENT_TYPE",
]
