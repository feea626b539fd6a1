# === NAVMAP v1 ===
# {
#   "module": "PyXHR.cli",
#   "purpose": "Typer CLI: perform one request through XMLHttpRequest and print the response.",
#   "sections": [
#     {"id": "parse-header", "name": "_parse_header", "anchor": "function-parse-header", "kind": "function"},
#     {"id": "fetch", "name": "fetch", "anchor": "function-fetch", "kind": "function"},
#     {"id": "version-cmd", "name": "version_cmd", "anchor": "function-version-cmd", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Command line entry point for PyXHR.

Runs a single request through :class:`~PyXHR.request.XMLHttpRequest`, the same
way library callers do, and prints the response body (optionally preceded by
the status line and headers).

Exit codes:
    0: the request fired ``load``.
    1: the request failed (``error``, ``timeout``, or a redirect loop).
    2: the request was rejected before it started (bad method, scheme,
       header syntax, or state).

Example:
    $ pyxhr fetch https://example.org/ -i
    $ pyxhr fetch http://localhost:8080/items -X POST -d '{"a": 1}' -H "Content-Type: application/json"
"""

from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape

from PyXHR import __version__
from PyXHR.errors import PyXHRError
from PyXHR.events import XHREvent
from PyXHR.logging_utils import setup_logging
from PyXHR.network.redirect import MaxRedirectsExceeded
from PyXHR.request import XMLHttpRequest
from PyXHR.settings import get_settings

EXIT_FAILED = 1
EXIT_USAGE = 2

_console = Console(soft_wrap=True)
_err_console = Console(stderr=True, soft_wrap=True)

app = typer.Typer(
    name="pyxhr",
    help="PyXHR CLI - perform HTTP requests through an XMLHttpRequest object",
    no_args_is_help=True,
)


def _parse_header(raw: str) -> Tuple[str, str]:
    """Split ``"Name: value"`` into its parts."""
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise typer.BadParameter(f"expected 'Name: value', got {raw!r}", param_hint="--header")
    return name.strip(), value.strip()


def _log_level(verbosity: int) -> str:
    if verbosity >= 2:
        return "DEBUG"
    if verbosity == 1:
        return "INFO"
    return get_settings().logging.level


@app.command("fetch")
def fetch(
    url: str = typer.Argument(..., help="URL to request (http, https or file)"),
    method: str = typer.Option("GET", "--method", "-X", help="Request method"),
    headers: Optional[List[str]] = typer.Option(
        None,
        "--header",
        "-H",
        help="Request header as 'Name: value' (repeatable)",
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Request body"),
    user: Optional[str] = typer.Option(None, "--user", help="Basic auth user name"),
    password: Optional[str] = typer.Option(None, "--password", help="Basic auth password"),
    timeout: int = typer.Option(0, "--timeout", min=0, help="Timeout in milliseconds (0 = none)"),
    sync: bool = typer.Option(False, "--sync", help="Use a synchronous request"),
    include: bool = typer.Option(False, "--include", "-i", help="Print status line and headers"),
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON-formatted logs"),
) -> None:
    """Fetch URL and print the response body."""
    settings = get_settings()
    setup_logging(
        level=_log_level(verbosity),
        emit_json=json_logs or settings.logging.emit_json_logs,
    )
    parsed_headers = [_parse_header(raw) for raw in headers or ()]

    outcome: List[XHREvent] = []
    xhr = XMLHttpRequest(settings=settings)
    try:
        xhr.open(method, url, not sync, user, password)
        # Registered after open(), which dispatches abort for the reset.
        for event in ("load", "error", "timeout"):
            xhr.add_event_listener(event, outcome.append)
        xhr.timeout = timeout
        for name, value in parsed_headers:
            xhr.set_request_header(name, value)
        xhr.send(data)
        xhr.wait()
    except MaxRedirectsExceeded as exc:
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_FAILED)
    except PyXHRError as exc:
        _err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_USAGE)

    last = outcome[-1] if outcome else None
    if last is None or last.type.value != "load":
        reason = xhr.status_text or "request did not complete"
        _err_console.print(f"[red]Request failed:[/red] {escape(reason)}", highlight=False)
        raise typer.Exit(code=EXIT_FAILED)

    if include:
        _console.print(f"{xhr.status} {xhr.status_text}".rstrip(), markup=False, highlight=False)
        all_headers = xhr.get_all_response_headers()
        if all_headers:
            for line in all_headers.split("\r\n"):
                _console.print(line, markup=False, highlight=False)
        _console.print("")
    _console.print(xhr.response_text, markup=False, highlight=False, end="")


@app.command("version")
def version_cmd() -> None:
    """Show the PyXHR version."""
    _console.print(f"pyxhr {__version__}", markup=False, highlight=False)


if __name__ == "__main__":  # pragma: no cover
    app()
