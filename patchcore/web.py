"""Query parameter parsing and a stoppable WSGI server."""

from __future__ import annotations

import re
import threading
from typing import Any, Callable, Mapping
from wsgiref.simple_server import WSGIRequestHandler, make_server

from .logs import log

_INT_RE = re.compile(r"[+-]?[0-9]+")


class ParamError(ValueError):
    """A request parameter has a value that cannot be used."""


def load_param_int(params: Mapping[str, str], name: str, default: int) -> int:
    """Integer value of parameter ``name``; ``default`` when it is missing or empty."""
    value = params.get(name, "")
    if value == "" or value is None:
        return default
    if not _INT_RE.fullmatch(value):
        raise ParamError(f"invalid integer {value!r} for parameter {name!r}")
    return int(value)


def load_limit_offset(params: Mapping[str, str], default_limit: int) -> tuple[int, int]:
    """``(limit, offset)`` from the parameters; limit -1 means all items."""
    offset = load_param_int(params, "offset", 0)
    if offset < 0:
        raise ParamError("offset must not be negative")
    limit = load_param_int(params, "limit", default_limit)
    if limit < 1 and limit != -1:
        raise ParamError("limit must not be less than 1, or should be -1 to return all items")
    return limit, offset


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        log("client", self.address_string()).debug(format % args)


def run_server(stop_event: threading.Event, app: Callable, port: int) -> None:
    """Serve the WSGI ``app`` on ``port`` until ``stop_event`` is set."""
    try:
        server = make_server("", port, app, handler_class=_QuietHandler)
    except OSError as exc:
        raise OSError(exc.errno, f"server listening failed: {exc.strerror}") from exc

    def watch() -> None:
        stop_event.wait()
        server.shutdown()
        log().info("server closed successfully")

    watcher = threading.Thread(target=watch, name=f"server-stop-{port}", daemon=True)
    watcher.start()
    try:
        server.serve_forever()
    finally:
        server.server_close()
    watcher.join()