"""Structured logging on top of the standard logging module."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
import threading
import traceback
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Optional, Union

LOGGER_NAME = "patchcore"
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

logger = logging.getLogger(LOGGER_NAME)

_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}
_RESERVED = ("@timestamp", "levelname", "message", "time", "level", "msg")

_handler: Optional[logging.Handler] = None


class _StdoutHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stdout``."""

    @property
    def stream(self):
        return sys.stdout

    @stream.setter
    def stream(self, value):
        pass


def _fields(record: logging.LogRecord) -> dict:
    return getattr(record, "fields", {})


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f'time="{_timestamp(record)}"',
            f"level={record.levelname.lower()}",
            f"msg={json.dumps(record.getMessage())}",
        ]
        for key, value in _fields(record).items():
            text = str(value)
            parts.append(f"{key}={json.dumps(text) if ' ' in text or not text else text}")
        return " ".join(parts)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "@timestamp": _timestamp(record),
            "levelname": record.levelname.lower(),
            "message": record.getMessage(),
        }
        for key, value in _fields(record).items():
            payload["fields." + key if key in _RESERVED else key] = value
        return json.dumps(payload, default=str)


class _FieldsAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra["fields"] = dict(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def parse_log_level(level: str) -> int:
    """Map a level name (case-insensitive) to a logging level number."""
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"unable to parse log level: not a valid level: {level!r}") from None


def init_logging(level: Union[int, str]) -> None:
    """Send package logs to stdout at the given level."""
    global _handler
    if isinstance(level, str):
        level = parse_log_level(level)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = _StdoutHandler()
    _handler.setFormatter(_TextFormatter())
    logger.addHandler(_handler)
    logger.setLevel(level)
    logger.propagate = False


def configure_logging() -> None:
    """Configure logging from LOG_LEVEL (default INFO) and LOG_STYLE (json)."""
    init_logging(logging.DEBUG)
    logger.setLevel(parse_log_level(os.environ.get("LOG_LEVEL", "INFO")))
    if os.environ.get("LOG_STYLE") == "json" and _handler is not None:
        _handler.setFormatter(_JsonFormatter())


def log(*args: Any) -> logging.LoggerAdapter:
    """Return a logger carrying key/value fields: ``log("k", 1).info("msg")``."""
    if len(args) % 2:
        logger.warning(
            "Unable to accept odd (%d) arguments count in utils.DebugLog method.", len(args)
        )
        fields: dict[str, Any] = {}
    else:
        fields = {}
        for key, value in zip(args[::2], args[1::2]):
            if not isinstance(key, str):
                raise TypeError(f"log field name must be a string, got {key!r}")
            fields[key] = value
    return _FieldsAdapter(logger, fields)


@contextlib.contextmanager
def log_panics(exit_after_logging: bool) -> Iterator[None]:
    """Log an escaping exception with its stack; exit with status 1 if asked to."""
    try:
        yield
    except Exception as exc:
        stack = traceback.format_exc().replace("\n", "|")
        log("err", exc, "stack", stack).error("Panicked")
        for handler in logger.handlers:
            handler.flush()
        if exit_after_logging:
            raise SystemExit(1) from exc


class CapturingHandler(logging.Handler):
    """Handler that keeps records of the chosen levels (all when none given)."""

    def __init__(self, *levels: int) -> None:
        super().__init__()
        self.levels = frozenset(levels) or None
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        if self.levels is None or record.levelno in self.levels:
            self.records.append(record)


class ProgressTicker:
    """Logs the percentage of ``total`` reached, every ``interval`` seconds."""

    def __init__(self, msg: str, interval: Union[float, timedelta], total: int) -> None:
        if total <= 0:
            raise ValueError("total must be positive")
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()
        self.msg = msg
        self.interval = interval
        self.total = total
        self._count = 0
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._owner = threading.get_ident()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def add(self, n: int = 1) -> int:
        with self._lock:
            self._count += n
            return self._count

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            pct = self.count * 100 // self.total
            log("thread_id", self._owner, "progress %", pct).info(self.msg)

    def __enter__(self) -> "ProgressTicker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def log_progress(msg: str, interval: Union[float, timedelta], total: int) -> ProgressTicker:
    """Start a ticker reporting progress; call ``add`` as work is done and ``stop`` at the end."""
    return ProgressTicker(msg, interval, total)