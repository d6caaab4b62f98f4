"""Environment variable access and small formatting helpers."""

from __future__ import annotations

import math
import os
import re
from datetime import datetime, timedelta

from dotenv import load_dotenv

from .logs import log

_UUID_RE = re.compile(
    "[a-fA-F0-9]{8}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{4}-[a-fA-F0-9]{12}"
)
_INT_RE = re.compile(r"[+-]?[0-9]+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_SUFFIXES = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB")


def getenv(key: str, default: str) -> str:
    """Return the variable's value if it is set (even empty), else ``default``."""
    return os.environ.get(key, default)


def getenv_or_fail(name: str) -> str:
    value = os.environ.get(name, "")
    if value == "":
        raise ValueError(f"Set {name} env variable!")
    return value


def fail_if_empty(value: str, var_name: str) -> str:
    if value == "":
        raise ValueError(f"{var_name} must be set!")
    return value


def parse_bool(value: str) -> bool:
    """Parse the boolean spellings accepted by the configuration."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def get_bool_env_or_fail(name: str) -> bool:
    return parse_bool(getenv_or_fail(name))


def get_bool_env_or_default(name: str, default: bool) -> bool:
    value = os.environ.get(name, "")
    if value == "":
        return default
    return parse_bool(value)


def _parse_int_env(name: str, value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"Unable convert '{name}' env var '{value}' to int!")
    return int(value)


def get_int_env_or_fail(name: str) -> int:
    return _parse_int_env(name, getenv_or_fail(name))


def get_int_env_or_default(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    if value == "":
        return default
    return _parse_int_env(name, value)


def set_default_env_or_fail(name: str, value: str) -> str:
    """Set the variable unless it already holds a non-empty value; return the value in force."""
    current = os.environ.get(name, "")
    if current != "":
        return current
    os.environ[name] = value
    return value


def load_env_files(*args: str) -> list[str]:
    """Load dotenv files relative to ``TEST_WD``, overriding existing variables."""
    base_dir = getenv("TEST_WD", ".")
    paths = [os.path.join(base_dir, name) for name in args]
    log("files", paths).debug("Loading new env file")
    for path in paths:
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Could not load env file: {path}")
        load_dotenv(path, override=True)
    return paths


def _to_ns(delta: timedelta) -> int:
    return (delta // timedelta(microseconds=1)) * 1000


def _round_ns(d: int, m: int) -> int:
    if m <= 0:
        return d
    if d < 0:
        r = (-d) % m
        return d + r if r + r < m else d - m + r
    r = d % m
    return d - r if r + r < m else d + m - r


def _frac(value: int, width: int) -> str:
    digits = f"{value:0{width}d}".rstrip("0")
    return "." + digits if digits else ""


def _format_duration(ns: int) -> str:
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    u = abs(ns)
    if u < 1_000_000_000:
        if u < 1000:
            return f"{sign}{u}ns"
        if u < 1_000_000:
            whole, rest = divmod(u, 1000)
            return f"{sign}{whole}{_frac(rest, 3)}µs"
        whole, rest = divmod(u, 1_000_000)
        return f"{sign}{whole}{_frac(rest, 6)}ms"
    secs, rest = divmod(u, 1_000_000_000)
    out = f"{secs % 60}{_frac(rest, 9)}s"
    minutes = secs // 60
    if minutes:
        out = f"{minutes % 60}m{out}"
        hours = minutes // 60
        if hours:
            out = f"{hours}h{out}"
    return sign + out


def since_str(start: datetime, precision: timedelta = timedelta(seconds=1)) -> str:
    """Elapsed time since ``start`` rounded to ``precision``, e.g. "1h2m3s"."""
    elapsed = datetime.now(start.tzinfo) - start
    return _format_duration(_round_ns(_to_ns(elapsed), _to_ns(precision)))


def size_str(size: int) -> str:
    """Human readable memory size with binary suffixes."""
    if size < 0:
        raise ValueError("size must not be negative")
    order = int(math.log2(size) / 10) if size > 0 else 0
    return "%.4g%s" % (size / (1 << (order * 10)), _SUFFIXES[order])


def is_valid_uuid(uuid: str) -> bool:
    return _UUID_RE.fullmatch(uuid) is not None