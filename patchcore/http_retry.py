"""Retrying of HTTP calls on errors and selected status codes."""

from __future__ import annotations

import time
from typing import Any, Callable, Iterator, Optional, Tuple

from .logs import log

HttpCall = Callable[[], Tuple[Any, Any]]


class HttpRetryError(Exception):
    """An HTTP call failed for good; ``response`` is the last response seen, if any."""

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


def try_get_status_code(response: Any) -> int:
    """Status code of ``response``, or 0 when there is no response."""
    if response is None:
        return 0
    return response.status_code


def _response_details(response: Any) -> str:
    if response is None:
        return ""
    return f", status code: {response.status_code}"


def _delays(exponential: bool, max_retries: int, interval: float) -> Iterator[float]:
    """Waits before each retry; ``max_retries`` 0 yields forever."""
    delay = interval
    retries = 0
    while not max_retries or retries < max_retries:
        yield delay
        retries += 1
        if exponential:
            delay *= 2


def http_call_retry(
    call: HttpCall,
    exponential_retry: bool,
    max_retries: int,
    *args: int,
    interval: float = 1.0,
) -> Any:
    """Call ``call`` until it succeeds and return its data.

    ``call`` returns ``(data, response)`` or raises; an exception may carry the
    response in its ``response`` attribute. A response whose status code is one
    of ``args`` is always retried. Errors are retried when no status codes are
    given, otherwise they end the retrying at once. ``max_retries`` 0 retries
    without limit.
    """
    codes = set(args)
    delays = _delays(exponential_retry, max_retries, interval)
    attempt = 0
    while True:
        attempt += 1
        error: Optional[Exception] = None
        try:
            data, response = call()
        except Exception as exc:  # any failure of the call is a failed attempt
            data, response, error = None, getattr(exc, "response", None), exc

        if response is not None and try_get_status_code(response) in codes:
            log("attempt", attempt, "status_code", try_get_status_code(response)).warning(
                "HTTP call ended with wrong status code"
            )
        elif error is None:
            return data
        elif not codes:
            log("attempt", attempt, "err", str(error)).warning("HTTP call failed, trying again")
        else:
            raise HttpRetryError(
                f"HTTP call failed{_response_details(response)}: {error}", response
            ) from error

        delay = next(delays, None)
        if delay is None:
            break
        if delay > 0:
            time.sleep(delay)
    raise HttpRetryError(f"HTTP retry call failed, attempts: {attempt}")