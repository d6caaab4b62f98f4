"""JSON API client with default headers and optional request dumps."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from .logs import log


class ApiError(Exception):
    """An API call failed; ``response`` is set when a response arrived."""

    def __init__(self, message: str, response: Optional[requests.Response] = None) -> None:
        super().__init__(message)
        self.response = response


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


def _dump_request(request: requests.PreparedRequest) -> str:
    lines = [f"{request.method} {request.url}"]
    lines += [f"{key}: {value}" for key, value in request.headers.items()]
    body = request.body or b""
    if isinstance(body, bytes):
        body = body.decode("utf-8", "replace")
    return "\n" + "\n".join(lines) + "\n\n" + body + "\n"


def _dump_response(response: requests.Response) -> str:
    lines = [f"{response.status_code} {response.reason}"]
    lines += [f"{key}: {value}" for key, value in response.headers.items()]
    return "\n" + "\n".join(lines) + "\n\n" + response.text + "\n"


@dataclass
class ApiClient:
    session: requests.Session = field(default_factory=requests.Session)
    debug: bool = False
    default_headers: dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None

    def request(
        self, method: str, url: str, request_body: Any = None
    ) -> tuple[Any, requests.Response]:
        """Send ``request_body`` as JSON; returns the decoded JSON answer and the response."""
        body = b""
        if request_body is not None:
            try:
                body = (json.dumps(_to_json(request_body)) + "\n").encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise ApiError(f"Request json encoding failed: {exc}") from exc

        headers = {"Content-Type": "application/json", **self.default_headers}
        prepared = self.session.prepare_request(
            requests.Request(method, url, data=body, headers=headers)
        )
        if self.debug:
            log("dump", _dump_request(prepared)).debug("http call")
        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"Request making failed: {exc}") from exc
        if self.debug:
            log("dump", _dump_response(response)).debug("http response")

        try:
            data = json.loads(response.content)
        except ValueError as exc:
            raise ApiError(f"Response json parsing failed: {exc}", response) from exc
        return data, response