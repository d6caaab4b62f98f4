"""Decoding of the base64 encoded identity header."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"identity field {key!r} must be a string")
    return value


def _obj(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"identity field {key!r} must be an object")
    return dict(value)


@dataclass
class Identity:
    account_number: Optional[str] = None
    org_id: str = ""
    type: str = ""
    auth_type: str = ""
    internal: dict[str, Any] = field(default_factory=dict)
    user: dict[str, Any] = field(default_factory=dict)
    system: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Identity":
        if not isinstance(data, Mapping):
            raise ValueError("identity must be a JSON object")
        return cls(
            account_number=_opt_str(data, "account_number"),
            org_id=_opt_str(data, "org_id") or "",
            type=_opt_str(data, "type") or "",
            auth_type=_opt_str(data, "auth_type") or "",
            internal=_obj(data, "internal"),
            user=_obj(data, "user"),
            system=_obj(data, "system"),
            raw=dict(data),
        )

    def get_account_number(self) -> Optional[str]:
        """Account number, or None when the identity carries none."""
        return self.account_number


def parse_identity(identity_string: str) -> Identity:
    """Decode a base64 encoded ``{"identity": {...}}`` document."""
    try:
        decoded = base64.b64decode(identity_string, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"identity is not valid base64: {exc}") from exc
    document = json.loads(decoded)
    if not isinstance(document, Mapping):
        raise ValueError("identity header must hold a JSON object")
    identity = document.get("identity")
    if identity is None:
        return Identity()
    return Identity.from_dict(identity)