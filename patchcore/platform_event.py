"""Platform events and their batching into queue messages."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from .envutil import get_int_env_or_default
from .message import KafkaMessage, Writer
from .timestamps import format_rfc3339_no_tz, parse_rfc3339_no_tz

BATCH_SIZE = get_int_env_or_default("MSG_BATCH_SIZE", 4000)


def _opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _opt_str_list(data: Mapping[str, Any], key: str) -> Optional[list[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must be a list of strings")
    return list(value)


@dataclass
class PlatformEvent:
    id: str = ""
    type: Optional[str] = None
    timestamp: Optional[datetime] = None
    account: Optional[str] = None
    account_id: int = 0
    org_id: Optional[str] = None
    b64_identity: Optional[str] = None
    url: Optional[str] = None
    system_ids: Optional[list[str]] = None
    request_ids: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlatformEvent":
        if not isinstance(data, Mapping):
            raise ValueError("platform event must be a JSON object")
        account_id = data.get("account_id") or 0
        if isinstance(account_id, bool) or not isinstance(account_id, int):
            raise ValueError("field 'account_id' must be an integer")
        timestamp = _opt_str(data, "timestamp")
        return cls(
            id=_opt_str(data, "id") or "",
            type=_opt_str(data, "type"),
            timestamp=None if timestamp is None else parse_rfc3339_no_tz(timestamp),
            account=_opt_str(data, "account"),
            account_id=account_id,
            org_id=_opt_str(data, "org_id"),
            b64_identity=_opt_str(data, "b64_identity"),
            url=_opt_str(data, "url"),
            system_ids=_opt_str_list(data, "system_ids"),
            request_ids=_opt_str_list(data, "request_ids"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "timestamp": None if self.timestamp is None else format_rfc3339_no_tz(self.timestamp),
            "account": self.account,
            "account_id": self.account_id,
        }
        if self.org_id is not None:
            result["org_id"] = self.org_id
        result["b64_identity"] = self.b64_identity
        result["url"] = self.url
        if self.system_ids:
            result["system_ids"] = list(self.system_ids)
        if self.request_ids:
            result["request_ids"] = list(self.request_ids)
        return result

    def to_message(self) -> KafkaMessage:
        data = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        return KafkaMessage(value=data.encode("utf-8"))


@dataclass(frozen=True)
class InventoryAID:
    inventory_id: str
    rh_account_id: int


@dataclass(frozen=True)
class AccountInfo:
    account_name: Optional[str] = None
    org_id: Optional[str] = None


@dataclass(frozen=True)
class EvalData:
    rh_account_id: int
    inventory_id: str
    request_id: str
    account_info: AccountInfo = field(default_factory=AccountInfo)


def _batch_size(batch_size: Optional[int]) -> int:
    size = BATCH_SIZE if batch_size is None else batch_size
    if size < 1:
        raise ValueError("batch size must be positive")
    return size


def _chunks(items: Sequence[str], size: int) -> Iterable[list[str]]:
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def _now() -> datetime:
    return datetime.now().astimezone()


def count_batches(grouped: Mapping[int, Sequence[str]], batch_size: Optional[int] = None) -> int:
    """Upper estimate of the number of events the grouped systems will make."""
    size = _batch_size(batch_size)
    return sum(len(items) // size + 1 for items in grouped.values())


def write_platform_events(writer: Writer, *args: PlatformEvent) -> None:
    """Serialize the events and write them in a single call."""
    writer.write_messages(*(event.to_message() for event in args))


def write_inventory_events(
    writer: Writer, aids: Iterable[InventoryAID], batch_size: Optional[int] = None
) -> list[PlatformEvent]:
    """Write one event per account and batch of its systems; returns the events."""
    size = _batch_size(batch_size)
    grouped: dict[int, list[str]] = {}
    for aid in aids:
        grouped.setdefault(aid.rh_account_id, []).append(aid.inventory_id)
    now = _now()
    events = [
        PlatformEvent(timestamp=now, account_id=account, system_ids=chunk)
        for account, ids in grouped.items()
        for chunk in _chunks(ids, size)
    ]
    write_platform_events(writer, *events)
    return events


def write_eval_events(
    writer: Writer, data: Iterable[EvalData], batch_size: Optional[int] = None
) -> list[PlatformEvent]:
    """Write evaluation events batched per account with their request ids."""
    size = _batch_size(batch_size)
    systems: dict[int, list[str]] = {}
    requests: dict[int, list[str]] = {}
    accounts: dict[int, AccountInfo] = {}
    for item in data:
        systems.setdefault(item.rh_account_id, []).append(item.inventory_id)
        requests.setdefault(item.rh_account_id, []).append(item.request_id)
        accounts.setdefault(item.rh_account_id, item.account_info)
    now = _now()
    events = [
        PlatformEvent(
            timestamp=now,
            account_id=account,
            system_ids=system_chunk,
            account=info.account_name,
            org_id=info.org_id,
            request_ids=request_chunk,
        )
        for account, info in accounts.items()
        for system_chunk, request_chunk in zip(
            _chunks(systems[account], size), _chunks(requests[account], size)
        )
    ]
    write_platform_events(writer, *events)
    return events