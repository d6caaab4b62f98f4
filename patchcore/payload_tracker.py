"""Status events sent to the payload tracker."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from .envutil import get_bool_env_or_default
from .message import KafkaMessage, Writer
from .timestamps import format_rfc3339

ENABLE_PAYLOAD_TRACKER = get_bool_env_or_default("ENABLE_PAYLOAD_TRACKER", True)
SERVICE = "patchman"


@dataclass
class PayloadTrackerEvent:
    service: str = ""
    account: Optional[str] = None
    org_id: Optional[str] = None
    request_id: Optional[str] = None
    inventory_id: str = ""
    status: str = ""
    status_msg: str = ""
    date: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"service": self.service}
        if self.account is not None:
            result["account"] = self.account
        if self.org_id is not None:
            result["org_id"] = self.org_id
        result["request_id"] = self.request_id
        result["inventory_id"] = self.inventory_id
        result["status"] = self.status
        if self.status_msg:
            result["status_msg"] = self.status_msg
        result["date"] = None if self.date is None else format_rfc3339(self.date)
        return result


def _to_message(event: PayloadTrackerEvent) -> KafkaMessage:
    data = json.dumps(event.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return KafkaMessage(value=data.encode("utf-8"))


def write_payload_tracker_events(
    writer: Writer,
    events: Union[PayloadTrackerEvent, Iterable[PayloadTrackerEvent]],
    enabled: Optional[bool] = None,
) -> int:
    """Write the events that carry a request id and an account or org; returns how many."""
    if enabled is None:
        enabled = ENABLE_PAYLOAD_TRACKER
    if not enabled:
        return 0
    if isinstance(events, PayloadTrackerEvent):
        events = [events]
    now = datetime.now().astimezone()
    written = 0
    for event in events:
        # Only events from the listener and the upload evaluator are tracked.
        if event.request_id is None or (event.account is None and event.org_id is None):
            continue
        writer.write_messages(_to_message(replace(event, service=SERVICE, date=now)))
        written += 1
    return written