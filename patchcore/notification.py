"""Notification messages announcing new advisories for a system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .models import SystemPlatform
from .platform_event import PlatformEvent
from .timestamps import format_rfc3339

VERSION = "v1.1.0"
BUNDLE = "rhel"
APPLICATION = "patch"


def _to_json(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    return value


@dataclass
class NotificationContext:
    """Information common to all events of one notification."""

    inventory_id: str = ""
    display_name: str = ""
    host_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "inventory_id": self.inventory_id,
            "display_name": self.display_name,
            "host_url": self.host_url,
        }


@dataclass
class Event:
    """One event; its metadata is always an empty object."""

    payload: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"metadata": {}}
        if self.payload is not None:
            result["payload"] = _to_json(self.payload)
        return result


@dataclass
class Recipient:
    only_admins: bool = False
    ignore_user_preferences: bool = False
    users: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "only_admins": self.only_admins,
            "ignore_user_preferences": self.ignore_user_preferences,
            "users": list(self.users),
        }


@dataclass
class Advisory:
    advisory_id: int = 0
    advisory_name: str = ""
    advisory_type: str = ""
    synopsis: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "advisory_id": self.advisory_id,
            "advisory_name": self.advisory_name,
            "advisory_type": self.advisory_type,
            "synopsis": self.synopsis,
        }


@dataclass
class Notification:
    version: str = VERSION
    bundle: str = BUNDLE
    application: str = APPLICATION
    event_type: str = ""
    # ISO-8601 time the message was sent.
    timestamp: str = ""
    account_id: str = ""
    context: NotificationContext = field(default_factory=NotificationContext)
    events: list[Event] = field(default_factory=list)
    recipients: list[Recipient] = field(default_factory=list)
    org_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "version": self.version,
            "bundle": self.bundle,
            "application": self.application,
            "event_type": self.event_type,
            "timestamp": self.timestamp,
            "account_id": self.account_id,
            "context": self.context.to_dict(),
            "events": [event.to_dict() for event in self.events],
        }
        if self.recipients:
            result["recipients"] = [recipient.to_dict() for recipient in self.recipients]
        if self.org_id:
            result["org_id"] = self.org_id
        return result


def make_notification(
    system: SystemPlatform,
    event: PlatformEvent,
    event_type: str,
    events: Optional[list[Event]],
) -> Notification:
    """Build a notification about ``system`` addressed to the event's account."""
    return Notification(
        event_type=event_type,
        timestamp=format_rfc3339(datetime.now().astimezone()),
        account_id=event.account or "",
        context=NotificationContext(
            inventory_id=system.inventory_id,
            display_name=system.display_name,
            host_url=event.url or "",
        ),
        events=list(events or []),
        org_id=event.org_id or "",
    )