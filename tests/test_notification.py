from datetime import datetime, timedelta

from patchcore.models import SystemPlatform
from patchcore.notification import (
    APPLICATION,
    BUNDLE,
    VERSION,
    Advisory,
    Event,
    Notification,
    NotificationContext,
    Recipient,
    make_notification,
)
from patchcore.platform_event import PlatformEvent
from patchcore.timestamps import parse_rfc3339

INVENTORY_ID = "00000000-0000-0000-0000-000000000001"


def _make():
    system = SystemPlatform(inventory_id=INVENTORY_ID, display_name="host-a")
    event = PlatformEvent(account="acc-1", org_id="org-1", url="http://localhost/hosts/1")
    payload = Advisory(advisory_id=7, advisory_name="RH-7", advisory_type="bugfix", synopsis="fix")
    return make_notification(system, event, "new-advisory", [Event(payload=payload)])


def test_make_notification_fields():
    notification = _make()
    assert notification.version == "v1.1.0"
    assert notification.bundle == "rhel"
    assert notification.application == "patch"
    assert notification.event_type == "new-advisory"
    assert notification.account_id == "acc-1"
    assert notification.org_id == "org-1"
    assert notification.context == NotificationContext(
        INVENTORY_ID, "host-a", "http://localhost/hosts/1"
    )


def test_timestamp_is_current():
    notification = _make()
    sent = parse_rfc3339(notification.timestamp)
    assert abs(datetime.now().astimezone() - sent) < timedelta(seconds=60)


def test_missing_event_fields_become_empty():
    notification = make_notification(SystemPlatform(), PlatformEvent(), "t", None)
    assert notification.account_id == ""
    assert notification.org_id == ""
    assert notification.context.host_url == ""
    assert notification.events == []
    data = notification.to_dict()
    assert "org_id" not in data
    assert "recipients" not in data


def test_to_dict_layout():
    data = _make().to_dict()
    assert data["version"] == VERSION
    assert data["bundle"] == BUNDLE
    assert data["application"] == APPLICATION
    assert data["context"]["inventory_id"] == INVENTORY_ID
    assert data["events"] == [
        {
            "metadata": {},
            "payload": {
                "advisory_id": 7,
                "advisory_name": "RH-7",
                "advisory_type": "bugfix",
                "synopsis": "fix",
            },
        }
    ]
    assert data["org_id"] == "org-1"


def test_event_without_payload_omits_it():
    assert Event().to_dict() == {"metadata": {}}


def test_recipients_written_when_present():
    notification = Notification(recipients=[Recipient(only_admins=True, users=["u1"])])
    data = notification.to_dict()
    assert data["recipients"] == [
        {"only_admins": True, "ignore_user_preferences": False, "users": ["u1"]}
    ]