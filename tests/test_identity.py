import base64
import json

import pytest

from patchcore.identity import Identity, parse_identity

DOCUMENT = {
    "entitlements": {"insights": {"is_entitled": True}},
    "identity": {
        "internal": {"auth_time": 299, "auth_type": "basic-auth", "org_id": "0000002"},
        "account_number": "0000001",
        "org_id": "0000002",
        "user": {
            "first_name": "Test",
            "last_name": "User",
            "username": "test-user",
            "email": "user@example.com",
        },
        "type": "User",
    },
}


def encode(document):
    return base64.b64encode(json.dumps(document).encode()).decode()


def test_parse_identity():
    identity = parse_identity(encode(DOCUMENT))
    assert identity.account_number == "0000001"
    assert identity.get_account_number() == "0000001"
    assert identity.org_id == "0000002"
    assert identity.type == "User"
    assert identity.user["email"] == "user@example.com"
    assert identity.internal["auth_type"] == "basic-auth"


def test_missing_account_number():
    identity = parse_identity(encode({"identity": {"org_id": "0000002", "type": "User"}}))
    assert identity.get_account_number() is None
    assert identity.org_id == "0000002"


def test_missing_identity_gives_empty():
    assert parse_identity(encode({})) == Identity()


def test_invalid_base64():
    with pytest.raises(ValueError):
        parse_identity("not base64!!")


def test_invalid_json():
    with pytest.raises(ValueError):
        parse_identity(base64.b64encode(b"{not json").decode())


def test_wrong_field_type():
    with pytest.raises(ValueError):
        parse_identity(encode({"identity": {"account_number": 5}}))