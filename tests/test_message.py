import json

from patchcore import message
from patchcore.message import (
    KafkaMessage,
    NullCounter,
    message_from_json,
    set_kafka_error_read_counter,
    set_kafka_error_write_counter,
)


class _Counter:
    def __init__(self):
        self.value = 0

    def inc(self):
        self.value += 1


def test_message_from_json_round_trip():
    payload = {"id": "99c0ffee-0000-0000-0000-0000c0ffee99", "type": "delete"}
    msg = message_from_json("key", payload)
    assert msg.key == b"key"
    assert json.loads(msg.value) == payload


def test_message_from_json_is_compact():
    assert message_from_json("", {"a": [1, 2]}).value == b'{"a":[1,2]}'


def test_message_from_json_keeps_unicode():
    msg = message_from_json("k", "žluť")
    assert json.loads(msg.value.decode("utf-8")) == "žluť"


def test_messages_compare_by_value():
    assert KafkaMessage(b"k", b"v") == message_from_json("k", "v").__class__(b"k", b"v")


def test_set_read_counter_replaces_and_returns_previous():
    counter = _Counter()
    previous = set_kafka_error_read_counter(counter)
    try:
        assert message.kafka_error_read_counter is counter
        message.kafka_error_read_counter.inc()
        assert counter.value == 1
    finally:
        assert set_kafka_error_read_counter(previous) is counter


def test_set_write_counter_replaces_and_returns_previous():
    counter = _Counter()
    previous = set_kafka_error_write_counter(counter)
    try:
        assert message.kafka_error_write_counter is counter
        assert isinstance(previous, NullCounter)
    finally:
        set_kafka_error_write_counter(previous)