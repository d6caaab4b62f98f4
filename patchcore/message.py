"""Queue messages, the writer interface and error counters."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class KafkaMessage:
    key: bytes = b""
    value: bytes = b""


def _dumps(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def message_from_json(key: str, value: Any) -> KafkaMessage:
    """Build a message with ``key`` and ``value`` serialized as JSON."""
    return KafkaMessage(key=key.encode("utf-8"), value=_dumps(value))


@runtime_checkable
class Writer(Protocol):
    def write_messages(self, *args: KafkaMessage) -> None:
        """Send the messages to the writer's topic."""


@runtime_checkable
class Counter(Protocol):
    def inc(self) -> None:
        """Increase the counter by one."""


class NullCounter:
    """In-memory counter used until metrics are configured."""

    def __init__(self) -> None:
        self.value = 0
        self._lock = threading.Lock()

    def inc(self) -> None:
        with self._lock:
            self.value += 1


kafka_error_read_counter: Counter = NullCounter()
kafka_error_write_counter: Counter = NullCounter()


def set_kafka_error_read_counter(counter: Counter) -> Counter:
    """Install the counter of read errors; returns the one it replaces."""
    global kafka_error_read_counter
    previous, kafka_error_read_counter = kafka_error_read_counter, counter
    return previous


def set_kafka_error_write_counter(counter: Counter) -> Counter:
    """Install the counter of write errors; returns the one it replaces."""
    global kafka_error_write_counter
    previous, kafka_error_write_counter = kafka_error_write_counter, counter
    return previous