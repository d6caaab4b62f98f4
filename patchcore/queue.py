"""Message handlers, readers and writers of the platform message queue."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Protocol, Union

from .logs import log, log_panics
from .message import Counter, KafkaMessage
from .payload_tracker import PayloadTrackerEvent, write_payload_tracker_events
from .platform_event import (
    EvalData,
    InventoryAID,
    PlatformEvent,
    write_eval_events,
    write_inventory_events,
)

MessageHandler = Callable[[KafkaMessage], Any]
EventHandler = Callable[[PlatformEvent], Any]


class Reader(Protocol):
    def handle_messages(self, handler: MessageHandler) -> None:
        """Pass every incoming message to ``handler`` until the reader stops."""

    def close(self) -> None:
        """Release the reader's connection."""


def make_message_handler(event_handler: EventHandler) -> MessageHandler:
    """Decode messages into platform events; undecodable messages are logged and skipped."""

    def handle(message: KafkaMessage) -> Any:
        try:
            event = PlatformEvent.from_dict(json.loads(message.value))
        except (ValueError, TypeError) as exc:
            log("err", str(exc)).error("Could not deserialize platform event")
            return None
        return event_handler(event)

    return handle


def make_retrying_handler(
    handler: MessageHandler, max_retries: int = 5, interval: float = 1.0
) -> MessageHandler:
    """Retry a failing handler with exponential backoff; ``max_retries`` 0 retries forever."""

    def retrying(message: KafkaMessage) -> Any:
        attempt = 0
        delay = interval
        while True:
            try:
                return handler(message)
            except Exception as exc:
                log("err", str(exc), "attempt", attempt).error("Try failed")
                attempt += 1
                if max_retries and attempt > max_retries:
                    raise
            time.sleep(delay)
            delay *= 2

    return retrying


def create_logger_func(counter: Optional[Counter]) -> Callable[..., None]:
    """Error logger for the queue client that also counts the errors."""
    if counter is None:
        raise ValueError("kafka error counter nil")

    def log_error(fmt: str, *args: Any) -> None:
        counter.inc()
        log("type", "kafka").error(fmt % args if args else fmt)
        if "Group Load In Progress" in fmt:
            log().critical("Kafka client stuck detected!!!")
            raise RuntimeError("Kafka client stuck detected!!!")

    return log_error


def _run_reader(topic: str, create_reader: Callable[[str], Reader], handler: MessageHandler) -> None:
    with log_panics(True):
        reader = create_reader(topic)
        try:
            reader.handle_messages(handler)
        finally:
            reader.close()


def spawn_reader(
    topic: str, create_reader: Callable[[str], Reader], handler: MessageHandler
) -> threading.Thread:
    """Start a thread that reads ``topic``; join the returned thread to wait for it."""
    thread = threading.Thread(
        target=_run_reader, args=(topic, create_reader, handler), name=f"reader-{topic}", daemon=True
    )
    thread.start()
    return thread


MessageData = Union[
    PayloadTrackerEvent,
    Iterable[InventoryAID],
    Iterable[EvalData],
    Iterable[PayloadTrackerEvent],
]


def send_messages(writer: Any, data: MessageData) -> None:
    """Write inventory, evaluation or payload tracker data as queue events."""
    if isinstance(data, PayloadTrackerEvent):
        write_payload_tracker_events(writer, data)
        return
    items = list(data)
    if not items:
        return
    if all(isinstance(item, InventoryAID) for item in items):
        write_inventory_events(writer, items)
    elif all(isinstance(item, EvalData) for item in items):
        write_eval_events(writer, items)
    elif all(isinstance(item, PayloadTrackerEvent) for item in items):
        write_payload_tracker_events(writer, items)
    else:
        raise TypeError("unsupported message data")


@dataclass
class MemoryWriter:
    """Writer that keeps the messages in memory."""

    messages: list[KafkaMessage] = field(default_factory=list)

    def write_messages(self, *args: KafkaMessage) -> None:
        self.messages.extend(args)


class _IdleReader:
    def __init__(self) -> None:
        self.closed = False

    def handle_messages(self, handler: MessageHandler) -> None:
        return None

    def close(self) -> None:
        self.closed = True


@dataclass
class CountingReaderFactory:
    """Creates idle readers and counts how many were created."""

    count: int = 0
    topics: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __call__(self, topic: str) -> Reader:
        with self._lock:
            self.count += 1
            self.topics.append(topic)
        return _IdleReader()