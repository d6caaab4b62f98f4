import json
import logging
import time

import pytest

from patchcore.logs import (
    CapturingHandler,
    ProgressTicker,
    configure_logging,
    init_logging,
    log,
    log_panics,
    log_progress,
    logger,
    parse_log_level,
)


@pytest.fixture
def hook(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("LOG_STYLE", "json")
    configure_logging()
    handler = CapturingHandler()
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)


def _crash():
    raise RuntimeError("We crashed")


def test_init_logging(hook):
    log("num", 1, "str", "text").info("info log")
    assert len(hook.records) == 1
    record = hook.records[0]
    assert record.fields == {"num": 1, "str": "text"}
    assert record.getMessage() == "info log"


def test_odd_args_warn(hook):
    log("num", 1, 2).info("info log")
    assert len(hook.records) == 2
    assert (
        hook.records[0].getMessage()
        == "Unable to accept odd (3) arguments count in utils.DebugLog method."
    )
    assert hook.records[0].levelno == logging.WARNING
    assert hook.records[1].getMessage() == "info log"


def test_json_output(hook, capsys):
    log("num", 1, "str", "text").info("info log")
    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "info log"
    assert payload["num"] == 1
    assert payload["str"] == "text"
    assert payload["levelname"] == "info"


def test_non_string_key():
    with pytest.raises(TypeError):
        log(1, 2)


def test_recover_and_log_panics(hook):
    with log_panics(False):
        _crash()
    assert len(hook.records) == 1
    record = hook.records[0]
    assert record.getMessage() == "Panicked"
    assert record.levelno == logging.ERROR
    assert "We crashed" in record.fields["stack"]


def test_log_panics_exit(hook):
    with pytest.raises(SystemExit) as info:
        with log_panics(True):
            _crash()
    assert info.value.code == 1
    assert len(hook.records) == 1


def test_capturing_handler_levels(hook):
    errors_only = CapturingHandler(logging.ERROR)
    logger.addHandler(errors_only)
    try:
        log().info("x")
        log().error("y")
    finally:
        logger.removeHandler(errors_only)
    assert [r.getMessage() for r in errors_only.records] == ["y"]
    assert len(hook.records) == 2


def test_level_filtering(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "error")
    configure_logging()
    handler = CapturingHandler()
    logger.addHandler(handler)
    try:
        log().info("hidden")
        log().error("shown")
    finally:
        logger.removeHandler(handler)
    assert [r.getMessage() for r in handler.records] == ["shown"]


def test_parse_log_level():
    assert parse_log_level("DEBUG") == logging.DEBUG
    assert parse_log_level("warn") == logging.WARNING
    with pytest.raises(ValueError):
        parse_log_level("loud")


def test_init_logging_sets_level():
    init_logging(logging.ERROR)
    assert logger.getEffectiveLevel() == logging.ERROR
    init_logging("debug")
    assert logger.getEffectiveLevel() == logging.DEBUG


def test_log_progress(hook):
    ticker = log_progress("progress", 0.01, 10)
    try:
        assert ticker.add(5) == 5
        deadline = time.monotonic() + 5
        while not hook.records and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        ticker.stop()
    assert hook.records
    assert hook.records[-1].fields["progress %"] == 50
    assert hook.records[-1].getMessage() == "progress"


def test_progress_ticker_invalid_total():
    with pytest.raises(ValueError):
        ProgressTicker("x", 1, 0)