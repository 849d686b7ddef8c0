import json
import logging

import pytest

from gui.services.event_bus import EventBus, GUIEvent
from gui.services.logging_service import LoggingService


@pytest.fixture()
def setup_logging():
    bus = EventBus()
    svc = LoggingService(capacity=5, event_bus=bus, prefixes=("gating.test",), level=logging.DEBUG)
    svc.attach()
    yield svc, bus
    svc.detach()


def test_logging_capture_and_retrieve(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("gating.test.remote").info("Gate resolved: %s", "native")
    assert any(e.message == "Gate resolved: native" for e in svc.recent())


def test_unrelated_loggers_not_captured(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("somewhere.else").warning("noise")
    assert svc.recent() == []


def test_logging_capacity_eviction(setup_logging):
    svc, _ = setup_logging
    for i in range(10):
        logging.getLogger("gating.test").info("M%d", i)
    recents = svc.recent()
    assert len(recents) == 5
    assert recents[0].message == "M5"
    assert [e.message for e in svc.recent(limit=2)] == ["M8", "M9"]


def test_filter_and_warnings(setup_logging):
    svc, _ = setup_logging
    logging.getLogger("gating.test.engagement").warning("Persistence unavailable")
    logging.getLogger("gating.test.remote").info("Gate resolved")
    assert [e.message for e in svc.filter(level="WARNING")] == ["Persistence unavailable"]
    assert [e.name for e in svc.filter(name_contains="remote")] == ["gating.test.remote"]
    assert [e.message for e in svc.warnings()] == ["Persistence unavailable"]


def test_records_published_on_bus(setup_logging):
    svc, bus = setup_logging
    seen = []
    bus.subscribe(GUIEvent.LOG_RECORD_ADDED, lambda e: seen.append(e.payload))
    logging.getLogger("gating.test").info("hello")
    assert seen and seen[0]["message"] == "hello"
    assert seen[0]["level"] == "INFO"


def test_export_jsonl(setup_logging, tmp_path):
    svc, _ = setup_logging
    logging.getLogger("gating.test").info("one")
    logging.getLogger("gating.test").warning("two")
    out = tmp_path / "logs.jsonl"
    assert svc.export_jsonl(out) == 2
    lines = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert [line["message"] for line in lines] == ["one", "two"]
    assert svc.export_jsonl(out, level="WARNING") == 1


def test_detach_stops_capture(setup_logging):
    svc, _ = setup_logging
    svc.detach()
    assert svc.attached is False
    logging.getLogger("gating.test").info("after detach")
    assert svc.recent() == []
