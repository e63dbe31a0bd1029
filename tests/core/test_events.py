# tests/core/test_events.py
"""Testes do EventLog (eventos estruturados + encaminhamento ao logger)."""

import logging

from atlas_deploy.core.events import EventLog


def test_log_records_structured_event():
    events = EventLog()
    events.log(source="config.loader", level="info", message="loaded", path="/x.json")

    event = events.events[0]
    assert event["source"] == "config.loader"
    assert event["level"] == "info"
    assert event["message"] == "loaded"
    assert event["path"] == "/x.json"
    assert "timestamp" in event


def test_warnings_are_grouped_by_source_and_logged():
    events = EventLog()
    events.add_warning(source="config.loader", message="fallback")
    events.add_warning(source="config.integrity", message="unreadable checksum")
    events.add_warning(source="config.loader", message="again")

    assert events.warnings == {
        "config.loader": ["fallback", "again"],
        "config.integrity": ["unreadable checksum"],
    }
    assert events.all_warnings() == ["unreadable checksum", "fallback", "again"]
    assert [e["level"] for e in events.events] == ["warning"] * 3


def test_events_are_forwarded_to_package_logger(caplog):
    events = EventLog()
    with caplog.at_level(logging.WARNING, logger="atlas_deploy"):
        events.add_warning(source="config.loader", message="using defaults")

    assert any(
        r.name == "atlas_deploy" and r.levelno == logging.WARNING and "using defaults" in r.getMessage()
        for r in caplog.records
    )
