import json
import logging

from tripjournal.logger import StructuredLogger, events


def test_structured_logger_format(caplog):
    with caplog.at_level(logging.INFO, logger="tripjournal.events"):
        events.log_event("trip_created", trip_id=12, user_id=3, extra={"gallery_images": 2})

    entry = json.loads(caplog.records[-1].getMessage())
    assert entry["event"] == "trip_created"
    assert entry["trip_id"] == 12
    assert entry["user_id"] == 3
    # extra is flattened into the top level
    assert entry["gallery_images"] == 2
    assert "extra" not in entry
    assert "timestamp" in entry


def test_build_event_keeps_non_dict_extra():
    payload = StructuredLogger("tripjournal.test").build_event("x", extra="plain")
    assert payload["extra"] == "plain"


def test_unserializable_values_fall_back_to_str(caplog):
    with caplog.at_level(logging.INFO, logger="tripjournal.events"):
        events.log_event("trip_updated", fields={"title"})

    entry = json.loads(caplog.records[-1].getMessage())
    assert entry["fields"] == "{'title'}"
