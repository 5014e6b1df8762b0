import json
import logging

import pytest

from mqtt2influxdb.errors import PayloadDecodeError
from mqtt2influxdb.mapping.engine import ExtractionEngine, handle
from mqtt2influxdb.mapping.spec import Entry, JsonField, JsonFields, SingleText
from mqtt2influxdb.mapping.types import DstVariant, Float, Record, String


# -------------------------------------------------------
# Helpers
# -------------------------------------------------------

def temperature_entry():
    return Entry(
        src_topic="sensors/+/temp",
        dst_name="temperature",
        field_spec=JsonFields(
            fields=(
                JsonField(src_path="value", dst_name="celsius"),
                JsonField(src_path="unit", dst_variant=DstVariant.TAG),
            )
        ),
    )


def door_entry():
    return Entry(
        src_topic="house/door",
        dst_name="door",
        field_spec=SingleText(dst_name="door"),
    )


# -------------------------------------------------------
# Engine tests
# -------------------------------------------------------

def test_end_to_end_json_record():
    engine = ExtractionEngine([temperature_entry()])
    payload = json.dumps({"value": 21.5, "unit": "C"}).encode()

    record, entry = engine.handle("sensors/room1/temp", payload)

    assert entry.dst_name == "temperature"
    assert record == Record(
        name="temperature",
        fields={"celsius": Float(21.5)},
        tags={"unit": String("C")},
    )


def test_unmatched_topic_returns_none():
    engine = ExtractionEngine([temperature_entry()])
    assert engine.handle("sensors/room1/humidity", b"{}") is None


def test_first_matching_entry_is_used():
    wide = Entry("a/+", "wide", SingleText(dst_name="wide"))
    narrow = Entry("a/b", "narrow", SingleText(dst_name="narrow"))
    record, entry = handle("a/b", b"x", [wide, narrow])
    assert entry is wide
    assert record.name == "wide"


def test_decode_error_is_annotated_and_engine_keeps_working():
    engine = ExtractionEngine([door_entry()])

    with pytest.raises(PayloadDecodeError) as excinfo:
        engine.handle("house/door", b"\xc3\x28")
    assert excinfo.value.topic == "house/door"
    assert excinfo.value.entry_name == "door"
    assert "house/door" in str(excinfo.value)

    record, _ = engine.handle("house/door", b"closed")
    assert record.fields == {"door": String("closed")}


def test_null_field_is_skipped_and_reported(caplog):
    engine = ExtractionEngine([temperature_entry()])

    with caplog.at_level(logging.WARNING, logger="mqtt2influxdb.mapping.engine"):
        record, _ = engine.handle("sensors/x/temp", b'{"value": null, "unit": "C"}')

    assert record.fields == {}
    assert record.tags == {"unit": String("C")}
    assert [s.name for s in record.skipped] == ["celsius"]
    assert "celsius" in caplog.text


def test_records_are_independent_between_calls():
    engine = ExtractionEngine([temperature_entry()])
    r1, _ = engine.handle("sensors/a/temp", b'{"value": 1, "unit": "C"}')
    r2, _ = engine.handle("sensors/b/temp", b'{"value": 2}')
    assert r1.fields == {"celsius": Float(1.0)}
    # "unit" missing: lenient path resolves to the whole document
    assert r2.tags == {"unit": String('{"value":2}')}
    assert r1 is not r2
