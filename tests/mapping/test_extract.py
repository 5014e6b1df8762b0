import pytest

from mqtt2influxdb.errors import PayloadDecodeError
from mqtt2influxdb.mapping.spec import JsonField, JsonFields, SingleText
from mqtt2influxdb.mapping.types import (
    DstVariant,
    Extracted,
    Float,
    Record,
    SkippedField,
    String,
)


# -------------------------------------------------------
# SingleText
# -------------------------------------------------------

def test_single_text_emits_one_string():
    spec = SingleText(dst_name="door", dst_variant=DstVariant.TAG)
    assert spec.extract("open ✓".encode("utf-8")) == [
        Extracted("door", DstVariant.TAG, String("open ✓"))
    ]


def test_single_text_keeps_numeric_text_as_string():
    assert SingleText(dst_name="v").extract(b"21.5") == [
        Extracted("v", DstVariant.FIELD, String("21.5"))
    ]


def test_single_text_invalid_utf8():
    with pytest.raises(PayloadDecodeError, match="UTF-8"):
        SingleText(dst_name="v").extract(b"\xff\xfe\x00")


# -------------------------------------------------------
# JsonFields
# -------------------------------------------------------

def test_json_field_name_defaults_to_src_path():
    spec = JsonFields(fields=(JsonField(src_path="temp"),))
    assert spec.extract(b'{"temp": 20}') == [
        Extracted("temp", DstVariant.FIELD, Float(20.0))
    ]


def test_json_fields_keep_declared_order():
    spec = JsonFields(
        fields=(
            JsonField(src_path="b", dst_name="second"),
            JsonField(src_path="a", dst_variant=DstVariant.TAG),
        )
    )
    out = spec.extract(b'{"a": "x", "b": 2}')
    assert [e.name for e in out] == ["second", "a"]
    assert out[1].variant is DstVariant.TAG


def test_null_skips_only_that_field():
    spec = JsonFields(
        fields=(
            JsonField(src_path="a"),
            JsonField(src_path="b.c", dst_name="bc"),
            JsonField(src_path="d"),
        )
    )
    out = spec.extract(b'{"a": 1, "b": {"c": null}, "d": "ok"}')
    assert out[0] == Extracted("a", DstVariant.FIELD, Float(1.0))
    assert isinstance(out[1], SkippedField)
    assert out[1].name == "bc" and out[1].src_path == "b.c"
    assert out[2] == Extracted("d", DstVariant.FIELD, String("ok"))


@pytest.mark.parametrize(
    "payload",
    [
        b"{not json",
        b"",
        b'{"a": NaN}',
        b"\xff{}",
        b'{"a": 1} trailing',
    ],
)
def test_json_decode_failures(payload):
    spec = JsonFields(fields=(JsonField(src_path="a"),))
    with pytest.raises(PayloadDecodeError):
        spec.extract(payload)


def test_deeply_nested_json_is_a_decode_error():
    # valid JSON, but nested deeper than the parser can recurse
    payload = b"[" * 100000 + b"]" * 100000
    spec = JsonFields(fields=(JsonField(src_path="a"),))
    with pytest.raises(PayloadDecodeError, match="nesting too deep"):
        spec.extract(payload)


def test_json_scalar_document():
    spec = JsonFields(fields=(JsonField(src_path="anything", dst_name="v"),))
    assert spec.extract(b"42") == [Extracted("v", DstVariant.FIELD, Float(42.0))]


# -------------------------------------------------------
# Record accumulation
# -------------------------------------------------------

def test_record_apply_routes_by_variant():
    r = Record(name="m")
    r.apply("celsius", DstVariant.FIELD, Float(21.5))
    r.apply("unit", DstVariant.TAG, String("C"))
    assert r.fields == {"celsius": Float(21.5)}
    assert r.tags == {"unit": String("C")}


def test_record_duplicate_name_last_write_wins():
    r = Record(name="m")
    r.apply("v", DstVariant.FIELD, Float(1.0))
    r.apply("v", DstVariant.FIELD, Float(2.0))
    assert r.fields == {"v": Float(2.0)}


def test_record_to_dict():
    r = Record(name="m")
    r.apply("v", DstVariant.FIELD, Float(1.0))
    r.apply("t", DstVariant.TAG, String("x"))
    assert r.to_dict() == {
        "name": "m",
        "fields": {"v": 1.0},
        "tags": {"t": "x"},
        "skipped": [],
    }


def test_out_of_range_number_skips_only_that_field():
    spec = JsonFields(fields=(JsonField(src_path="big"), JsonField(src_path="ok")))
    out = spec.extract(b'{"big": 1e400, "ok": 2}')
    assert isinstance(out[0], SkippedField) and out[0].name == "big"
    assert out[1] == Extracted("ok", DstVariant.FIELD, Float(2.0))
