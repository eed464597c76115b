import json

import pytest

from zingo_bridge.parsers import (
    ParseStatus,
    UnparseableOutputError,
    parse_object,
    parse_objects,
    repair_json,
)


def test_repaired_object_matches_strict_json():
    loose = """Launching sync task...
    {
      sync_id: 12,
      scanned_blocks: 1_234_567,
      nested: { orchard_balance: 190_000, ratio: 0.5, },
      items: [1, 2, 3,],
    }
    Save task shutdown successfully."""
    strict = {
        "sync_id": 12,
        "scanned_blocks": 1234567,
        "nested": {"orchard_balance": 190000, "ratio": 0.5},
        "items": [1, 2, 3],
    }

    result = parse_object(loose)

    assert result.status is ParseStatus.PARSED
    assert result.value == strict
    assert result.value == json.loads(json.dumps(strict))


def test_repairs_leave_string_literals_untouched():
    text = '{memo: "pay 1_000: done, ]", "txid": "a_b"}'

    result = parse_object(text)

    assert result.value == {"memo": "pay 1_000: done, ]", "txid": "a_b"}


def test_repair_order_is_stable():
    assert repair_json("{a: 1_0, b: [2,],}") == '{"a": 10, "b": [2]}'


def test_unparseable_object_falls_back_to_raw_text():
    text = "banner { status: ok value }"

    result = parse_object(text)

    assert result.status is ParseStatus.PARTIAL
    assert result.value == {"raw": "{ status: ok value }"}
    assert result.unwrap() == {"raw": "{ status: ok value }"}


def test_missing_object_is_a_failed_result():
    result = parse_object("Launching sync task...\nnothing here")

    assert result.status is ParseStatus.FAILED
    with pytest.raises(UnparseableOutputError):
        result.unwrap()


def test_ansi_codes_are_stripped_before_parsing():
    result = parse_object("\x1b[32m{ in_progress: false }\x1b[0m")

    assert result.value == {"in_progress": False}


def test_parse_objects_single_or_many():
    one = parse_objects('noise {"a": 1} more noise')
    many = parse_objects('{"a": 1}\n{"b": {"c": 2}}')

    assert one.value == {"a": 1}
    assert many.value == [{"a": 1}, {"b": {"c": 2}}]


def test_parse_objects_drops_unparseable_regions():
    result = parse_objects('{"a": 1}\n{ broken value }')

    assert result.status is ParseStatus.PARTIAL
    assert result.value == {"a": 1}
    assert result.skipped == 1
    assert result.raw == "{ broken value }"


def test_parse_objects_without_regions_fails():
    assert parse_objects("Error: wallet not found").status is ParseStatus.FAILED
