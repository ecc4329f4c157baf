"""Tests for the flat property-map text encoding."""

from datetime import date

import pytest

from database.property_codec import (
    coerce_properties,
    coerce_property_value,
    decode_properties,
    encode_properties,
)


def test_encode_simple_map():
    assert encode_properties({"name": "Alice", "age": 30}) == '{"name":"Alice","age":30}'


def test_decode_keeps_integers_as_integers():
    decoded = decode_properties('{"name":"Alice","age":30}')

    assert decoded == {"name": "Alice", "age": 30}
    assert isinstance(decoded["age"], int)


@pytest.mark.parametrize("value", [None, {}])
def test_encode_empty(value):
    assert encode_properties(value) == "{}"


@pytest.mark.parametrize("text", [None, "", "   ", "{}", "{ }"])
def test_decode_empty(text):
    assert decode_properties(text) == {}


def test_round_trip_primitive_map():
    properties = {
        "name": "Graph Database Project",
        "count": -5,
        "ratio": 3.14,
        "tiny": 1e-07,
        "active": True,
        "archived": False,
        "owner": None,
    }

    decoded = decode_properties(encode_properties(properties))

    assert decoded == properties
    assert isinstance(decoded["count"], int)
    assert isinstance(decoded["ratio"], float)
    assert isinstance(decoded["tiny"], float)
    assert decoded["active"] is True


def test_booleans_are_not_encoded_as_integers():
    assert encode_properties({"flag": True}) == '{"flag":true}'


def test_whole_floats_stay_floats():
    decoded = decode_properties(encode_properties({"score": 2.0}))

    assert decoded == {"score": 2.0}
    assert isinstance(decoded["score"], float)


def test_commas_and_colons_inside_strings():
    properties = {"note": "first, second: third", "other": "x"}

    assert decode_properties(encode_properties(properties)) == properties


def test_embedded_quotes_round_trip():
    properties = {"quote": 'she said "hi"'}

    encoded = encode_properties(properties)

    assert encoded == '{"quote":"she said \\"hi\\""}'
    assert decode_properties(encoded) == properties


def test_comma_next_to_a_lone_escaped_quote_round_trips():
    properties = {"note": 'a, "b', "n": 1}

    assert decode_properties(encode_properties(properties)) == properties


def test_backslashes_round_trip():
    properties = {"path": "C:\\dir\\", "quoted": '\\"', "x": 1}

    encoded = encode_properties(properties)

    assert encoded == '{"path":"C:\\\\dir\\\\","quoted":"\\\\\\"","x":1}'
    assert decode_properties(encoded) == properties


def test_integers_past_the_digit_limit_are_stored_as_text():
    big = 10**5000 - 1

    encoded = encode_properties({"big": big, "small": -12})

    assert decode_properties(encoded) == {"big": "9" * 5000, "small": -12}


def test_negative_integers_past_the_digit_limit_keep_every_digit():
    decoded = decode_properties(encode_properties({"big": -(10**5000 + 7)}))

    assert decoded == {"big": "-1" + "0" * 4996 + "0007"}


def test_overlong_number_text_does_not_drop_other_keys():
    text = '{"a":1,"big":' + "9" * 5000 + ',"b":2.5}'

    assert decode_properties(text) == {"a": 1, "big": "9" * 5000, "b": 2.5}


def test_unparseable_numbers_are_kept_as_text():
    assert decode_properties('{"version":1.2.3,"code":abc}') == {
        "version": "1.2.3",
        "code": "abc",
    }


def test_non_finite_floats_decode_as_text():
    decoded = decode_properties(encode_properties({"limit": float("inf")}))

    assert decoded == {"limit": "inf"}


def test_segments_without_colon_are_skipped():
    assert decode_properties('{"a":1,garbage,"b":2}') == {"a": 1, "b": 2}


@pytest.mark.parametrize(
    "text",
    ["not json", "{", "}", '{"a"', ":::", '{"a":"unterminated}', ",,,", "{,}"],
)
def test_decode_never_raises(text):
    assert isinstance(decode_properties(text), dict)


def test_decode_returns_a_fresh_map():
    text = encode_properties({"a": 1})

    first = decode_properties(text)
    first["b"] = 2

    assert decode_properties(text) == {"a": 1}


def test_coerce_non_primitive_values_to_strings():
    assert coerce_property_value(date(2024, 1, 2)) == "2024-01-02"
    assert coerce_property_value([1, 2]) == "[1, 2]"
    assert coerce_property_value(7) == 7
    assert coerce_property_value(None) is None


def test_coerced_list_survives_encoding_as_text():
    properties = coerce_properties({"tags": ["a", "b"]})

    assert decode_properties(encode_properties(properties)) == {"tags": "['a', 'b']"}
