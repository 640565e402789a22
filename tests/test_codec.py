import json

import pytest

from papershelf.classification.codec import (
    decode_tags,
    dedupe,
    encode_tags,
    is_canonical,
    split_tags,
)


def test_decode_none_is_empty():
    assert decode_tags(None) == []


def test_encode_empty_is_none():
    assert encode_tags([]) is None


def test_decode_legacy_comma_form():
    assert decode_tags("ml, nlp ,, cv") == ["ml", "nlp", "cv"]


def test_decode_json_array():
    assert decode_tags('["a","b"]') == ["a", "b"]


def test_decode_json_entries_are_not_trimmed():
    assert decode_tags('[" a", "b"]') == [" a", "b"]


def test_decode_json_coerces_and_drops_nulls():
    assert decode_tags('[1, null, "x"]') == ["1", "x"]


def test_decode_dedupes_keeping_first():
    assert decode_tags('["a", "b", "a"]') == ["a", "b"]
    assert decode_tags("a, b, a") == ["a", "b"]


@pytest.mark.parametrize("raw", ["", "   ", ",,,", "[]"])
def test_decode_blankish_values(raw):
    assert decode_tags(raw) == []


def test_decode_non_array_json_falls_back_to_delimited():
    assert decode_tags("5") == ["5"]
    assert decode_tags('{"a": 1}') == ['{"a": 1}']


def test_decode_json_string_is_one_tag():
    assert decode_tags('"ml"') == ["ml"]
    assert decode_tags('" nlp, cv "') == ["nlp, cv"]
    assert decode_tags('"  "') == []
    assert not is_canonical('"ml"')


def test_decode_never_raises_on_odd_input():
    assert decode_tags(3.5) == []
    assert decode_tags(b"\xff\xfe") == []
    assert decode_tags("[broken") == ["[broken"]


def test_decode_accepts_already_decoded_list():
    assert decode_tags(["x", "y", "x"]) == ["x", "y"]


def test_encode_is_json_and_keeps_unicode():
    raw = encode_tags(["機械学習", "nlp"])
    assert "機械学習" in raw
    assert json.loads(raw) == ["機械学習", "nlp"]


def test_encode_dedupes():
    assert json.loads(encode_tags(["a", "b", "a"])) == ["a", "b"]


@pytest.mark.parametrize(
    "tags",
    [["a"], ["a", "b", "a"], ["Machine Learning", "NLP", "CV"], ["x,y"]],
)
def test_round_trip_preserves_membership(tags):
    assert set(decode_tags(encode_tags(tags))) == set(dedupe(tags))


def test_split_tags():
    assert split_tags(" a ,b,, ") == ["a", "b"]
    assert split_tags(None) == []


def test_is_canonical():
    assert is_canonical('["a"]')
    assert not is_canonical("a,b")
    assert not is_canonical(None)
    assert not is_canonical('"a"')
