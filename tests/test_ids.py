import uuid

import pytest

from cirbinius.ids import new_id, parse_id, short_id


def test_new_id_is_version_4_rfc_variant():
    value = new_id()
    assert value.version == 4
    assert value.variant == uuid.RFC_4122


def test_new_ids_differ():
    assert len({new_id() for _ in range(50)}) == 50


def test_parse_round_trip_hyphenated():
    value = new_id()
    assert parse_id(str(value)) == value


def test_parse_accepts_compact_and_whitespace():
    value = new_id()
    assert parse_id("  " + value.hex.upper() + "\n") == value


def test_str_has_canonical_grouping():
    text = str(new_id())
    assert [len(part) for part in text.split("-")] == [8, 4, 4, 4, 12]


@pytest.mark.parametrize("text", ["", "abc", "0" * 31, "0" * 33])
def test_parse_rejects_bad_length(text):
    with pytest.raises(ValueError, match="invalid uuid length"):
        parse_id(text)


def test_parse_rejects_non_hex():
    with pytest.raises(ValueError, match="invalid uuid hex"):
        parse_id("zz" + "0" * 30)


def test_short_id_is_first_eight_hex_digits():
    value = parse_id("12345678-9abc-4def-8123-456789abcdef")
    assert short_id(value) == "12345678"