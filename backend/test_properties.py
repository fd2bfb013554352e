"""Case-insensitive property lookup."""

from services.properties import first_of, lookup


def test_lookup_ignores_case():
    props = {"TYPE": "Room", "Name": "Kitchen"}
    assert lookup(props, "type") == "Room"
    assert lookup(props, "NAME") == "Kitchen"


def test_lookup_returns_first_match_in_map_order():
    props = {"Type": "building", "type": "room"}
    assert lookup(props, "TYPE") == "building"


def test_lookup_missing_key_and_empty_map():
    assert lookup({"a": 1}, "b") is None
    assert lookup({}, "a") is None
    assert lookup(None, "a") is None


def test_lookup_does_not_mutate():
    props = {"Id": 7}
    lookup(props, "id")
    assert props == {"Id": 7}


def test_first_of_skips_falsy_values():
    props = {"id": "", "ROOM_ID": "r-9"}
    assert first_of(props, "id", "room_id") == "r-9"
    assert first_of({"id": None}, "id", "room_id") is None
    assert first_of({"name": "Hall"}, "name", "room_name") == "Hall"
