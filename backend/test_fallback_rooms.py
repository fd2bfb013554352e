"""Room synthesis from saved grid floor layouts."""

import pytest

from services.fallback_rooms import floor_entries, rooms_for_floor, rooms_from_floor_layouts


def apt(rooms, cols=10, rows=10):
    return {"grid": {"cols": cols, "rows": rows}, "rooms": rooms}


def test_lowest_floor_with_rooms_wins_and_floors_are_not_merged():
    layouts = {
        "42_floor_5": {"apartments": {"1": apt([{"x": 1, "y": 1, "width": 1, "height": 1}])}},
        "42_floor_2": {"apartments": {"1": apt([])}},
        "42_floor_3": {"apartments": {
            "1": apt([{"x": 0, "y": 0, "width": 5, "height": 5}]),
            "2": apt([{"x": 5, "y": 5, "width": 5, "height": 5}]),
        }},
    }
    rooms = rooms_from_floor_layouts(42, layouts, 1000)
    assert len(rooms) == 2
    assert all(r["name"].startswith("Floor 3 ") for r in rooms)


def test_floors_sort_numerically_and_match_exact_prefix():
    layouts = {
        "7_floor_10": {},
        "7_floor_9": {},
        "77_floor_1": {},
        "7_floor_x": {},
    }
    labels = [label for label, _ in floor_entries(7, layouts)]
    assert labels == ["x", "9", "10"]


def test_grid_division_and_synthesized_fields():
    floor = {"apartments": {"A": apt([{"x": 2, "y": 4, "width": 3, "height": 2}], cols=4, rows=8)}}
    [room] = rooms_for_floor("1", floor, 555)
    assert room["bounds"] == {"x": 0.5, "y": 0.5, "width": 0.75, "height": 0.25}
    assert room["pniu"] == {"x": pytest.approx(0.875), "y": pytest.approx(0.625)}
    assert room["id"] == "floor-1-apt-A-room-0-555"
    assert room["name"] == "Floor 1 Apt A Room 1"
    assert room["type"] == "room"
    assert room["polygon"] is None


def test_stored_fields_are_preserved():
    stored = {"id": "r-1", "name": "Bedroom", "type": "bedroom",
              "x": 0, "y": 0, "width": 10, "height": 10, "pniu": {"x": 0.1, "y": 0.2}}
    [room] = rooms_for_floor("2", {"apartments": {"1": apt([stored])}}, 1)
    assert room["id"] == "r-1"
    assert room["name"] == "Bedroom"
    assert room["type"] == "bedroom"
    assert room["pniu"] == {"x": 0.1, "y": 0.2}
    assert room["bounds"]["width"] == 1.0


def test_missing_grid_uses_editor_default_and_zero_cols_use_one():
    floor = {"apartments": {
        "1": {"rooms": [{"x": 5, "y": 5, "width": 5, "height": 5}]},
        "2": {"grid": {"cols": 0, "rows": 0}, "rooms": [{"width": 1}]},
    }}
    first, second = rooms_for_floor("1", floor, 1)
    assert first["bounds"] == {"x": 0.5, "y": 0.5, "width": 0.5, "height": 0.5}
    assert second["bounds"] == {"x": 0.0, "y": 0.0, "width": 1.0, "height": 0.0}


def test_no_floors_for_bid():
    assert rooms_from_floor_layouts(1, {"2_floor_1": {"apartments": {"1": apt([{}])}}}, 1) == []
    assert rooms_from_floor_layouts(1, {}, 1) == []


def test_numeric_stored_fields_become_text():
    stored = {"id": 12, "name": 101.0, "type": 4, "x": 0, "y": 0, "width": 1, "height": 1}
    [room] = rooms_for_floor("1", {"apartments": {"1": apt([stored])}}, 1)
    assert (room["id"], room["name"], room["type"]) == ("12", "101", "4")


@pytest.mark.parametrize("pniu", [{"x": "a", "y": 1}, [0.1, 0.2], {"x": 0.1}, {"x": float("nan"), "y": 0}])
def test_unusable_stored_pniu_falls_back_to_centre(pniu):
    stored = {"x": 0, "y": 0, "width": 10, "height": 10, "pniu": pniu}
    [room] = rooms_for_floor("1", {"apartments": {"1": apt([stored])}}, 1)
    assert room["pniu"] == {"x": 0.5, "y": 0.5}


@pytest.mark.parametrize("grid", [[4, 4], "4x4", 4])
def test_non_mapping_grid_divides_by_one(grid):
    floor = {"apartments": {"1": {"grid": grid, "rooms": [{"x": 1, "y": 2, "width": 3, "height": 4}]}}}
    [room] = rooms_for_floor("1", floor, 1)
    assert room["bounds"] == {"x": 1.0, "y": 2.0, "width": 3.0, "height": 4.0}


def test_non_finite_floor_labels_sort_as_zero():
    layouts = {
        "7_floor_2": {},
        "7_floor_nan": {},
        "7_floor_inf": {},
        "7_floor_-1": {},
    }
    labels = [label for label, _ in floor_entries(7, layouts)]
    assert labels == ["-1", "nan", "inf", "2"]
