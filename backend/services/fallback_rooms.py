"""
Derive a room list from the grid-based floor layouts saved by the editor.

Used only when an uploaded shapefile yields no room features. Floor
layouts are stored as::

    {"<BID>_floor_<N>": {"apartments": {"<aptKey>": {"grid": {"cols", "rows"},
                                                     "rooms": [...]}}}}

Floors are searched in ascending numeric order and the search stops at the
first floor that produces any room; floors are never merged.
"""

import logging
import math
from typing import Any, Callable, Iterable, Optional

from services.properties import as_text

logger = logging.getLogger(__name__)

FLOOR_SEPARATOR = "_floor_"
DEFAULT_GRID = {"cols": 10, "rows": 10}


def _floor_number(label: str) -> float:
    try:
        number = float(label)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def floor_entries(bid: Any, layouts: dict) -> list[tuple[str, dict]]:
    """(floor label, floor document) for every key of *bid*, lowest floor first."""
    prefix = f"{bid}{FLOOR_SEPARATOR}"
    entries = []
    for key, value in (layouts or {}).items():
        if not key.startswith(prefix):
            continue
        label = key[len(prefix):] or "1"
        entries.append((label, value if isinstance(value, dict) else {}))
    entries.sort(key=lambda entry: _floor_number(entry[0]))
    return entries


def _grid_value(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1.0
    return number if math.isfinite(number) and number else 1.0


def _cell(room: dict, key: str) -> float:
    try:
        number = float(room.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _point(value: Any) -> Optional[dict]:
    """Stored placement point as {x, y} floats; None unless both are finite numbers."""
    if not isinstance(value, dict):
        return None
    try:
        x, y = float(value["x"]), float(value["y"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return {"x": x, "y": y}


def rooms_for_floor(label: str, floor: dict, timestamp: int) -> list[dict]:
    """Normalize every stored room of every apartment on one floor into unit space."""
    apartments = floor.get("apartments")
    if not isinstance(apartments, dict):
        return []

    rooms = []
    for apt_key, apt in apartments.items():
        apt = apt if isinstance(apt, dict) else {}
        grid = apt.get("grid") or DEFAULT_GRID
        grid = grid if isinstance(grid, dict) else {}
        cols = _grid_value(grid.get("cols"))
        rows = _grid_value(grid.get("rows"))
        stored_rooms = apt.get("rooms") if isinstance(apt.get("rooms"), list) else []

        for idx, room in enumerate(stored_rooms):
            room = room if isinstance(room, dict) else {}
            bounds = {
                "x": _cell(room, "x") / cols,
                "y": _cell(room, "y") / rows,
                "width": _cell(room, "width") / cols,
                "height": _cell(room, "height") / rows,
            }
            rooms.append({
                "id": as_text(room["id"]) if room.get("id") else f"floor-{label}-apt-{apt_key}-room-{idx}-{timestamp}",
                "type": as_text(room["type"]) if room.get("type") else "room",
                "name": as_text(room["name"]) if room.get("name") else f"Floor {label} Apt {apt_key} Room {idx + 1}",
                "bounds": bounds,
                "polygon": None,
                "pniu": _point(room.get("pniu")) or {
                    "x": bounds["x"] + bounds["width"] / 2,
                    "y": bounds["y"] + bounds["height"] / 2,
                },
            })
    return rooms


def first_accepted(
    candidates: Iterable[tuple[str, dict]],
    produce: Callable[[str, dict], list],
    accept: Callable[[list], bool],
) -> tuple[Optional[str], list]:
    """Evaluate *candidates* in order; return the first (label, result) that *accept* admits."""
    for label, doc in candidates:
        result = produce(label, doc)
        if accept(result):
            return label, result
    return None, []


def rooms_from_floor_layouts(bid: Any, layouts: dict, timestamp: int) -> list[dict]:
    """Rooms of the lowest-numbered floor of *bid* that has at least one room."""
    label, rooms = first_accepted(
        floor_entries(bid, layouts),
        lambda floor_label, doc: rooms_for_floor(floor_label, doc, timestamp),
        lambda result: len(result) > 0,
    )
    if label is None:
        logger.info("No saved floor layout rooms for BID %s", bid)
    else:
        logger.info("Using %d rooms from saved layout of floor %s for BID %s", len(rooms), label, bid)
    return rooms
