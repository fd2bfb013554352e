"""
Split a parsed feature collection into one building footprint and its rooms.

Source shapefiles carry no fixed schema, so the building is chosen by an
ordered list of rules:

  1. ``tag``           – first feature whose type attribute is "building"
  2. ``largest_area``  – feature with the strictly greatest planar area
                         (first one wins a tie)

Every other feature is a room unless it is itself tagged "building".
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from shapely.geometry import shape

from services.errors import MissingBuildingError
from services.properties import lookup

logger = logging.getLogger(__name__)

BUILDING_TYPE = "building"
ROOM_TYPE = "room"


@dataclass
class Classification:
    building: dict
    rooms: list = field(default_factory=list)
    strategy: str = ""


def feature_area(feature: dict) -> float:
    """Planar area in coordinate units; 0 when the geometry cannot be built."""
    try:
        return float(shape(feature["geometry"]).area)
    except Exception:
        return 0.0


def semantic_type(feature: dict) -> str:
    """Lower-cased ``type`` attribute, falling back to ``featureType``; '' if neither."""
    props = feature.get("properties") or {}
    value = lookup(props, "type") or lookup(props, "featureType")
    return str(value).lower() if value else ""


# ---------- Building selection rules ----------

def building_by_tag(features: list[dict]) -> Optional[int]:
    for idx, feature in enumerate(features):
        if semantic_type(feature) == BUILDING_TYPE:
            return idx
    return None


def building_by_largest_area(features: list[dict]) -> Optional[int]:
    best_idx, best_area = None, 0.0
    for idx, feature in enumerate(features):
        area = feature_area(feature)
        if area > best_area:
            best_idx, best_area = idx, area
    return best_idx


BUILDING_RULES: list[tuple[str, Callable[[list[dict]], Optional[int]]]] = [
    ("tag", building_by_tag),
    ("largest_area", building_by_largest_area),
]


def select_building(features: list[dict]) -> tuple[int, str]:
    """Return (index, rule name) of the building footprint."""
    for name, rule in BUILDING_RULES:
        idx = rule(features)
        if idx is not None:
            return idx, name
    raise MissingBuildingError("Building polygon missing")


# ---------- Room selection ----------

def is_room(feature: dict) -> bool:
    """Tagged "room", tagged anything other than "building", or untagged."""
    kind = semantic_type(feature)
    if kind == ROOM_TYPE:
        return True
    if kind and kind != BUILDING_TYPE:
        return True
    return not kind


def classify(features: list[dict]) -> Classification:
    if not features:
        raise MissingBuildingError("Building polygon missing: no features to classify")

    building_idx, strategy = select_building(features)
    rooms = [
        f for idx, f in enumerate(features)
        if idx != building_idx and is_room(f)
    ]
    logger.info(
        "Classified %d features: building #%d via %s, %d rooms",
        len(features), building_idx, strategy, len(rooms),
    )
    return Classification(building=features[building_idx], rooms=rooms, strategy=strategy)
