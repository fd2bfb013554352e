"""
Project room geometry into the building's unit square.

The building's bounding box ``[minLon, minLat, maxLon, maxLat]`` maps to
[0, 1] x [0, 1]. Each room keeps only its bounding rectangle in that frame
plus ``pniu``, the rectangle centre, used downstream as the room's
placement point. True room outlines are not stored (``polygon`` is None).
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from shapely.geometry import shape

from services.errors import DegenerateBoundsError
from services.properties import as_text, first_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoBounds:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0)

    @classmethod
    def from_bbox(cls, bbox: Optional[Sequence[float]]) -> Optional["GeoBounds"]:
        """Build from ``(minx, miny, maxx, maxy)``; None unless all four are finite."""
        if bbox is None or len(bbox) < 4:
            return None
        try:
            values = [float(v) for v in bbox[:4]]
        except (TypeError, ValueError):
            return None
        if not all(math.isfinite(v) for v in values):
            return None
        return cls(*values)

    def to_dict(self) -> dict:
        return {
            "minLon": self.min_lon,
            "minLat": self.min_lat,
            "maxLon": self.max_lon,
            "maxLat": self.max_lat,
        }


def geometry_bounds(geometry: Optional[dict]) -> Optional[GeoBounds]:
    """Bounding box of a GeoJSON geometry, or None if it has no usable extent."""
    if not geometry:
        return None
    try:
        return GeoBounds.from_bbox(shape(geometry).bounds)
    except Exception as e:
        logger.warning(f"Could not compute bounds for {geometry.get('type')} geometry: {e}")
        return None


def building_frame(building: dict) -> GeoBounds:
    """Bounding box of the building footprint; it must have positive width and height."""
    bounds = geometry_bounds(building.get("geometry"))
    if bounds is None:
        raise DegenerateBoundsError("Building polygon has no finite bounding box")
    if bounds.is_degenerate:
        raise DegenerateBoundsError(
            f"Building bounding box is degenerate "
            f"(width={bounds.width}, height={bounds.height})"
        )
    return bounds


def outer_ring(geometry: Optional[dict]) -> list[tuple[float, float]]:
    """Vertices of the first ring: polygon exterior, first multipolygon part, or raw points."""
    if not geometry:
        return []
    gtype = geometry.get("type")
    coords = geometry.get("coordinates") or []

    if gtype == "Polygon":
        ring = coords[0] if coords else []
    elif gtype == "MultiPolygon":
        ring = coords[0][0] if coords and coords[0] else []
    elif gtype == "MultiLineString":
        ring = coords[0] if coords else []
    elif gtype in ("LineString", "MultiPoint"):
        ring = coords
    elif gtype == "Point":
        ring = [coords] if coords else []
    else:
        ring = []
    return [(float(p[0]), float(p[1])) for p in ring]


def unit_rect(ring: list[tuple[float, float]], frame: GeoBounds) -> dict:
    """Bounding rectangle of *ring* inside *frame*'s unit square."""
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for lon, lat in ring:
        x = (lon - frame.min_lon) / frame.width
        y = (lat - frame.min_lat) / frame.height
        min_x, max_x = min(min_x, x), max(max_x, x)
        min_y, max_y = min(min_y, y), max(max_y, y)
    return {"x": min_x, "y": min_y, "width": max_x - min_x, "height": max_y - min_y}


def rect_center(rect: dict) -> dict:
    return {"x": rect["x"] + rect["width"] / 2, "y": rect["y"] + rect["height"] / 2}


def normalize_room(feature: dict, frame: GeoBounds, index: int, timestamp: int) -> Optional[dict]:
    """
    Convert one room feature into the stored room shape.

    Returns None when the feature has no vertices at all.
    """
    ring = outer_ring(feature.get("geometry"))
    if not ring:
        return None

    rect = unit_rect(ring, frame)
    if not all(math.isfinite(v) for v in rect.values()):
        raise DegenerateBoundsError(f"Room {index + 1} normalized to non-finite bounds")

    props = feature.get("properties") or {}
    source_id = first_of(props, "id", "room_id")
    source_name = first_of(props, "name", "room_name")
    source_type = first_of(props, "room_type", "type", "category")

    if source_type and str(source_type).lower() != "building":
        room_type = as_text(source_type)
    else:
        room_type = "room"

    return {
        "id": as_text(source_id) if source_id else f"room-{timestamp}-{index}",
        "type": room_type,
        "name": as_text(source_name) if source_name else f"Room {index + 1}",
        "bounds": rect,
        "polygon": None,
        "pniu": rect_center(rect),
    }


def normalize_rooms(rooms: list[dict], frame: GeoBounds, timestamp: int) -> list[dict]:
    if frame.is_degenerate:
        raise DegenerateBoundsError("Building bounding box has zero width or height")

    normalized = []
    for idx, feature in enumerate(rooms):
        room = normalize_room(feature, frame, idx, timestamp)
        if room is None:
            logger.warning("Skipping room feature #%d: geometry has no vertices", idx)
            continue
        normalized.append(room)
    return normalized
