"""
Shapefile → common floor layout import.

Pipeline: archive bytes → features → building/rooms → unit-square rooms
(or rooms from saved floor layouts) → one layout record per BID in the
common layout store, enriched with the building's editor metadata.
"""

import logging
import time
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from services.classifier import classify
from services.fallback_rooms import rooms_from_floor_layouts
from services.normalizer import GeoBounds, building_frame, geometry_bounds, normalize_rooms
from services.shapefile_loader import load_features
from services.stores import BuildingMetadataStore, CommonLayoutStore, FloorLayoutStore

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def building_details(metadata: Optional[dict]) -> Optional[dict]:
    """Descriptive fields of an editor building feature; None without one."""
    props = (metadata or {}).get("properties")
    if not props:
        return None
    return {
        "name": props.get("NAME") or props.get("name") or None,
        "height": props.get("height"),
        "floors": props.get("floors"),
        "apartmentCounts": props.get("apartmentCounts") or None,
    }


def resolve_bounds(metadata: Optional[dict], frame: GeoBounds) -> GeoBounds:
    """Prefer the editor footprint's bounding box over the uploaded building's."""
    if metadata:
        override = geometry_bounds(metadata.get("geometry"))
        if override is not None:
            return override
    return frame


def build_layout_record(
    bid: Any,
    rooms: list[dict],
    building: dict,
    frame: GeoBounds,
    metadata: Optional[dict] = None,
) -> dict:
    bounds = resolve_bounds(metadata, frame).to_dict()
    geometry = (metadata or {}).get("geometry") or building.get("geometry") or None
    return {
        "type": "Feature",
        "properties": {
            "BID": bid,
            "bounds": bounds,
            "rooms": list(rooms),
            "buildingDetails": building_details(metadata),
        },
        "geometry": geometry,
    }


async def build_common_layout(
    bid: Any,
    features: list[dict],
    layout_store: CommonLayoutStore,
    building_store: BuildingMetadataStore,
    floor_store: FloorLayoutStore,
    timestamp: Optional[int] = None,
) -> dict:
    """Classify, normalize and upsert already-parsed *features*; return the layout."""
    timestamp = timestamp if timestamp is not None else now_ms()

    classification = classify(features)
    frame = building_frame(classification.building)
    rooms = normalize_rooms(classification.rooms, frame, timestamp)

    if not rooms:
        logger.info("No room geometry for BID %s, falling back to saved floor layouts", bid)
        rooms = rooms_from_floor_layouts(bid, await floor_store.load(), timestamp)

    metadata = await building_store.find(bid)
    if metadata is None:
        logger.info("No editor building found for BID %s, using uploaded footprint", bid)

    record = build_layout_record(bid, rooms, classification.building, frame, metadata)
    await layout_store.upsert(record)

    props = record["properties"]
    return {"bounds": props["bounds"], "rooms": props["rooms"]}


async def import_common_layout(
    bid: Any,
    archive: bytes,
    layout_store: CommonLayoutStore,
    building_store: BuildingMetadataStore,
    floor_store: FloorLayoutStore,
) -> dict:
    features = await run_in_threadpool(load_features, archive)
    return await build_common_layout(bid, features, layout_store, building_store, floor_store)
