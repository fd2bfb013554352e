"""Shared JSON document stores, injected into routes with ``Depends``."""

from functools import lru_cache

from config import BUILDINGS_FILE, COMMON_LAYOUT_FILE, FLOOR_LAYOUTS_FILE
from services.stores import BuildingMetadataStore, CommonLayoutStore, FloorLayoutStore


@lru_cache(maxsize=None)
def get_layout_store() -> CommonLayoutStore:
    return CommonLayoutStore(COMMON_LAYOUT_FILE)


@lru_cache(maxsize=None)
def get_building_store() -> BuildingMetadataStore:
    return BuildingMetadataStore(BUILDINGS_FILE)


@lru_cache(maxsize=None)
def get_floor_store() -> FloorLayoutStore:
    return FloorLayoutStore(FLOOR_LAYOUTS_FILE)
