"""Pydantic schemas for API request/response validation."""

from pydantic import BaseModel, Field
from typing import Any, Optional


# ---------- Layout ----------
class UnitRect(BaseModel):
    x: float
    y: float
    width: float
    height: float


class UnitPoint(BaseModel):
    x: float
    y: float


class GeoBoundsOut(BaseModel):
    minLon: float
    minLat: float
    maxLon: float
    maxLat: float


class RoomOut(BaseModel):
    id: str
    type: str
    name: str
    bounds: UnitRect
    polygon: Optional[list] = None
    pniu: UnitPoint


class LayoutOut(BaseModel):
    bounds: GeoBoundsOut
    rooms: list[RoomOut] = []


class UploadLayoutResponse(BaseModel):
    success: bool = True
    layout: LayoutOut


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: Optional[str] = None


# ---------- Buildings ----------
class BuildingFeatureIn(BaseModel):
    feature: Optional[dict[str, Any]] = Field(None, description="GeoJSON Feature with properties.BID")


class BuildingSaveResponse(BaseModel):
    ok: bool = True
    feature: dict[str, Any]
