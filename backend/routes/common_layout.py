"""Shapefile upload → common floor layout routes."""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from config import MAX_UPLOAD_BYTES, MAX_UPLOAD_MB
from database import get_building_store, get_floor_store, get_layout_store
from schemas import ErrorResponse, UploadLayoutResponse
from services.errors import LayoutImportError
from services.layout_import import import_common_layout
from services.stores import BuildingMetadataStore, CommonLayoutStore, FloorLayoutStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["common-layout"])


def parse_bid(raw) -> int:
    if raw is None or not str(raw).strip():
        raise HTTPException(status_code=400, detail="BID is required")
    try:
        return int(str(raw).strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="BID must be an integer")


@router.post(
    "/upload-common-layout",
    response_model=UploadLayoutResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_common_layout(
    file: UploadFile = File(None),
    bid: str = Form(None, alias="BID"),
    layout_store: CommonLayoutStore = Depends(get_layout_store),
    building_store: BuildingMetadataStore = Depends(get_building_store),
    floor_store: FloorLayoutStore = Depends(get_floor_store),
):
    """
    Convert a zipped shapefile (.shp/.shx/.dbf) into the building's common layout.

    The building footprint is the feature typed "building" (else the largest
    one); other features become rooms in the footprint's unit square. With no
    room features, rooms come from the lowest saved floor layout instead.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    building_id = parse_bid(bid)

    archive = await file.read()
    if len(archive) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"Archive exceeds {MAX_UPLOAD_MB} MB")
    logger.info(f"Uploaded {file.filename} ({len(archive)} bytes) for BID {building_id}")

    try:
        layout = await import_common_layout(
            building_id, archive, layout_store, building_store, floor_store
        )
        response = UploadLayoutResponse(success=True, layout=layout)
    except LayoutImportError as e:
        logger.warning(f"Layout import for BID {building_id} failed: {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception:
        logger.exception(f"Unexpected error importing layout for BID {building_id}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to import layout"},
        )

    return response


@router.get("/common-layouts")
async def list_common_layouts(layout_store: CommonLayoutStore = Depends(get_layout_store)):
    """Return every converted building layout as a FeatureCollection."""
    return await layout_store.read()


@router.get("/common-layouts/{bid}")
async def get_common_layout(bid: int, layout_store: CommonLayoutStore = Depends(get_layout_store)):
    record = await layout_store.find(bid)
    if record is None:
        raise HTTPException(status_code=404, detail="No layout found for this BID")
    return record
