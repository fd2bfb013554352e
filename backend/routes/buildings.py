from fastapi import APIRouter, Depends, HTTPException

from database import get_building_store
from schemas import BuildingFeatureIn, BuildingSaveResponse
from services.errors import PersistenceError
from services.stores import BuildingMetadataStore, feature_bid

router = APIRouter(prefix="/api", tags=["buildings"])


@router.get("/buildings")
async def list_buildings(store: BuildingMetadataStore = Depends(get_building_store)):
    """Return the editor's building footprints as a FeatureCollection."""
    return await store.read()


@router.post("/buildings", response_model=BuildingSaveResponse)
async def create_building(req: BuildingFeatureIn, store: BuildingMetadataStore = Depends(get_building_store)):
    """Store a new building footprint; its BID must be unique."""
    feature = req.feature
    if not feature or not feature.get("geometry"):
        raise HTTPException(status_code=400, detail="feature with geometry required")
    if feature_bid(feature) is None:
        raise HTTPException(status_code=400, detail="feature.properties.BID required")

    try:
        added = await store.add(feature)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=e.message)
    if not added:
        raise HTTPException(status_code=409, detail="Building with this BID already exists")
    return {"ok": True, "feature": feature}
