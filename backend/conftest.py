"""Shared pytest fixtures for the layout import tests."""

import io
import zipfile
from pathlib import Path
from types import SimpleNamespace

import geopandas as gpd
import pytest
from shapely.geometry import box

from services.stores import BuildingMetadataStore, CommonLayoutStore, FloorLayoutStore


def feature(geom, **props) -> dict:
    """GeoJSON-style feature dict from a shapely geometry."""
    return {"type": "Feature", "geometry": geom.__geo_interface__, "properties": props}


def shapefile_zip(tmp_dir: Path, records, crs="EPSG:4326", layer="layout",
                  skip=()) -> bytes:
    """
    Write ``[(geometry, props), ...]`` as an ESRI shapefile and zip it.

    Extensions listed in *skip* are left out of the archive.
    """
    columns = sorted({key for _, props in records for key in props})
    rows = [
        dict({key: props.get(key) for key in columns}, seq=i)
        for i, (_, props) in enumerate(records)
    ]
    gdf = gpd.GeoDataFrame(rows, geometry=[g for g, _ in records], crs=crs)
    out_dir = tmp_dir / f"shp_{layer}"
    out_dir.mkdir(parents=True, exist_ok=True)
    gdf.to_file(out_dir / f"{layer}.shp", driver="ESRI Shapefile")

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for path in sorted(out_dir.iterdir()):
            if path.suffix.lower() in skip:
                continue
            zf.write(path, arcname=f"{layer}/{path.name}")
    return buf.getvalue()


BUILDING = box(77.0, 28.0, 77.001, 28.001)
ROOM_A = box(77.0, 28.0, 77.0005, 28.0005)
ROOM_B = box(77.0005, 28.0005, 77.001, 28.001)


@pytest.fixture
def stores(tmp_path: Path) -> SimpleNamespace:
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        layouts=CommonLayoutStore(data_dir / "BuildingCommonFloorLayout.json"),
        buildings=BuildingMetadataStore(data_dir / "createBuilding.geojson"),
        floors=FloorLayoutStore(data_dir / "floorLayouts.json"),
    )


@pytest.fixture
def building_archive(tmp_path: Path) -> bytes:
    """One tagged building and two tagged rooms."""
    return shapefile_zip(tmp_path, [
        (BUILDING, {"type": "building", "name": "Block A"}),
        (ROOM_A, {"type": "room", "name": "Kitchen", "room_id": "r1"}),
        (ROOM_B, {"type": "room", "name": "Hall", "room_id": "r2"}),
    ])
