"""Zipped shapefile → list of GeoJSON-style features.

A shapefile archive bundles ``.shp`` (geometry), ``.shx`` (index) and
``.dbf`` (attributes), optionally ``.prj``/``.cpg``. Layers are decoded
with geopandas and returned as plain dicts::

    {"type": "Feature", "geometry": {...}, "properties": {...}}

Property names are left exactly as the DBF spells them.
"""

import io
import json
import logging
import tempfile
import zipfile
from collections import defaultdict
from pathlib import Path, PurePosixPath

import geopandas as gpd

from services.errors import ArchiveParseError, EmptyFeatureSetError

logger = logging.getLogger(__name__)

REQUIRED_EXTENSIONS = (".shp", ".shx", ".dbf")
OPTIONAL_EXTENSIONS = (".prj", ".cpg")
WGS84_EPSG = 4326


def load_features(archive: bytes) -> list[dict]:
    """
    Decode every shapefile layer in *archive* and concatenate the features.

    Raises ArchiveParseError for anything that is not a readable shapefile
    zip and EmptyFeatureSetError when the layers decode to zero features.
    """
    if not archive:
        raise ArchiveParseError("Uploaded archive is empty")

    try:
        zf = zipfile.ZipFile(io.BytesIO(archive))
    except zipfile.BadZipFile as e:
        raise ArchiveParseError("Invalid .zip - must include .shp, .dbf, .shx") from e

    features: list[dict] = []
    with zf, tempfile.TemporaryDirectory(prefix="shp_") as tmp_dir:
        for shp_path in _extract_layers(zf, Path(tmp_dir)):
            features.extend(_read_layer(shp_path))

    if not features:
        raise EmptyFeatureSetError("Shapefile contains no features")

    logger.info("Parsed shapefile archive: %d features", len(features))
    return features


def _extract_layers(zf: zipfile.ZipFile, target: Path) -> list[Path]:
    """Write each complete .shp/.shx/.dbf group to *target*; return the .shp paths."""
    groups: dict[str, dict[str, zipfile.ZipInfo]] = defaultdict(dict)
    for info in zf.infolist():
        if info.is_dir():
            continue
        member = PurePosixPath(info.filename)
        # macOS resource forks ship as __MACOSX/._name.shp
        if member.name.startswith("._") or "__MACOSX" in member.parts:
            continue
        ext = member.suffix.lower()
        if ext in REQUIRED_EXTENSIONS + OPTIONAL_EXTENSIONS:
            stem = str(member.with_suffix("")).lower()
            groups[stem][ext] = info

    layers = sorted(stem for stem, parts in groups.items() if ".shp" in parts)
    if not layers:
        raise ArchiveParseError("Invalid .zip - no .shp file found")

    shp_paths = []
    for n, stem in enumerate(layers):
        parts = groups[stem]
        missing = [ext for ext in REQUIRED_EXTENSIONS if ext not in parts]
        if missing:
            raise ArchiveParseError(
                f"Invalid .zip - layer '{PurePosixPath(stem).name}' is missing {', '.join(missing)}"
            )
        # Members are written under a generated name so archive paths never escape target
        base = target / f"layer{n}"
        for ext, info in parts.items():
            try:
                data = zf.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                raise ArchiveParseError(f"Could not extract '{info.filename}': {e}") from e
            base.with_suffix(ext).write_bytes(data)
        shp_paths.append(base.with_suffix(".shp"))
    return shp_paths


def _read_layer(shp_path: Path) -> list[dict]:
    try:
        gdf = gpd.read_file(shp_path)
        if gdf.crs is not None and gdf.crs.to_epsg() != WGS84_EPSG:
            logger.info("Reprojecting layer from %s to EPSG:%d", gdf.crs, WGS84_EPSG)
            gdf = gdf.to_crs(epsg=WGS84_EPSG)
        collection = json.loads(gdf.to_json(na="null", drop_id=True, default=str))
    except Exception as e:
        logger.warning(f"Shapefile decode failed for {shp_path.name}: {e}")
        raise ArchiveParseError(f"Could not decode shapefile: {e}") from e

    return [
        {
            "type": "Feature",
            "geometry": f.get("geometry"),
            "properties": f.get("properties") or {},
        }
        for f in collection.get("features", [])
        if f.get("geometry")
    ]
