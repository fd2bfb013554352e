"""Application configuration via environment variables."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# JSON document stores
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)

COMMON_LAYOUT_FILE = DATA_DIR / os.getenv("COMMON_LAYOUT_FILE", "BuildingCommonFloorLayout.json")
BUILDINGS_FILE = DATA_DIR / os.getenv("BUILDINGS_FILE", "createBuilding.geojson")
FLOOR_LAYOUTS_FILE = DATA_DIR / os.getenv("FLOOR_LAYOUTS_FILE", "floorLayouts.json")

# Uploads
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "25"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
APP_VERSION = "1.0.0"

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
