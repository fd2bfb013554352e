"""
File-resident JSON documents used by the layout import.

Concurrency contract
--------------------
* One server process owns the data directory.
* Each document object holds an ``asyncio.Lock``; every read-modify-write
  runs under it, so concurrent upserts are serialized whatever their BID.
  The lock is created on first use and replaced when the running event
  loop changes, so a cached store can be shared across loops.
* Writes go to a temp file in the same directory and are swapped in with
  ``os.replace``; readers see either the old or the new document.
* File I/O runs in the threadpool so the event loop is never blocked.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi.concurrency import run_in_threadpool

from services.errors import PersistenceError

logger = logging.getLogger(__name__)


def same_bid(value: Any, bid: Any) -> bool:
    """BIDs compare numerically when both sides parse as numbers ("42" == 42)."""
    if value is None or bid is None:
        return False
    try:
        return float(value) == float(bid)
    except (TypeError, ValueError):
        return str(value) == str(bid)


def feature_bid(feature: Any) -> Any:
    if not isinstance(feature, dict):
        return None
    return (feature.get("properties") or {}).get("BID")


class JsonDocument:
    """A whole JSON document on disk, replaced wholesale on every write."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def empty(self) -> Any:
        return {}

    def is_valid(self, doc: Any) -> bool:
        return isinstance(doc, dict)

    # ---------- sync primitives (run in threadpool) ----------

    def read_sync(self, strict: bool = False) -> Any:
        """
        Load the document; a missing file is the empty document.

        With *strict*, an unreadable or wrongly shaped file raises
        PersistenceError instead of reading as empty.
        """
        if not self.path.exists():
            return self.empty()
        try:
            raw = self.path.read_text(encoding="utf-8")
            doc = json.loads(raw) if raw.strip() else self.empty()
        except (OSError, ValueError) as e:
            if strict:
                raise PersistenceError(f"Could not read {self.path.name}: {e}") from e
            logger.warning(f"Failed to read {self.path.name}: {e}")
            return self.empty()

        if not self.is_valid(doc):
            if strict:
                raise PersistenceError(f"{self.path.name} is not a valid document")
            logger.warning(f"{self.path.name} has unexpected shape, reading as empty")
            return self.empty()
        return doc

    def write_sync(self, doc: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(doc, tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not write {self.path.name}: {e}") from e

    # ---------- async API ----------

    def _document_lock(self) -> asyncio.Lock:
        # A lock belongs to one event loop; a new loop gets a fresh one.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def read(self) -> Any:
        return await run_in_threadpool(self.read_sync)

    async def update(self, mutate: Callable[[Any], Any]) -> Any:
        """Read, apply *mutate* in place, write back; all under the document lock."""
        async with self._document_lock():
            doc = await run_in_threadpool(self.read_sync, True)
            result = mutate(doc)
            await run_in_threadpool(self.write_sync, doc)
            return result


class FeatureCollectionDocument(JsonDocument):

    def empty(self) -> dict:
        return {"type": "FeatureCollection", "features": []}

    def is_valid(self, doc: Any) -> bool:
        return (
            isinstance(doc, dict)
            and doc.get("type") == "FeatureCollection"
            and isinstance(doc.get("features"), list)
        )

    async def find(self, bid: Any) -> Optional[dict]:
        doc = await self.read()
        for feature in doc["features"]:
            if same_bid(feature_bid(feature), bid):
                return feature
        return None


class CommonLayoutStore(FeatureCollectionDocument):
    """Converted per-building layouts; at most one feature per BID."""

    async def upsert(self, record: dict) -> bool:
        """Replace the record with the same BID or append it. Returns True if replaced."""
        bid = feature_bid(record)

        def apply(doc: dict) -> bool:
            features = doc["features"]
            for idx, feature in enumerate(features):
                if same_bid(feature_bid(feature), bid):
                    features[idx] = record
                    return True
            features.append(record)
            return False

        replaced = await self.update(apply)
        logger.info("%s layout record for BID %s", "Replaced" if replaced else "Inserted", bid)
        return replaced


class BuildingMetadataStore(FeatureCollectionDocument):
    """Building footprints created in the map editor, keyed by ``properties.BID``."""

    async def add(self, feature: dict) -> bool:
        """Append *feature*; False when its BID already exists."""
        bid = feature_bid(feature)

        def apply(doc: dict) -> bool:
            if any(same_bid(feature_bid(f), bid) for f in doc["features"]):
                return False
            doc["features"].append(feature)
            return True

        return await self.update(apply)


class FloorLayoutStore(JsonDocument):
    """Grid layouts keyed by ``"{BID}_floor_{N}"``; read-only for the import."""

    async def load(self) -> dict:
        return await self.read()
