from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Callable

from .constants import SCHEMA_VERSION
from .model import Roadmap

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class RoadmapStore(ABC):
    """Keyed collection of whole roadmap snapshots plus a last-active pointer."""

    @abstractmethod
    def list_roadmaps(self) -> list[Roadmap]:
        ...

    def get_roadmap(self, roadmap_id: str) -> Roadmap | None:
        for roadmap in self.list_roadmaps():
            if roadmap.id == roadmap_id:
                return roadmap
        return None

    @abstractmethod
    def put_roadmap(self, roadmap: Roadmap) -> None:
        ...

    @abstractmethod
    def delete_roadmap(self, roadmap_id: str) -> None:
        ...

    @abstractmethod
    def last_active_id(self) -> str | None:
        ...

    @abstractmethod
    def set_last_active_id(self, roadmap_id: str | None) -> None:
        ...


class MemoryRoadmapStore(RoadmapStore):
    def __init__(self, roadmaps: list[Roadmap] | None = None) -> None:
        self._roadmaps: list[Roadmap] = [replace(r) for r in roadmaps or []]
        self._last_active_id: str | None = None

    def list_roadmaps(self) -> list[Roadmap]:
        return [replace(r) for r in self._roadmaps]

    def put_roadmap(self, roadmap: Roadmap) -> None:
        _upsert(self._roadmaps, replace(roadmap), lambda r: r.id)

    def delete_roadmap(self, roadmap_id: str) -> None:
        self._roadmaps = [r for r in self._roadmaps if r.id != roadmap_id]

    def last_active_id(self) -> str | None:
        return self._last_active_id

    def set_last_active_id(self, roadmap_id: str | None) -> None:
        self._last_active_id = roadmap_id


class JsonRoadmapStore(RoadmapStore):
    """All roadmaps in one JSON document, rewritten atomically on every change.

    Entries are kept as they were read; only the roadmap being put or deleted
    is touched, so entries this version cannot decode survive every write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def list_roadmaps(self) -> list[Roadmap]:
        entries, _last = self._read()
        roadmaps = []
        for raw in entries:
            try:
                roadmaps.append(Roadmap.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skipping malformed roadmap in %s: %s", self.path, exc)
        return roadmaps

    def put_roadmap(self, roadmap: Roadmap) -> None:
        entries, last_active = self._read()
        _upsert(entries, roadmap.to_dict(), _entry_id)
        self._write(entries, last_active)

    def delete_roadmap(self, roadmap_id: str) -> None:
        entries, last_active = self._read()
        remaining = [raw for raw in entries if _entry_id(raw) != roadmap_id]
        if len(remaining) == len(entries):
            return
        if last_active == roadmap_id:
            last_active = None
        self._write(remaining, last_active)

    def last_active_id(self) -> str | None:
        _entries, last_active = self._read()
        return last_active

    def set_last_active_id(self, roadmap_id: str | None) -> None:
        entries, _last = self._read()
        self._write(entries, roadmap_id)

    def _read(self) -> tuple[list, str | None]:
        if not self.path.exists():
            return [], None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Could not read roadmap store {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Roadmap store {self.path} is malformed")
        schema_version = data.get("schema_version", 0)
        if schema_version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported schema version: {schema_version}")
        entries = data.get("roadmaps", [])
        if not isinstance(entries, list):
            raise StoreError(f"Roadmap store {self.path} is malformed")
        last_active = data.get("last_roadmap_id") or None
        return list(entries), last_active

    def _write(self, entries: list, last_active: str | None) -> None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "roadmaps": entries,
            "last_roadmap_id": last_active,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".roadmaps-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(temp_name, self.path)
        except OSError as exc:
            Path(temp_name).unlink(missing_ok=True)
            raise StoreError(f"Could not write roadmap store {self.path}: {exc}") from exc
        logger.debug("Wrote %d roadmaps to %s", len(entries), self.path)


def _entry_id(raw) -> str | None:
    if isinstance(raw, dict) and raw.get("id") is not None:
        return str(raw["id"])
    return None


def _upsert(items: list, item, key: Callable) -> None:
    item_id = key(item)
    for index, existing in enumerate(items):
        if key(existing) == item_id:
            items[index] = item
            return
    items.append(item)
