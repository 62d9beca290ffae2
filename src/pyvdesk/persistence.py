"""Loader/saver collaborators for the domain store.

The store treats both roles as fire-and-forget side calls: a failing
saver is logged and never changes in-memory state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pyvdesk.exceptions import PersistenceError

if TYPE_CHECKING:
    from pyvdesk.state.snapshot import StoreSnapshot

_logger = logging.getLogger(__name__)


class StoreData(BaseModel):
    """Serializable form of the store contents.

    Records and notifications are kept as plain camelCase dicts; the
    store validates them into models when loading.
    """

    model_config = ConfigDict(extra="ignore")

    collections: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    notifications: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> StoreData:
        return cls(
            collections={
                name: [record.model_dump(mode="json", by_alias=True) for record in records]
                for name, records in snapshot.collections.items()
            },
            notifications=[entry.model_dump(mode="json", by_alias=True) for entry in snapshot.notifications],
        )


class StoreLoader(Protocol):
    def load(self) -> StoreData: ...


class StoreSaver(Protocol):
    def save(self, snapshot: StoreSnapshot) -> None: ...


class MemoryPersistence:
    """Keeps the last saved data in memory; useful for tests and previews."""

    def __init__(self, data: StoreData | None = None) -> None:
        self.data = data or StoreData()
        self.saves = 0

    def load(self) -> StoreData:
        return self.data.model_copy(deep=True)

    def save(self, snapshot: StoreSnapshot) -> None:
        self.data = StoreData.from_snapshot(snapshot)
        self.saves += 1


class JsonFilePersistence:
    """Store contents as a single JSON document on disk.

    A missing file loads as an empty store. Saves go through a temporary
    file in the same directory and are then moved into place.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StoreData:
        if not self._path.exists():
            _logger.debug("No store file at %s; starting empty", self._path)
            return StoreData()
        try:
            return StoreData.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise PersistenceError(f"Could not read store file {self._path}: {exc}") from exc

    def save(self, snapshot: StoreSnapshot) -> None:
        payload = StoreData.from_snapshot(snapshot).model_dump_json(indent=2)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write store file {self._path}: {exc}") from exc
        _logger.debug("Saved store v%d to %s", snapshot.version, self._path)
