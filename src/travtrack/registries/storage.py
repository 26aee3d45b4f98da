from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any, Dict, List, Mapping, Optional, Protocol

from travtrack.constants import CAMPAIGN_AGGREGATES, CHARACTER_AGGREGATES
from travtrack.env import get_snapshot_backend as _get_snapshot_backend
from travtrack.env import get_snapshot_dir

from .json_store import JSONSnapshotSlot
from .sqlite_store import get_stores as sqlite_get_stores

__all__ = [
    "CollectionRepository",
    "SnapshotSlot",
    "CampaignStores",
    "get_snapshot_backend",
    "get_stores",
]


class CollectionRepository(Protocol):
    def list(self, owner_id: str) -> List[Dict[str, Any]]: ...

    def add(self, owner_id: str, row: Mapping[str, Any]) -> Dict[str, Any]: ...

    def update(self, row_id: str, partial: Mapping[str, Any]) -> None: ...

    def delete(self, row_id: str) -> None: ...


class SnapshotSlot(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


@dataclass(frozen=True)
class CampaignStores:
    collections: Dict[str, CollectionRepository]
    snapshot: SnapshotSlot

    def repository(self, aggregate: str) -> CollectionRepository:
        try:
            return self.collections[aggregate]
        except KeyError:
            raise KeyError(f"Unknown aggregate: {aggregate}") from None

    def for_collection(self, key: str, *, character: bool = False) -> CollectionRepository:
        """Return the repository backing the state collection ``key``."""

        aggregates = CHARACTER_AGGREGATES if character else CAMPAIGN_AGGREGATES
        return self.repository(aggregates[key])


def get_snapshot_backend() -> str:
    return _get_snapshot_backend()


def get_stores(db_path: Optional[os.PathLike[str] | str] = None) -> CampaignStores:
    backend = get_snapshot_backend()
    stores = sqlite_get_stores(db_path)
    if backend == "sqlite":
        return stores
    if backend == "json":
        return CampaignStores(collections=stores.collections, snapshot=JSONSnapshotSlot(get_snapshot_dir()))
    raise ValueError(f"Unsupported snapshot backend: {backend}")
