"""Service package exports."""

from .ammo_actions import AmmoActions
from .collection_actions import CollectionActions
from .sync_outbox import SyncOutbox, SyncReport

__all__ = ["AmmoActions", "CollectionActions", "SyncOutbox", "SyncReport"]
