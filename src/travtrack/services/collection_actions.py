"""Add, edit and remove rows of any campaign collection.

Every change follows the same path: build the new list, replace the owning
list in the live state, commit it through the state manager, then queue the
matching remote write on the sync outbox and flush it best-effort.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from travtrack.constants import CAMPAIGN_AGGREGATES, CHARACTER_AGGREGATES
from travtrack.engine import campaign
from travtrack.services.sync_outbox import SyncOutbox, SyncReport
from travtrack.state.manager import StateManager

LOG = logging.getLogger(__name__)

Row = Dict[str, Any]
Inserter = Callable[[Sequence[Row], Row], List[Row]]


def _without_id(row: Mapping[str, Any]) -> Row:
    return {k: v for k, v in row.items() if k != "id"}


class CollectionActions:
    def __init__(
        self,
        state_manager: StateManager,
        outbox: SyncOutbox,
        *,
        campaign_id: str = "default",
        auto_flush: bool = True,
    ) -> None:
        self.state_manager = state_manager
        self.outbox = outbox
        self.campaign_id = campaign_id
        self.auto_flush = auto_flush
        self.last_report: Optional[SyncReport] = None

    # ------------------------------------------------------------------
    def _target(self, key: str, pc: Optional[str]) -> Tuple[str, str]:
        """Return (aggregate, owner id) for collection ``key``."""

        if pc is None:
            return CAMPAIGN_AGGREGATES[key], self.campaign_id
        return CHARACTER_AGGREGATES[key], pc

    def collection(self, key: str, pc: Optional[str] = None) -> List[Row]:
        return campaign.get_collection(self.state_manager.state, key, pc)

    def _lookup(self, key: str, pc: Optional[str], index: int) -> Optional[List[Row]]:
        try:
            rows = self.collection(key, pc)
        except KeyError:
            LOG.warning("Unknown character %r", pc)
            return None
        if index < 0 or index >= len(rows):
            LOG.warning("No %s entry %d for %s", key, index, pc or "party")
            return None
        return rows

    def _commit(self, key: str, pc: Optional[str], rows: List[Row]) -> None:
        campaign.replace_collection(self.state_manager.state, key, rows, pc)
        self.state_manager.commit()

    def _queue(
        self,
        op: str,
        key: str,
        pc: Optional[str],
        *,
        row_id: str,
        payload: Optional[Row] = None,
    ) -> None:
        aggregate, owner_id = self._target(key, pc)
        self.outbox.enqueue(
            op,
            aggregate,
            owner_id=owner_id if op == "add" else None,
            row_id=row_id,
            payload=payload,
        )
        if self.auto_flush:
            self.last_report = self.outbox.flush()

    def _replace(
        self,
        key: str,
        pc: Optional[str],
        rows: List[Row],
        index: int,
        new_row: Row,
        *,
        payload: Optional[Row] = None,
    ) -> Row:
        new_rows = list(rows)
        new_rows[index] = new_row
        self._commit(key, pc, new_rows)

        row_id = new_row.get("id")
        if row_id:
            self._queue(
                "update",
                key,
                pc,
                row_id=str(row_id),
                payload=_without_id(new_row) if payload is None else payload,
            )
        return dict(new_row)

    # ------------------------------------------------------------------
    def add_row(
        self,
        key: str,
        row: Mapping[str, Any],
        pc: Optional[str] = None,
        *,
        insert: Optional[Inserter] = None,
    ) -> Row:
        """Store ``row`` under a fresh id and queue the remote add.

        ``insert`` builds the new list from the current rows and the new row
        (a ledger keeps date order, for instance); by default the row goes
        last. Raises ``KeyError`` for an unknown character or collection.
        """

        rows = self.collection(key, pc)
        new_row: Row = {"id": uuid.uuid4().hex, **_without_id(row)}
        new_rows = insert(rows, new_row) if insert is not None else [*rows, new_row]
        self._commit(key, pc, new_rows)

        stored = next((r for r in new_rows if r.get("id") == new_row["id"]), new_row)
        self._queue("add", key, pc, row_id=new_row["id"], payload=_without_id(stored))
        return dict(stored)

    def update_row(
        self, key: str, index: int, changes: Mapping[str, Any], pc: Optional[str] = None
    ) -> Optional[Row]:
        """Merge ``changes`` into entry ``index``; the row id never changes."""

        rows = self._lookup(key, pc, index)
        if rows is None:
            return None
        new_row = dict(rows[index])
        new_row.update(_without_id(changes))
        return self._replace(key, pc, rows, index, new_row)

    def remove_row(self, key: str, index: int, pc: Optional[str] = None) -> Optional[Row]:
        rows = self._lookup(key, pc, index)
        if rows is None:
            return None
        removed = rows[index]
        self._commit(key, pc, [row for i, row in enumerate(rows) if i != index])

        row_id = removed.get("id")
        if row_id:
            self._queue("delete", key, pc, row_id=str(row_id))
        return dict(removed)
