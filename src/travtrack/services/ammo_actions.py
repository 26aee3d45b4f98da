"""Fire, reload and edit ammunition rows held in the campaign state.

The engine's row wrappers compute the next row; it is committed and synced
like any other collection change (see :mod:`travtrack.services.collection_actions`).
A call that leaves the stored row exactly as it was (firing an empty weapon,
reloading a full one) touches neither the snapshot nor the outbox. A row that
only needed normalising, such as a stale ``"Total Rounds"``, is written back.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from travtrack.constants import AMMO_TRACKER, PC_AMMO
from travtrack.engine.ammo import (
    COL_MAGAZINE_SIZE,
    AmmoRecord,
    fire_round_row,
    new_ammo_record,
    reload_weapon_row,
)
from travtrack.services.collection_actions import CollectionActions

RowAction = Callable[[Dict[str, Any]], Dict[str, Any]]


def _sync_columns(row: Dict[str, Any]) -> Dict[str, Any]:
    record = AmmoRecord.from_row(row)
    return {COL_MAGAZINE_SIZE: record.magazine_size, **record.quantities()}


class AmmoActions(CollectionActions):
    @staticmethod
    def _key(pc: Optional[str]) -> str:
        return AMMO_TRACKER if pc is None else PC_AMMO

    def rows(self, pc: Optional[str] = None) -> List[Dict[str, Any]]:
        """Ammunition rows of ``pc``; ``pc=None`` is the party pool."""

        return self.collection(self._key(pc), pc)

    def _apply(self, pc: Optional[str], index: int, action: RowAction) -> Optional[Dict[str, Any]]:
        key = self._key(pc)
        rows = self._lookup(key, pc, index)
        if rows is None:
            return None
        current_row = rows[index]
        new_row = action(current_row)
        if new_row == current_row:
            return dict(current_row)
        return self._replace(key, pc, rows, index, new_row, payload=_sync_columns(new_row))

    def fire_round(self, pc: Optional[str], index: int) -> Optional[Dict[str, Any]]:
        """Fire one round from entry ``index``; ``pc=None`` uses the party pool."""

        return self._apply(pc, index, fire_round_row)

    def reload_weapon(self, pc: Optional[str], index: int) -> Optional[Dict[str, Any]]:
        return self._apply(pc, index, reload_weapon_row)

    # ------------------------------------------------------------------
    def add_ammo(self, pc: Optional[str], weapon: str, **fields: Any) -> Dict[str, Any]:
        """Validate and append a new ammunition entry.

        Raises :class:`~travtrack.engine.ammo.AmmoValidationError` for bad
        input and ``KeyError`` for an unknown character.
        """

        record = new_ammo_record(weapon, **fields)
        return self.add_row(self._key(pc), record.to_row(), pc)

    def update_ammo(self, pc: Optional[str], index: int, row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Replace entry ``index`` with an edited row.

        The edit is normalised through :class:`AmmoRecord`, so a supplied
        ``"Total Rounds"`` that disagrees with the other columns is replaced.
        """

        key = self._key(pc)
        rows = self._lookup(key, pc, index)
        if rows is None:
            return None
        base = dict(rows[index])
        base.update({k: v for k, v in row.items() if k != "id"})
        return self._replace(key, pc, rows, index, AmmoRecord.from_row(base).to_row(base))

    def remove_ammo(self, pc: Optional[str], index: int) -> Optional[Dict[str, Any]]:
        return self.remove_row(self._key(pc), index, pc)
