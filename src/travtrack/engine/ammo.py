"""Ammunition bookkeeping for a single weapon.

A weapon's ammunition is tracked as rounds in the active magazine, full spare
magazines and loose rounds. :func:`fire_round` and :func:`reload_weapon` are
the only operations that move rounds between those pools; both are pure and
safe to call in any state (running dry or reloading a full weapon is a no-op,
not an error).

Persisted rows use the spreadsheet column names (``"Rounds Loaded"`` and so
on). The stored ``"Total Rounds"`` is never trusted: it is recomputed from the
other columns whenever a record is written back.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from travtrack.util import coerce_count, coerce_number

LOG = logging.getLogger(__name__)

COL_WEAPON = "Weapon"
COL_AMMO_TYPE = "Ammo Type"
COL_MAGAZINE_SIZE = "Magazine Size"
COL_ROUNDS_LOADED = "Rounds Loaded"
COL_SPARE_MAGAZINES = "Spare Magazines"
COL_LOOSE_ROUNDS = "Loose Rounds"
COL_TOTAL_ROUNDS = "Total Rounds"
COL_COST = "Cost"
COL_NOTES = "Notes"


class AmmoValidationError(ValueError):
    """Raised when a new ammunition entry is rejected."""


def total_rounds(rounds_loaded: int, spare_magazines: int, magazine_size: int, loose_rounds: int) -> int:
    return rounds_loaded + spare_magazines * magazine_size + loose_rounds


@dataclass(frozen=True)
class AmmoRecord:
    """Ammunition state for one weapon."""

    weapon: str
    magazine_size: int = 0
    rounds_loaded: int = 0
    spare_magazines: int = 0
    loose_rounds: int = 0
    ammo_type: str = ""
    cost: Optional[float] = None
    notes: str = ""

    @property
    def total_rounds(self) -> int:
        return total_rounds(
            self.rounds_loaded, self.spare_magazines, self.magazine_size, self.loose_rounds
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AmmoRecord":
        """Build a record from a persisted row.

        Counts are coerced leniently (``"30"`` → 30, junk → 0). Rounds loaded
        beyond the magazine size are moved to the loose pile so nothing is
        lost and ``rounds_loaded`` stays within the magazine.
        """

        magazine_size = coerce_count(row.get(COL_MAGAZINE_SIZE))
        rounds_loaded = coerce_count(row.get(COL_ROUNDS_LOADED))
        loose_rounds = coerce_count(row.get(COL_LOOSE_ROUNDS))
        if rounds_loaded > magazine_size:
            overflow = rounds_loaded - magazine_size
            LOG.warning(
                "%s: %d rounds loaded exceeds magazine size %d; moving %d to loose rounds",
                row.get(COL_WEAPON),
                rounds_loaded,
                magazine_size,
                overflow,
            )
            rounds_loaded = magazine_size
            loose_rounds += overflow

        raw_cost = row.get(COL_COST)
        cost = None if raw_cost in (None, "") else coerce_number(raw_cost)
        return cls(
            weapon=str(row.get(COL_WEAPON) or ""),
            magazine_size=magazine_size,
            rounds_loaded=rounds_loaded,
            spare_magazines=coerce_count(row.get(COL_SPARE_MAGAZINES)),
            loose_rounds=loose_rounds,
            ammo_type=str(row.get(COL_AMMO_TYPE) or ""),
            cost=cost,
            notes=str(row.get(COL_NOTES) or ""),
        )

    def to_row(self, base: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Return a persisted row for this record.

        Columns in ``base`` that the record does not describe (such as the
        remote ``"id"``) are carried over unchanged.
        """

        row: Dict[str, Any] = dict(base) if base else {}
        row[COL_WEAPON] = self.weapon
        row[COL_AMMO_TYPE] = self.ammo_type
        row[COL_MAGAZINE_SIZE] = self.magazine_size
        row.update(self.quantities())
        if self.cost is None:
            row.pop(COL_COST, None)
        else:
            row[COL_COST] = self.cost
        row[COL_NOTES] = self.notes
        return row

    def quantities(self) -> Dict[str, int]:
        """Return the engine-owned columns as one group."""

        return {
            COL_ROUNDS_LOADED: self.rounds_loaded,
            COL_SPARE_MAGAZINES: self.spare_magazines,
            COL_LOOSE_ROUNDS: self.loose_rounds,
            COL_TOTAL_ROUNDS: self.total_rounds,
        }


def _strict_count(name: str, value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise AmmoValidationError(f"{name} must be a whole number")
    if isinstance(value, float):
        if not value.is_integer():
            raise AmmoValidationError(f"{name} must be a whole number")
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise AmmoValidationError(f"{name} must be a whole number") from exc
    if not isinstance(value, int):
        raise AmmoValidationError(f"{name} must be a whole number")
    if value < 0:
        raise AmmoValidationError(f"{name} cannot be negative")
    return value


def new_ammo_record(
    weapon: str,
    *,
    magazine_size: Any = 0,
    rounds_loaded: Any = 0,
    spare_magazines: Any = 0,
    loose_rounds: Any = 0,
    ammo_type: str = "",
    cost: Any = None,
    notes: str = "",
) -> AmmoRecord:
    """Validate the "add ammunition" form and return the new record."""

    name = (weapon or "").strip()
    if not name:
        raise AmmoValidationError("Weapon is required")

    size = _strict_count("Magazine size", magazine_size)
    loaded = _strict_count("Rounds loaded", rounds_loaded)
    if loaded > size:
        raise AmmoValidationError(
            f"Rounds loaded ({loaded}) cannot exceed the magazine size ({size})"
        )

    if cost in (None, ""):
        parsed_cost = None
    else:
        parsed_cost = coerce_number(cost, default=-1.0)
        if parsed_cost < 0:
            raise AmmoValidationError("Cost must be a non-negative number")

    return AmmoRecord(
        weapon=name,
        magazine_size=size,
        rounds_loaded=loaded,
        spare_magazines=_strict_count("Spare magazines", spare_magazines),
        loose_rounds=_strict_count("Loose rounds", loose_rounds),
        ammo_type=(ammo_type or "").strip(),
        cost=parsed_cost,
        notes=(notes or "").strip(),
    )


def fire_round(record: AmmoRecord) -> AmmoRecord:
    """Consume one round, reloading from the reserves first if the weapon is empty.

    Reserves are tried in order: a full spare magazine, then loose rounds
    (only when the weapon takes magazines). With nothing left the record is
    returned unchanged.
    """

    if record.rounds_loaded > 0:
        return replace(record, rounds_loaded=record.rounds_loaded - 1)

    # A spare magazine of a magazine-less weapon holds nothing to fire.
    if record.spare_magazines > 0 and record.magazine_size > 0:
        return replace(
            record,
            spare_magazines=record.spare_magazines - 1,
            rounds_loaded=record.magazine_size - 1,
        )

    if record.loose_rounds > 0 and record.magazine_size > 0:
        loaded = min(record.loose_rounds, record.magazine_size)
        return replace(
            record,
            loose_rounds=record.loose_rounds - loaded,
            rounds_loaded=loaded - 1,
        )

    return record


def reload_weapon(record: AmmoRecord) -> AmmoRecord:
    """Refill the active magazine.

    A fresh spare magazine replaces whatever is loaded; the rounds left in the
    ejected magazine go back to the loose pile. Otherwise loose rounds top the
    magazine up as far as they go. Reloading never creates or destroys rounds;
    keeping the ejected rounds instead of throwing them away is deliberate.
    """

    if record.rounds_loaded >= record.magazine_size:
        return record

    if record.spare_magazines > 0:
        return replace(
            record,
            spare_magazines=record.spare_magazines - 1,
            rounds_loaded=record.magazine_size,
            loose_rounds=record.loose_rounds + record.rounds_loaded,
        )

    if record.loose_rounds > 0:
        to_load = min(record.loose_rounds, record.magazine_size - record.rounds_loaded)
        return replace(
            record,
            loose_rounds=record.loose_rounds - to_load,
            rounds_loaded=record.rounds_loaded + to_load,
        )

    return record


def fire_round_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Fire one round for a persisted row.

    The result is always a new, normalised row, even when nothing was fired,
    so a stale ``"Total Rounds"`` or an overfilled magazine is corrected.
    """

    return _apply_to_row(row, fire_round)


def reload_weapon_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    return _apply_to_row(row, reload_weapon)


def _apply_to_row(
    row: Mapping[str, Any], action: Callable[[AmmoRecord], AmmoRecord]
) -> Dict[str, Any]:
    return action(AmmoRecord.from_row(row)).to_row(row)
