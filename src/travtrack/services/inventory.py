from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Tuple

from travtrack.util import coerce_number

COL_TOTAL_MASS = "Total Mass (kg)"
COL_TOTAL_VALUE = "Total Value (Cr)"


def inventory_row(
    item: str,
    qty: Any = 1,
    unit_mass: Any = 0,
    unit_value: Any = 0,
    *,
    location: str = "",
    notes: str = "",
) -> Dict[str, Any]:
    """Build an inventory row with the total mass and value filled in."""

    name = (item or "").strip()
    if not name:
        raise ValueError("Item is required")
    q = coerce_number(qty, default=1.0)
    mass = coerce_number(unit_mass)
    value = coerce_number(unit_value)
    return {
        "Item": name,
        "Qty": q,
        "Unit Mass (kg)": mass,
        COL_TOTAL_MASS: q * mass,
        "Unit Value (Cr)": value,
        COL_TOTAL_VALUE: q * value,
        "Location/Container": location,
        "Notes": notes,
    }


def inventory_totals(rows: Iterable[Mapping[str, Any]]) -> Tuple[float, float]:
    """Return ``(mass, value)`` summed over ``rows``."""

    mass = 0.0
    value = 0.0
    for row in rows:
        mass += coerce_number(row.get(COL_TOTAL_MASS))
        value += coerce_number(row.get(COL_TOTAL_VALUE))
    return mass, value
