"""Plain-text renderings of campaign collections for the console."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from travtrack.engine.ammo import AmmoRecord
from travtrack.services import cargo, finance, inventory
from travtrack.services.finance import format_credits
from travtrack.util import coerce_number

AMMO_HEADERS = ("#", "Weapon", "Type", "Mag", "Loaded", "Spare", "Loose", "Total")
LEDGER_HEADERS = ("#", "Date", "Category", "Amount", "Balance", "Description")
CARGO_HEADERS = ("#", "Route", "Item", "Tons", "Bought", "Sold", "Profit")
INVENTORY_HEADERS = ("#", "Item", "Qty", "Mass (kg)", "Value", "Location")


def format_table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    body = [[str(cell) for cell in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in body:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)).rstrip()]
    lines.append("  ".join("-" * w for w in widths))
    for row in body:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def format_ammo_rows(title: str, rows: Iterable[Mapping[str, Any]]) -> str:
    table: List[List[Any]] = []
    for idx, row in enumerate(rows, start=1):
        rec = AmmoRecord.from_row(row)
        table.append(
            [
                idx,
                rec.weapon,
                rec.ammo_type or "-",
                rec.magazine_size,
                rec.rounds_loaded,
                rec.spare_magazines,
                rec.loose_rounds,
                rec.total_rounds,
            ]
        )
    if not table:
        return f"{title}: no ammunition tracked."
    return f"{title}\n" + format_table(AMMO_HEADERS, table)


def format_ammo_line(row: Mapping[str, Any]) -> str:
    rec = AmmoRecord.from_row(row)
    return (
        f"{rec.weapon}: {rec.rounds_loaded}/{rec.magazine_size} loaded, "
        f"{rec.spare_magazines} spare, {rec.loose_rounds} loose ({rec.total_rounds} total)"
    )


def format_balances(balances: Dict[str, Any], pc: Optional[str] = None) -> str:
    lines = [
        f"Party funds: {format_credits(balances['party'])}",
        f"Ship account: {format_credits(balances['ship'])}",
    ]
    if "character" in balances:
        lines.append(f"{pc or 'Character'}: {format_credits(balances['character'])}")
    return "\n".join(lines)


def _qty(value: Any) -> str:
    number = coerce_number(value)
    return str(int(number)) if number.is_integer() else f"{number:g}"


def format_ledger(title: str, rows: Sequence[Mapping[str, Any]], summary: Mapping[str, Any]) -> str:
    if not rows:
        return f"{title}: no transactions."
    table = [
        [
            idx,
            row.get(finance.COL_DATE) or "-",
            row.get(finance.COL_CATEGORY) or "-",
            format_credits(row.get(finance.COL_AMOUNT)),
            format_credits(row.get(finance.COL_RUNNING_TOTAL)),
            row.get(finance.COL_DESCRIPTION) or "",
        ]
        for idx, row in enumerate(rows, start=1)
    ]
    footer = (
        f"{summary['transaction_count']} transaction(s): "
        f"income {format_credits(summary['total_income'])}, "
        f"expenses {format_credits(summary['total_expenses'])}, "
        f"net {format_credits(summary['net_change'])}"
    )
    return f"{title}\n" + format_table(LEDGER_HEADERS, table) + "\n" + footer


def format_cargo(rows: Sequence[Mapping[str, Any]]) -> str:
    if not rows:
        return "Ship cargo: no cargo legs."
    table = []
    for idx, row in enumerate(rows, start=1):
        sold = row.get(cargo.COL_SALE_PRICE)
        profit = row.get(cargo.COL_PROFIT)
        table.append(
            [
                idx,
                row.get(cargo.COL_ROUTE) or "",
                row.get(cargo.COL_ITEM) or "",
                _qty(row.get(cargo.COL_TONS)),
                f"{row.get(cargo.COL_PURCHASE_WORLD) or '?'} @ {format_credits(row.get(cargo.COL_PURCHASE_PRICE))}",
                "-" if sold is None else f"{row.get(cargo.COL_SALE_WORLD) or '?'} @ {format_credits(sold)}",
                "unsold" if profit is None else format_credits(profit),
            ]
        )
    footer = f"Realised profit: {format_credits(cargo.total_profit(rows))}"
    return "Ship cargo\n" + format_table(CARGO_HEADERS, table) + "\n" + footer


def format_inventory(title: str, rows: Sequence[Mapping[str, Any]]) -> str:
    if not rows:
        return f"{title}: inventory is empty."
    table = [
        [
            idx,
            row.get("Item") or "",
            _qty(row.get("Qty")),
            _qty(row.get(inventory.COL_TOTAL_MASS)),
            format_credits(row.get(inventory.COL_TOTAL_VALUE)),
            row.get("Location/Container") or "-",
        ]
        for idx, row in enumerate(rows, start=1)
    ]
    mass, value = inventory.inventory_totals(rows)
    footer = f"Carried: {_qty(mass)} kg, worth {format_credits(value)}"
    return f"{title}\n" + format_table(INVENTORY_HEADERS, table) + "\n" + footer
