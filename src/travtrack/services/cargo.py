"""Speculative cargo legs."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from travtrack.util import coerce_number

COL_ROUTE = "Leg/Route"
COL_ITEM = "Item"
COL_TONS = "Tons"
COL_PURCHASE_WORLD = "Purchase World"
COL_PURCHASE_PRICE = "Purchase Price (Cr/ton)"
COL_SALE_WORLD = "Sale World"
COL_SALE_PRICE = "Sale Price (Cr/ton)"
COL_BROKER = "Broker (±DM)"
COL_FEES = "Fees/Taxes (Cr)"
COL_PROFIT = "Profit (Cr)"


def cargo_profit(
    tons: float,
    purchase_price: float,
    sale_price: Optional[float],
    fees: float = 0,
) -> Optional[float]:
    """Return the profit of a leg, or ``None`` while the cargo is unsold.

    Prices are per ton; fees and taxes are a flat amount for the whole leg.
    """

    if sale_price is None:
        return None
    profit = (sale_price - purchase_price) * tons - fees
    return int(profit) if float(profit).is_integer() else profit


def new_cargo_row(
    route: str,
    item: str,
    tons: Any,
    purchase_world: str,
    purchase_price: Any,
    *,
    sale_world: str = "",
    sale_price: Any = None,
    broker: str = "",
    fees: Any = 0,
) -> Dict[str, Any]:
    if not route or not item or not purchase_world:
        raise ValueError("Route, item and purchase world are required")
    tons_n = coerce_number(tons)
    buy = coerce_number(purchase_price)
    if tons_n <= 0:
        raise ValueError("Tons must be positive")
    sell = None if sale_price in (None, "") else coerce_number(sale_price)
    fees_n = coerce_number(fees)
    return {
        COL_ROUTE: route,
        COL_ITEM: item,
        COL_TONS: tons_n,
        COL_PURCHASE_WORLD: purchase_world,
        COL_PURCHASE_PRICE: buy,
        COL_SALE_WORLD: sale_world,
        COL_SALE_PRICE: sell,
        COL_BROKER: broker,
        COL_FEES: fees_n,
        COL_PROFIT: cargo_profit(tons_n, buy, sell, fees_n),
    }


def total_profit(rows: Iterable[Mapping[str, Any]]) -> float:
    """Sum the profit of every sold leg; unsold legs are skipped."""

    return sum(coerce_number(row.get(COL_PROFIT)) for row in rows if row.get(COL_PROFIT) is not None)


def sell_cargo_row(
    row: Mapping[str, Any], sale_world: str, sale_price: Any, fees: Any = None
) -> Dict[str, Any]:
    """Return the columns that change when the leg in ``row`` is sold.

    ``fees`` of ``None`` keeps the fees already recorded on the leg.
    """

    if not sale_world:
        raise ValueError("Sale world is required")
    sell = coerce_number(sale_price)
    if sell < 0:
        raise ValueError("Sale price cannot be negative")
    fees_n = coerce_number(row.get(COL_FEES)) if fees is None else coerce_number(fees)
    profit = cargo_profit(
        coerce_number(row.get(COL_TONS)),
        coerce_number(row.get(COL_PURCHASE_PRICE)),
        sell,
        fees_n,
    )
    return {
        COL_SALE_WORLD: sale_world,
        COL_SALE_PRICE: sell,
        COL_FEES: fees_n,
        COL_PROFIT: profit,
    }
