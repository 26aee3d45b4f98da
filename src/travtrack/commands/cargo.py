from __future__ import annotations

import shlex
from typing import Any, Dict, List

from travtrack.constants import SHIP_CARGO
from travtrack.services.cargo import COL_ITEM, COL_PROFIT, new_cargo_row, sell_cargo_row
from travtrack.services.finance import format_credits
from travtrack.ui.formatters import format_cargo

from ._helpers import ArgError, parse_index, report_sync

CARGO_USAGE = (
    'Usage: cargo | cargo add "<route>" "<item>" <tons> "<world>" <price> | '
    'cargo sell <n> "<world>" <price> [fees]'
)


def _add(parts: List[str], ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    if len(parts) < 5:
        bus.push("SYSTEM/WARN", CARGO_USAGE)
        return
    route, item, tons, world, price = parts[:5]
    try:
        row = new_cargo_row(route, item, tons, world, price, broker=" ".join(parts[5:]))
    except ValueError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    actions = ctx["collections"]
    stored = actions.add_row(SHIP_CARGO, row)
    bus.push("SYSTEM/OK", f"Loaded {stored['Tons']:g} tons of {stored[COL_ITEM]} for {route}.")
    report_sync(ctx, actions)


def _sell(parts: List[str], ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    if len(parts) < 3:
        bus.push("SYSTEM/WARN", CARGO_USAGE)
        return
    actions = ctx["collections"]
    try:
        index = parse_index(parts[0])
        rows = actions.collection(SHIP_CARGO)
        if index >= len(rows):
            raise ArgError(f"No cargo leg {index + 1}.")
        changes = sell_cargo_row(rows[index], parts[1], parts[2], parts[3] if len(parts) > 3 else None)
    except (ArgError, ValueError) as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    row = actions.update_row(SHIP_CARGO, index, changes)
    if row is None:
        bus.push("SYSTEM/WARN", f"No cargo leg {index + 1}.")
        return
    bus.push("SYSTEM/OK", f"Sold {row[COL_ITEM]} at {parts[1]}: profit {format_credits(row[COL_PROFIT])}.")
    report_sync(ctx, actions)


def cargo_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        parts = shlex.split(arg or "")
    except ValueError as exc:
        bus.push("SYSTEM/WARN", f"Could not parse arguments: {exc}")
        return
    if not parts:
        bus.push("SYSTEM/OK", format_cargo(ctx["collections"].collection(SHIP_CARGO)))
        return
    sub, rest = parts[0].lower(), parts[1:]
    if sub == "add":
        _add(rest, ctx)
    elif sub == "sell":
        _sell(rest, ctx)
    else:
        bus.push("SYSTEM/WARN", CARGO_USAGE)


def register(dispatch, ctx) -> None:
    dispatch.register("cargo", lambda arg: cargo_cmd(arg, ctx))
