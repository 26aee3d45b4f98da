from __future__ import annotations

import shlex
from typing import Any, Dict, Optional, Tuple

from travtrack.constants import PARTY_FINANCES, PC_FINANCE, SHIP_ACCOUNTS, TRANSACTION_CATEGORIES
from travtrack.services.finance import (
    COL_AMOUNT,
    COL_CATEGORY,
    COL_DATE,
    COL_DESCRIPTION,
    add_transaction,
    calculate_running_totals,
    format_credits,
    transaction_summary,
    validate_transaction,
)
from travtrack.ui.formatters import format_ledger

from ._helpers import ArgError, owner_label, report_sync, resolve_character

TX_USAGE = 'Usage: tx <pc|party|ship> <date> <Income|Expense|Transfer> <amount> "<description>"'


def _ledger_target(ctx: Dict[str, Any], token: str) -> Tuple[str, Optional[str], str]:
    """Return (collection, character, title) for an owner token."""

    if (token or "").strip().lower() == "ship":
        return SHIP_ACCOUNTS, None, "Ship account"
    pc = resolve_character(ctx, token)
    if pc is None:
        return PARTY_FINANCES, None, "Party funds"
    return PC_FINANCE, pc, owner_label(pc)


def _parse_amount(token: str) -> float:
    try:
        return float(token.replace(",", ""))
    except ValueError:
        raise ArgError(f'"{token}" is not an amount in credits.') from None


def _parse_category(token: str) -> str:
    for category in TRANSACTION_CATEGORIES:
        if category.lower() == token.lower():
            return category
    raise ArgError(f"Category must be one of {', '.join(TRANSACTION_CATEGORIES)}.")


def tx_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        parts = shlex.split(arg or "")
    except ValueError as exc:
        bus.push("SYSTEM/WARN", f"Could not parse arguments: {exc}")
        return
    if len(parts) < 5:
        bus.push("SYSTEM/WARN", TX_USAGE)
        return
    try:
        key, pc, title = _ledger_target(ctx, parts[0])
        transaction = {
            COL_DATE: parts[1],
            COL_CATEGORY: _parse_category(parts[2]),
            COL_AMOUNT: _parse_amount(parts[3]),
            COL_DESCRIPTION: " ".join(parts[4:]),
        }
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    errors = validate_transaction(transaction)
    if errors:
        bus.push("SYSTEM/WARN", "; ".join(errors) + ".")
        return

    actions = ctx["collections"]
    try:
        row = actions.add_row(key, transaction, pc, insert=add_transaction)
    except KeyError:
        bus.push("SYSTEM/WARN", f"{title} has no character sheet.")
        return
    bus.push(
        "SYSTEM/OK",
        f"{title}: {row[COL_CATEGORY]} {format_credits(row[COL_AMOUNT])} "
        f"({row[COL_DESCRIPTION]}). Balance {format_credits(row['Running Total'])}.",
    )
    report_sync(ctx, actions)


def ledger_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        key, pc, title = _ledger_target(ctx, arg)
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    try:
        rows = ctx["collections"].collection(key, pc)
    except KeyError:
        bus.push("SYSTEM/WARN", f"{title} has no character sheet.")
        return
    bus.push("SYSTEM/OK", format_ledger(title, calculate_running_totals(rows), transaction_summary(rows)))


def register(dispatch, ctx) -> None:
    dispatch.register("tx", lambda arg: tx_cmd(arg, ctx))
    dispatch.register("ledger", lambda arg: ledger_cmd(arg, ctx))
