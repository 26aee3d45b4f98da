"""Finance ledger helpers: running totals, balances and validation.

Income adds to a balance and Expense subtracts from it. Transfers (and any
other category) are neutral here; moving credits between funds is recorded
on both ledgers by the caller.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from travtrack.constants import (
    CHARACTERS_KEY,
    PARTY_FINANCES,
    PC_FINANCE,
    SHIP_ACCOUNTS,
    TRANSACTION_CATEGORIES,
)
from travtrack.util import coerce_number

COL_DATE = "Date"
COL_DESCRIPTION = "Description"
COL_CATEGORY = "Category"
COL_AMOUNT = "Amount (Cr)"
COL_RUNNING_TOTAL = "Running Total"


def _effect(row: Mapping[str, Any]) -> float:
    amount = coerce_number(row.get(COL_AMOUNT))
    category = row.get(COL_CATEGORY)
    if category == "Income":
        return amount
    if category == "Expense":
        return -amount
    return 0.0


def _tidy(value: float) -> float | int:
    return int(value) if float(value).is_integer() else value


def calculate_running_totals(
    rows: Iterable[Mapping[str, Any]], initial_balance: float = 0
) -> List[Dict[str, Any]]:
    """Return copies of ``rows`` with ``"Running Total"`` filled in."""

    running = initial_balance
    out: List[Dict[str, Any]] = []
    for row in rows:
        running += _effect(row)
        new_row = dict(row)
        new_row[COL_RUNNING_TOTAL] = _tidy(running)
        out.append(new_row)
    return out


def current_balance(rows: Iterable[Mapping[str, Any]], initial_balance: float = 0) -> float | int:
    total = initial_balance
    for row in rows:
        total += _effect(row)
    return _tidy(total)


def _date_key(row: Mapping[str, Any]) -> date:
    raw = str(row.get(COL_DATE) or "")
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return date.max


def add_transaction(
    rows: Iterable[Mapping[str, Any]],
    transaction: Mapping[str, Any],
    initial_balance: float = 0,
) -> List[Dict[str, Any]]:
    """Append ``transaction``, keep the ledger in date order and recompute totals.

    The sort is stable so same-day entries keep their entry order. Rows with an
    unreadable date sink to the end.
    """

    all_rows = [*rows, transaction]
    all_rows.sort(key=_date_key)
    return calculate_running_totals(all_rows, initial_balance)


def validate_transaction(transaction: Mapping[str, Any]) -> List[str]:
    """Return the problems with ``transaction``; an empty list means valid."""

    errors: List[str] = []
    if not str(transaction.get(COL_DESCRIPTION) or "").strip():
        errors.append("Description is required")
    if not transaction.get(COL_DATE):
        errors.append("Date is required")

    amount = transaction.get(COL_AMOUNT)
    if amount is None:
        errors.append("Amount is required")
    elif isinstance(amount, (int, float)) and not isinstance(amount, bool) and amount < 0:
        errors.append("Amount must be positive (use Expense category for negative impact)")

    if transaction.get(COL_CATEGORY) not in TRANSACTION_CATEGORIES:
        errors.append("Category must be Income, Expense, or Transfer")
    return errors


def transaction_summary(rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    income = 0.0
    expenses = 0.0
    count = 0
    for row in rows:
        amount = coerce_number(row.get(COL_AMOUNT))
        if row.get(COL_CATEGORY) == "Income":
            income += amount
        elif row.get(COL_CATEGORY) == "Expense":
            expenses += amount
        count += 1
    return {
        "total_income": _tidy(income),
        "total_expenses": _tidy(expenses),
        "net_change": _tidy(income - expenses),
        "transaction_count": count,
    }


def format_credits(amount: Any) -> str:
    """Format ``amount`` as whole credits, e.g. ``1234.5`` → ``"1,235 Cr"``."""

    value = Decimal(str(coerce_number(amount))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if value == 0:
        value = Decimal(0)
    return f"{int(value):,} Cr"


def balances(state: Mapping[str, Any], pc: Optional[str] = None) -> Dict[str, Any]:
    """Return the party, ship and (when ``pc`` is given) character balances."""

    result: Dict[str, Any] = {
        "party": current_balance(state.get(PARTY_FINANCES) or []),
        "ship": current_balance(state.get(SHIP_ACCOUNTS) or []),
    }
    if pc is not None:
        sheet = (state.get(CHARACTERS_KEY) or {}).get(pc) or {}
        result["character"] = current_balance(sheet.get(PC_FINANCE) or [])
    return result
