from __future__ import annotations

import pytest

from travtrack.engine.campaign import default_state
from travtrack.services.finance import (
    add_transaction,
    balances,
    calculate_running_totals,
    current_balance,
    format_credits,
    transaction_summary,
    validate_transaction,
)


def _tx(date, amount, category, description="entry"):
    return {"Date": date, "Description": description, "Category": category, "Amount (Cr)": amount}


LEDGER = [
    _tx("1105-001", 10000, "Income", "Charter"),
    _tx("1105-002", 2500, "Expense", "Fuel"),
    _tx("1105-003", 400, "Transfer", "To ship"),
]


def test_running_totals_apply_category_effect():
    out = calculate_running_totals(LEDGER, initial_balance=100)

    assert [row["Running Total"] for row in out] == [10100, 7600, 7600]
    assert "Running Total" not in LEDGER[0]


def test_current_balance_accepts_string_amounts():
    rows = [_tx("x", "1,000", "Income"), _tx("x", "250.5", "Expense")]
    assert current_balance(rows) == 749.5


def test_add_transaction_keeps_date_order():
    rows = [_tx("2024-01-01", 10, "Income", "a"), _tx("2024-03-01", 5, "Expense", "c")]
    out = add_transaction(rows, _tx("2024-02-01", 1, "Income", "b"))

    assert [row["Description"] for row in out] == ["a", "b", "c"]
    assert [row["Running Total"] for row in out] == [10, 11, 6]


def test_add_transaction_sorts_undated_rows_last():
    rows = [_tx("someday", 1, "Income", "late")]
    out = add_transaction(rows, _tx("2024-02-01", 1, "Income", "dated"))

    assert [row["Description"] for row in out] == ["dated", "late"]


def test_validate_transaction_lists_every_problem():
    assert validate_transaction(_tx("2024-01-01", 10, "Income")) == []
    assert validate_transaction({"Amount (Cr)": -5, "Category": "Bribe"}) == [
        "Description is required",
        "Date is required",
        "Amount must be positive (use Expense category for negative impact)",
        "Category must be Income, Expense, or Transfer",
    ]
    assert "Amount is required" in validate_transaction({"Category": "Income"})


def test_transaction_summary():
    assert transaction_summary(LEDGER) == {
        "total_income": 10000,
        "total_expenses": 2500,
        "net_change": 7500,
        "transaction_count": 3,
    }


@pytest.mark.parametrize(
    "amount, expected",
    [(0, "0 Cr"), (1234.5, "1,235 Cr"), (-1234.5, "-1,235 Cr"), ("2,000,000", "2,000,000 Cr"), (None, "0 Cr"), (-0.2, "0 Cr")],
)
def test_format_credits(amount, expected):
    assert format_credits(amount) == expected


def test_balances_for_party_ship_and_character():
    state = default_state(("Andrew",))
    state["Party_Finances"] = LEDGER
    state["Ship_Accounts"] = [_tx("x", 500, "Income")]
    state["PCs"]["Andrew"]["Finance"] = [_tx("x", 20, "Expense")]

    assert balances(state) == {"party": 7500, "ship": 500}
    assert balances(state, "Andrew") == {"party": 7500, "ship": 500, "character": -20}
