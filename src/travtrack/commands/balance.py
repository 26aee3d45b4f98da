from __future__ import annotations

from typing import Any, Dict

from travtrack.services.finance import balances
from travtrack.ui.formatters import format_balances

from ._helpers import ArgError, resolve_character


def balance_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        pc = resolve_character(ctx, arg)
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    state = ctx["state_manager"].state
    bus.push("SYSTEM/OK", format_balances(balances(state, pc), pc))


def register(dispatch, ctx) -> None:
    dispatch.register("balance", lambda arg: balance_cmd(arg, ctx))
