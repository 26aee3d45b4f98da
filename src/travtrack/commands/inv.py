from __future__ import annotations

import shlex
from typing import Any, Dict, List, Optional

from travtrack.constants import PARTY_INVENTORY, PC_INVENTORY
from travtrack.services.inventory import inventory_row
from travtrack.ui.formatters import format_inventory

from ._helpers import ArgError, known_characters, owner_label, report_sync, resolve_character

INV_USAGE = 'Usage: inv [pc|party] | inv add <pc|party> "<item>" [qty] [mass] [value] [location]'


def _key(pc: Optional[str]) -> str:
    return PARTY_INVENTORY if pc is None else PC_INVENTORY


def _show(owners: List[Optional[str]], ctx: Dict[str, Any]) -> None:
    actions = ctx["collections"]
    blocks = []
    for pc in owners:
        try:
            blocks.append(format_inventory(owner_label(pc), actions.collection(_key(pc), pc)))
        except KeyError:
            blocks.append(f"{owner_label(pc)}: no character sheet.")
    ctx["feedback_bus"].push("SYSTEM/OK", "\n\n".join(blocks))


def _add(parts: List[str], ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    if len(parts) < 2:
        bus.push("SYSTEM/WARN", INV_USAGE)
        return
    given = parts[2:5]
    qty, mass, value = given + ["1", "0", "0"][len(given):]
    try:
        pc = resolve_character(ctx, parts[0])
        row = inventory_row(parts[1], qty, mass, value, location=" ".join(parts[5:]))
    except (ArgError, ValueError) as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    actions = ctx["collections"]
    try:
        stored = actions.add_row(_key(pc), row, pc)
    except KeyError:
        bus.push("SYSTEM/WARN", f"{owner_label(pc)} has no character sheet.")
        return
    bus.push("SYSTEM/OK", f"Added {stored['Qty']:g} x {stored['Item']} to {owner_label(pc)}.")
    report_sync(ctx, actions)


def inv_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        parts = shlex.split(arg or "")
    except ValueError as exc:
        bus.push("SYSTEM/WARN", f"Could not parse arguments: {exc}")
        return
    if parts and parts[0].lower() == "add":
        _add(parts[1:], ctx)
        return
    try:
        owners = [resolve_character(ctx, " ".join(parts))] if parts else [None, *known_characters(ctx)]
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    _show(owners, ctx)


def register(dispatch, ctx) -> None:
    dispatch.register("inv", lambda arg: inv_cmd(arg, ctx))
