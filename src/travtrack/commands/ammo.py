from __future__ import annotations

import shlex
from typing import Any, Dict, Optional

from travtrack.engine.ammo import AmmoRecord, AmmoValidationError
from travtrack.ui.formatters import format_ammo_line, format_ammo_rows

from ._helpers import (
    ArgError,
    known_characters,
    owner_label,
    parse_index,
    report_sync,
    resolve_character,
)


def _target_and_index(arg: str, ctx: Dict[str, Any]) -> tuple[Optional[str], int]:
    parts = (arg or "").split()
    if not parts:
        raise ArgError("Which entry? Give a character (or 'party') and an entry number.")
    if len(parts) == 1:
        return None, parse_index(parts[0])
    return resolve_character(ctx, " ".join(parts[:-1])), parse_index(parts[-1])


def ammo_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    actions = ctx["ammo"]
    token = (arg or "").strip()
    try:
        if token:
            owners = [resolve_character(ctx, token)]
        else:
            owners = [None, *known_characters(ctx)]
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    blocks = []
    for pc in owners:
        try:
            blocks.append(format_ammo_rows(owner_label(pc), actions.rows(pc)))
        except KeyError:
            blocks.append(f"{owner_label(pc)}: no character sheet.")
    bus.push("SYSTEM/OK", "\n\n".join(blocks))


def _action_cmd(arg: str, ctx: Dict[str, Any], verb: str) -> None:
    bus = ctx["feedback_bus"]
    actions = ctx["ammo"]
    try:
        pc, index = _target_and_index(arg, ctx)
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return

    try:
        rows = actions.rows(pc)
    except KeyError:
        bus.push("SYSTEM/WARN", f"{owner_label(pc)} has no character sheet.")
        return
    before = rows[index] if index < len(rows) else None
    action = actions.fire_round if verb == "fire" else actions.reload_weapon
    row = action(pc, index)
    if row is None:
        bus.push("SYSTEM/WARN", f"{owner_label(pc)} has no ammunition entry {index + 1}.")
        return
    if before is not None and AmmoRecord.from_row(row) == AmmoRecord.from_row(before):
        msg = "Out of ammunition." if verb == "fire" else "Nothing to reload."
        bus.push("SYSTEM/WARN", f"{msg} {format_ammo_line(row)}")
        return
    bus.push("SYSTEM/OK", format_ammo_line(row))
    report_sync(ctx, ctx["ammo"])


def addammo_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    """addammo <pc|party> "<weapon>" <mag> <loaded> <spare> <loose> [type]"""

    bus = ctx["feedback_bus"]
    try:
        parts = shlex.split(arg or "")
    except ValueError as exc:
        bus.push("SYSTEM/WARN", f"Could not parse arguments: {exc}")
        return
    if len(parts) < 6:
        bus.push(
            "SYSTEM/WARN",
            'Usage: addammo <pc|party> "<weapon>" <mag> <loaded> <spare> <loose> [type]',
        )
        return
    try:
        pc = resolve_character(ctx, parts[0])
        row = ctx["ammo"].add_ammo(
            pc,
            parts[1],
            magazine_size=parts[2],
            rounds_loaded=parts[3],
            spare_magazines=parts[4],
            loose_rounds=parts[5],
            ammo_type=" ".join(parts[6:]),
        )
    except (ArgError, AmmoValidationError) as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    bus.push("SYSTEM/OK", f"Tracking {format_ammo_line(row)} for {owner_label(pc)}.")
    report_sync(ctx, ctx["ammo"])


def rmammo_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    try:
        pc, index = _target_and_index(arg, ctx)
    except ArgError as exc:
        bus.push("SYSTEM/WARN", str(exc))
        return
    removed = ctx["ammo"].remove_ammo(pc, index)
    if removed is None:
        bus.push("SYSTEM/WARN", f"{owner_label(pc)} has no ammunition entry {index + 1}.")
        return
    bus.push("SYSTEM/OK", f"Removed {removed.get('Weapon') or 'entry'} from {owner_label(pc)}.")
    report_sync(ctx, ctx["ammo"])


def register(dispatch, ctx) -> None:
    dispatch.register("ammo", lambda arg: ammo_cmd(arg, ctx))
    dispatch.register("fire", lambda arg: _action_cmd(arg, ctx, "fire"))
    dispatch.register("reload", lambda arg: _action_cmd(arg, ctx, "reload"))
    dispatch.register("addammo", lambda arg: addammo_cmd(arg, ctx))
    dispatch.register("rmammo", lambda arg: rmammo_cmd(arg, ctx))
