from __future__ import annotations

COMMAND_SUMMARY = {
    "ammo": "ammo [pc|party]            list tracked ammunition",
    "addammo": 'addammo <pc|party> "<weapon>" <mag> <loaded> <spare> <loose> [type]',
    "balance": "balance [pc]               party, ship and character funds",
    "cargo": "cargo [add ...|sell <n> ...]  speculative cargo legs and profit",
    "fire": "fire <pc|party> <n>        fire one round from entry n",
    "help": "help                       this list",
    "inv": "inv [pc|party] | inv add ...  list or add inventory",
    "ledger": "ledger [pc|party|ship]     transactions and running balance",
    "pcs": "pcs                        list characters",
    "quit": "quit                       save and exit",
    "reload": "reload <pc|party> <n>      reload entry n",
    "rmammo": "rmammo <pc|party> <n>      stop tracking entry n",
    "save": "save                       write the campaign snapshot now",
    "sync": "sync                       retry pending remote writes",
    "tx": "tx <pc|party|ship> <date> <category> <amount> \"<description>\"",
}


def startup_banner(ctx) -> str:
    names = ", ".join(ctx.get("characters") or ()) or "none"
    return f"Traveller campaign tracker. Characters: {names}. Type 'help' for commands."


def render_help(dispatch) -> str:
    lines = ["Available commands:"]
    for name in dispatch.list_commands():
        lines.append(f" - {COMMAND_SUMMARY.get(name, name)}")
    return "\n".join(lines)
