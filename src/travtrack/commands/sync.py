from __future__ import annotations

from typing import Any, Dict


def sync_cmd(arg: str, ctx: Dict[str, Any]) -> None:
    bus = ctx["feedback_bus"]
    outbox = ctx["outbox"]
    if not len(outbox):
        bus.push("SYSTEM/OK", "Nothing to sync.")
        return
    report = outbox.flush()
    if report.ok:
        bus.push("SYSTEM/OK", f"Synced {report.sent} write(s).")
        return
    bus.push(
        "SYSTEM/WARN",
        f"Synced {report.sent}, failed {report.failed}, dropped {report.dropped}; "
        f"{len(outbox)} pending.",
    )


def register(dispatch, ctx) -> None:
    dispatch.register("sync", lambda arg: sync_cmd(arg, ctx))
