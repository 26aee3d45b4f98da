from __future__ import annotations
import logging
import sys

from travtrack.app.context import build_context, flush_feedback
from travtrack.commands.register_all import register_all
from travtrack.repl.dispatch import Dispatch
from travtrack.repl.help import startup_banner


LOG = logging.getLogger(__name__)

PROMPT = "> "


def _save_on_exit(ctx) -> None:
    state_mgr = ctx.get("state_manager")
    if state_mgr is None:
        return
    try:
        state_mgr.save_on_exit()
    except Exception:
        LOG.exception("Failed to save campaign on exit")


def main() -> None:
    try:  # Ensure UTF-8 output so the "–" in character names survives on Windows.
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    except Exception:
        pass

    ctx = build_context()
    dispatch = Dispatch()
    dispatch.set_feedback_bus(ctx["feedback_bus"])
    dispatch.set_context(ctx)

    register_all(dispatch, ctx)

    ctx["feedback_bus"].push("SYSTEM/INFO", startup_banner(ctx))
    flush_feedback(ctx)

    while True:
        try:
            raw = input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()  # newline on ^D/^C
            break

        try:
            if not raw.strip():
                continue
            token, _, arg = raw.strip().partition(" ")
            dispatch.call(token, arg)
        except SystemExit:
            flush_feedback(ctx)
            break

        flush_feedback(ctx)

    _save_on_exit(ctx)
