from __future__ import annotations
from travtrack.repl.help import render_help


def register(dispatch, ctx):
    bus = ctx["feedback_bus"]

    def _help(arg: str = ""):
        bus.push("SYSTEM/OK", render_help(dispatch))

    dispatch.register("help", _help)
    dispatch.alias("h", "help")
