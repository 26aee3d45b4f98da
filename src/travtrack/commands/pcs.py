from __future__ import annotations

from travtrack.engine.campaign import character_names


def register(dispatch, ctx) -> None:
    bus = ctx["feedback_bus"]

    def _pcs(arg: str = "") -> None:
        names = character_names(ctx["state_manager"].state)
        if not names:
            bus.push("SYSTEM/OK", "No characters.")
            return
        bus.push("SYSTEM/OK", "\n".join(f" - {name}" for name in names))

    dispatch.register("pcs", _pcs)
