from __future__ import annotations

import logging

LOG = logging.getLogger(__name__)


def register(dispatch, ctx) -> None:
    bus = ctx["feedback_bus"]

    def _save(arg: str = "") -> None:
        try:
            ctx["state_manager"].persist()
        except Exception as exc:
            LOG.exception("Manual save failed")
            bus.push("SYSTEM/ERROR", f"Save failed: {exc}")
            return
        bus.push("SYSTEM/OK", "Campaign saved.")

    dispatch.register("save", _save)
