from __future__ import annotations

import pytest

from travtrack.app.context import build_context
from travtrack.commands.register_all import register_all
from travtrack.repl.dispatch import Dispatch


@pytest.fixture
def session(stores, monkeypatch):
    monkeypatch.delenv("TRAVTRACK_CHARACTERS", raising=False)
    monkeypatch.delenv("TRAVTRACK_AUTOSAVE_INTERVAL", raising=False)
    monkeypatch.delenv("TRAVTRACK_CAMPAIGN_ID", raising=False)
    ctx = build_context(stores)
    dispatch = Dispatch()
    dispatch.set_feedback_bus(ctx["feedback_bus"])
    dispatch.set_context(ctx)
    register_all(dispatch, ctx)

    def run(line: str):
        token, _, arg = line.partition(" ")
        dispatch.call(token, arg)
        return ctx["feedback_bus"].drain()

    return ctx, run
