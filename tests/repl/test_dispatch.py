from __future__ import annotations

from travtrack.repl.dispatch import Dispatch
from travtrack.ui.feedback import FeedbackBus


def make_dispatch():
    bus = FeedbackBus()
    dispatch = Dispatch()
    dispatch.set_feedback_bus(bus)
    calls = []
    for name in ("reload", "rmammo", "ammo", "addammo"):
        dispatch.register(name, lambda arg, name=name: calls.append((name, arg)))
    dispatch.alias("r", "reload")
    return dispatch, bus, calls


def test_exact_prefix_and_alias():
    dispatch, bus, calls = make_dispatch()

    assert dispatch.call("AMMO", "party") == "ammo"
    assert dispatch.call("rel", "1") == "reload"
    assert dispatch.call("r", "2") == "reload"
    assert calls == [("ammo", "party"), ("reload", "1"), ("reload", "2")]
    assert bus.drain() == []


def test_short_and_ambiguous_tokens_warn():
    dispatch, bus, calls = make_dispatch()

    assert dispatch.call("am", "") is None
    assert dispatch.call("rxx", "") is None
    assert calls == []
    texts = [ev["text"] for ev in bus.drain()]
    assert texts[0].startswith('Unknown command "am"')
    assert texts[1].startswith('Unknown command "rxx"')


def test_ambiguous_prefix_lists_candidates():
    dispatch, bus, calls = make_dispatch()
    dispatch.register("ammunition", lambda arg: None)

    assert dispatch.call("amm", "") is None
    warning = bus.drain()[0]
    assert warning["kind"] == "SYSTEM/WARN"
    assert "ammo, ammunition" in warning["text"]


def test_post_command_reports_to_state_manager():
    seen = []

    class Mgr:
        def on_command_executed(self, name):
            seen.append(name)

    dispatch, bus, calls = make_dispatch()
    dispatch.set_context({"state_manager": Mgr()})

    dispatch.call("ammo", "")
    dispatch.call("nope", "")

    assert seen == ["ammo"]
