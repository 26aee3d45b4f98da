from __future__ import annotations

from travtrack.commands import quit as quit_cmd
from travtrack.repl import loop
from travtrack.ui.feedback import FeedbackBus


class DummyStateManager:
    def __init__(self) -> None:
        self.saved = 0
        self.executed = []

    def save_on_exit(self) -> None:
        self.saved += 1

    def on_command_executed(self, executed) -> None:
        self.executed.append(executed)


def _run_loop(monkeypatch, lines):
    state_mgr = DummyStateManager()
    ctx = {"feedback_bus": FeedbackBus(), "state_manager": state_mgr, "characters": ("Solo",)}

    monkeypatch.setattr(loop, "build_context", lambda: ctx)
    monkeypatch.setattr(
        loop, "register_all", lambda dispatch, ctx: quit_cmd.register(dispatch, ctx)
    )

    drained_events = []

    def fake_flush(local_ctx):
        drained_events.append(local_ctx["feedback_bus"].drain())

    monkeypatch.setattr(loop, "flush_feedback", fake_flush)

    inputs = iter(lines)

    def fake_input(prompt: str = "") -> str:
        try:
            return next(inputs)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)

    loop.main()
    return state_mgr, [ev for batch in drained_events for ev in batch]


def test_loop_quit_triggers_save_and_exit(monkeypatch):
    state_mgr, events = _run_loop(monkeypatch, ["", "quit", "never read"])

    assert state_mgr.saved == 2
    assert state_mgr.executed == ["quit"]
    assert any(ev["text"] == "Goodbye!" for ev in events)
    assert "Solo" in events[0]["text"]


def test_loop_saves_on_eof(monkeypatch):
    state_mgr, events = _run_loop(monkeypatch, ["xyzzy"])

    assert state_mgr.saved == 1
    assert state_mgr.executed == []
    assert any('Unknown command "xyzzy"' in ev["text"] for ev in events)
