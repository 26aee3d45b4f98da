from __future__ import annotations
import sys
import logging
from typing import Any, Callable, Dict, List, Optional


class Dispatch:
    """
    Command router with case-insensitive matching and ≥3-letter unique prefix resolution.
    <3-letter tokens are accepted only if explicitly aliased (e.g., 'q', 'h').
    """

    def __init__(self) -> None:
        self._cmds: Dict[str, Callable[[str], None]] = {}
        self._aliases: Dict[str, str] = {}
        self._bus = None  # optional feedback bus
        self._ctx: Any | None = None
        self._log = logging.getLogger(__name__)

    # Optional: REPL can call this after building ctx.
    def set_feedback_bus(self, bus) -> None:
        self._bus = bus

    def set_context(self, ctx: Any) -> None:
        """Remember the REPL context so the state manager sees every command."""

        self._ctx = ctx

    def _warn(self, msg: str) -> None:
        if self._bus is not None:
            self._bus.push("SYSTEM/WARN", msg)
        else:
            print(msg, file=sys.stderr)

    def _post_command(self, resolved: Optional[str]) -> None:
        if not isinstance(self._ctx, dict):
            return
        state_mgr = self._ctx.get("state_manager")
        if state_mgr is None:
            return
        try:
            state_mgr.on_command_executed(resolved)
        except Exception:
            self._log.exception("Autosave after %s failed", resolved)

    def register(self, name: str, fn: Callable[[str], None]) -> None:
        self._cmds[name.lower()] = fn

    def alias(self, alias: str, target: str) -> None:
        self._aliases[alias.lower()] = target.lower()

    def list_commands(self) -> List[str]:
        return sorted(self._cmds.keys())

    def _resolve_prefix(self, token: str) -> Optional[str]:
        t = (token or "").lower()
        if t in self._aliases:
            return self._aliases[t]
        if t in self._cmds:
            return t
        # ≥3 letters → unique prefix over canonical names and their aliases
        if len(t) >= 3:
            candidates = set()
            for name in self._cmds:
                if name.startswith(t):
                    candidates.add(name)
            for a, target in self._aliases.items():
                if a.startswith(t):
                    candidates.add(target)
            if len(candidates) == 1:
                return next(iter(candidates))
            if len(candidates) > 1:
                pretty = ", ".join(sorted(candidates))
                self._warn(f'Ambiguous command "{token}" (did you mean: {pretty})')
                return None
        self._warn(f'Unknown command "{token}" (commands require at least 3 letters).')
        return None

    def call(self, token: str, arg: str) -> Optional[str]:
        """Run the command matching ``token`` and return its canonical name."""

        name = self._resolve_prefix(token)
        if not name:
            return None
        fn = self._cmds.get(name)
        if not fn:
            self._warn(f'Command handler missing for "{name}".')
            return None
        try:
            fn(arg)
        finally:
            self._post_command(name)
        return name
