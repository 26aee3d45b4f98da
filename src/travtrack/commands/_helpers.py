from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from travtrack.engine.campaign import character_names

PARTY_TOKENS = {"party", "ship", "-"}


class ArgError(ValueError):
    """Raised when a command argument cannot be understood."""


def known_characters(ctx: Mapping[str, Any]) -> Sequence[str]:
    """Characters in the live state, falling back to the configured names."""

    state_mgr = ctx.get("state_manager")
    names = character_names(state_mgr.state) if state_mgr is not None else []
    return names or list(ctx.get("characters") or ())


def resolve_character(ctx: Mapping[str, Any], token: str) -> Optional[str]:
    """Map ``token`` to a character name, or ``None`` for the party pool.

    Matching is case-insensitive on the full name, the player's name before
    the dash, or any unique prefix of either.
    """

    t = (token or "").strip().lower()
    if not t or t in PARTY_TOKENS:
        return None
    names = known_characters(ctx)
    exact = [n for n in names if n.lower() == t]
    if exact:
        return exact[0]
    matches = []
    for name in names:
        player = name.split("–", 1)[0].strip().lower()
        if name.lower().startswith(t) or player.startswith(t):
            matches.append(name)
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ArgError(f'No character matches "{token}".')
    raise ArgError(f'"{token}" matches more than one character: {", ".join(matches)}')


def parse_index(token: str) -> int:
    """Turn a 1-based entry number into a list index."""

    try:
        n = int((token or "").strip())
    except ValueError:
        raise ArgError(f'"{token}" is not an entry number.') from None
    if n < 1:
        raise ArgError("Entry numbers start at 1.")
    return n - 1


def owner_label(pc: Optional[str]) -> str:
    return pc or "Party"


def report_sync(ctx: Mapping[str, Any], actions: Any) -> None:
    """Warn when the last remote write failed and is still queued."""

    report = actions.last_report
    if report is not None and not report.ok:
        ctx["feedback_bus"].push(
            "SYSTEM/WARN",
            f"Saved locally; {len(ctx['outbox'])} remote write(s) still pending.",
        )
