"""In-memory campaign state: shape, defaults and collection access.

The campaign state is a JSON-compatible tree (plain dicts and lists) so it can
be written to a snapshot slot as-is. Collections change only by replacing the
whole list.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional

from travtrack.constants import (
    CHARACTER_COLLECTIONS,
    CHARACTER_NAMES,
    CHARACTERS_KEY,
    TOP_LEVEL_COLLECTIONS,
)

CampaignState = Dict[str, Any]
CharacterSheet = Dict[str, List[Dict[str, Any]]]
Row = Dict[str, Any]


def empty_character_sheet() -> CharacterSheet:
    return {key: [] for key in CHARACTER_COLLECTIONS}


def default_state(characters: Iterable[str] = CHARACTER_NAMES) -> CampaignState:
    """Return a fresh default state with one empty sheet per known character."""

    state: CampaignState = {key: [] for key in TOP_LEVEL_COLLECTIONS}
    state[CHARACTERS_KEY] = {name: empty_character_sheet() for name in characters}
    return state


def character_names(state: Mapping[str, Any]) -> List[str]:
    pcs = state.get(CHARACTERS_KEY)
    if not isinstance(pcs, Mapping):
        return []
    return list(pcs.keys())


def _owner(state: MutableMapping[str, Any], key: str, pc: Optional[str]) -> MutableMapping[str, Any]:
    if pc is None:
        if key not in TOP_LEVEL_COLLECTIONS:
            raise KeyError(key)
        return state
    if key not in CHARACTER_COLLECTIONS:
        raise KeyError(key)
    pcs = state.get(CHARACTERS_KEY)
    if not isinstance(pcs, MutableMapping) or pc not in pcs:
        raise KeyError(pc)
    return pcs[pc]


def get_collection(state: MutableMapping[str, Any], key: str, pc: Optional[str] = None) -> List[Row]:
    """Return the rows of ``key``; ``pc=None`` selects a campaign-level collection."""

    owner = _owner(state, key, pc)
    rows = owner.get(key)
    if not isinstance(rows, list):
        rows = []
        owner[key] = rows
    return rows


def replace_collection(
    state: MutableMapping[str, Any],
    key: str,
    rows: Iterable[Mapping[str, Any]],
    pc: Optional[str] = None,
) -> List[Row]:
    owner = _owner(state, key, pc)
    new_rows = [dict(row) for row in rows]
    owner[key] = new_rows
    return new_rows

