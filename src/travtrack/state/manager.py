"""Campaign snapshot loading, repair and persistence."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional

from travtrack.constants import (
    CHARACTER_COLLECTIONS,
    CHARACTER_NAMES,
    CHARACTERS_KEY,
    STORAGE_KEY,
    TOP_LEVEL_COLLECTIONS,
)
from travtrack.engine.campaign import CampaignState, default_state, empty_character_sheet
from travtrack.registries.storage import SnapshotSlot


LOG = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"


@dataclass
class LoadResult:
    state: CampaignState
    created: bool


def _repair_character(name: str, sheet: Any) -> Dict[str, Any]:
    if not isinstance(sheet, MutableMapping):
        LOG.warning("Character '%s' is not an object; replacing with empty sheet", name)
        return empty_character_sheet()
    for key in CHARACTER_COLLECTIONS:
        value = sheet.get(key)
        if isinstance(value, list):
            continue
        if value is not None:
            LOG.warning("Character '%s' %s is not a list; resetting", name, key)
        sheet[key] = []
    return sheet  # type: ignore[return-value]


def repair_state(parsed: MutableMapping[str, Any]) -> CampaignState:
    """Fill in missing collections of ``parsed`` in place and return it.

    Lists that already exist are left untouched, rows included. Keys this
    module does not know about are kept.
    """

    for key in TOP_LEVEL_COLLECTIONS:
        value = parsed.get(key)
        if isinstance(value, list):
            continue
        if value is not None:
            LOG.warning("Snapshot %s is not a list; resetting", key)
        parsed[key] = []

    pcs = parsed.get(CHARACTERS_KEY)
    if not isinstance(pcs, MutableMapping):
        if pcs is not None:
            LOG.warning("Snapshot %s is not an object; resetting", CHARACTERS_KEY)
        pcs = {}
        parsed[CHARACTERS_KEY] = pcs

    for name in list(pcs.keys()):
        pcs[name] = _repair_character(name, pcs[name])

    return parsed  # type: ignore[return-value]


def _parse(raw: str | bytes) -> MutableMapping[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8")
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError(f"snapshot root is {type(parsed).__name__}, expected object")
    return parsed


def load_state(
    raw: str | bytes | None,
    *,
    characters: Iterable[str] = CHARACTER_NAMES,
) -> CampaignState:
    """Return a complete campaign state from a serialised snapshot.

    ``None`` or an empty snapshot yields the default state. So does anything
    that cannot be parsed into a JSON object; the error is logged, never
    raised. A parsed snapshot is repaired so every collection and every
    character sheet exists.
    """

    return _load(raw, characters).state


def _load(raw: str | bytes | None, characters: Iterable[str]) -> LoadResult:
    if not raw:
        return LoadResult(state=default_state(characters), created=True)
    try:
        parsed = _parse(raw)
        return LoadResult(state=repair_state(parsed), created=False)
    except Exception as exc:
        LOG.warning("Failed to parse campaign snapshot (%s); using defaults", exc)
        return LoadResult(state=default_state(characters), created=True)


def dump_state(state: Mapping[str, Any]) -> str:
    return json.dumps(state, ensure_ascii=False)


def save_state(state: Mapping[str, Any], slot: SnapshotSlot, *, key: str = STORAGE_KEY) -> None:
    """Serialise ``state`` and overwrite the snapshot held under ``key``."""

    slot.set(key, dump_state(state))


class StateManager:
    """Own the live campaign state and its snapshot slot."""

    def __init__(
        self,
        slot: SnapshotSlot,
        *,
        key: str = STORAGE_KEY,
        characters: Iterable[str] = CHARACTER_NAMES,
        autosave_interval: int | None = None,
    ) -> None:
        self.slot = slot
        self.key = key
        self.characters = tuple(characters)
        self.autosave_interval = max(0, int(autosave_interval or 0))
        self.command_counter = 0
        self.dirty = False

        load_result = self.load()
        self.state = load_result.state
        self.created = load_result.created

    # ------------------------------------------------------------------
    def load(self) -> LoadResult:
        try:
            raw = self.slot.get(self.key)
        except Exception as exc:
            LOG.warning("Failed to read snapshot '%s' (%s); using defaults", self.key, exc)
            return LoadResult(state=default_state(self.characters), created=True)

        if not raw:
            LOG.info("No snapshot under '%s'; starting from defaults", self.key)
            return LoadResult(state=default_state(self.characters), created=True)

        result = _load(raw, self.characters)
        if result.created:
            self._backup_corrupt(raw)
        return result

    def _backup_corrupt(self, raw: str | bytes) -> None:
        backup_key = self.key + CORRUPT_SUFFIX
        try:
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else str(raw)
            self.slot.set(backup_key, text)
            LOG.warning("Backed up corrupt snapshot to '%s'", backup_key)
        except Exception:
            LOG.exception("Failed to back up corrupt snapshot '%s'", self.key)

    # ------------------------------------------------------------------
    def persist(self) -> None:
        save_state(self.state, self.slot, key=self.key)
        LOG.debug("Saved campaign snapshot to '%s'", self.key)
        self.dirty = False
        self.command_counter = 0

    def mark_dirty(self) -> None:
        self.dirty = True

    def on_command_executed(self, command_name: str | None = None) -> None:
        if not command_name:
            return
        self.command_counter += 1
        if self.autosave_interval and self.dirty and self.command_counter >= self.autosave_interval:
            LOG.info("Autosave triggered after %s commands", self.command_counter)
            self.persist()

    def save_on_exit(self) -> None:
        if self.dirty:
            LOG.info("Saving on exit")
            self.persist()

    def reset(self) -> None:
        """Discard the live state in favour of the defaults and persist it."""

        LOG.info("Resetting campaign state to defaults")
        self.state = default_state(self.characters)
        self.persist()

    def commit(self, *, persist: Optional[bool] = None) -> None:
        """Record a mutation of :attr:`state`.

        With no autosave interval every mutation is persisted immediately;
        otherwise the state is marked dirty and saved by the autosave cadence.
        """

        if persist is None:
            persist = not self.autosave_interval
        if persist:
            self.persist()
        else:
            self.mark_dirty()
