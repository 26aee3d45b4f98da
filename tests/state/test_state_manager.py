from __future__ import annotations

import json

import pytest

from travtrack.constants import CHARACTER_NAMES, STORAGE_KEY, TOP_LEVEL_COLLECTIONS
from travtrack.engine.campaign import default_state
from travtrack.state.manager import (
    CORRUPT_SUFFIX,
    StateManager,
    dump_state,
    load_state,
    repair_state,
    save_state,
)


def test_default_state_shape():
    state = default_state()

    for key in TOP_LEVEL_COLLECTIONS:
        assert state[key] == []
    assert list(state["PCs"]) == list(CHARACTER_NAMES)
    for sheet in state["PCs"].values():
        assert sheet == {"Finance": [], "Inventory": [], "Weapons": [], "Armour": [], "Ammo": []}


def test_missing_character_collections_are_filled():
    raw = json.dumps({"PCs": {"Alice": {"Finance": [], "Inventory": []}}})
    state = load_state(raw)

    alice = state["PCs"]["Alice"]
    assert alice["Weapons"] == []
    assert alice["Armour"] == []
    assert alice["Ammo"] == []
    # Known characters are not seeded into an existing snapshot.
    assert list(state["PCs"]) == ["Alice"]


def test_unparseable_snapshot_yields_default_state():
    assert load_state("not json{") == default_state()


@pytest.mark.parametrize("raw", [None, "", b"", '{"Ammo_Tracker": [', "[1, 2]", '"text"', "null", b"\xff\xfe"])
def test_bad_snapshots_never_raise(raw):
    assert load_state(raw) == default_state()


def test_existing_rows_survive_repair_untouched():
    rows = [{"Weapon": "Rifle", "Rounds Loaded": 3, "Extra": {"nested": True}}]
    raw = json.dumps({"Ammo_Tracker": rows, "Custom": 1, "PCs": {}})
    state = load_state(raw)

    assert state["Ammo_Tracker"] == rows
    assert state["Custom"] == 1
    assert state["Party_Finances"] == []


def test_wrong_collection_types_are_reset(caplog):
    parsed = {"Ship_Cargo": {"not": "a list"}, "PCs": {"Bob": {"Ammo": "x"}, "Eve": 3}}
    state = repair_state(parsed)

    assert state["Ship_Cargo"] == []
    assert state["PCs"]["Bob"]["Ammo"] == []
    assert state["PCs"]["Eve"]["Finance"] == []
    assert any("not a list" in r.message for r in caplog.records)


def test_pcs_not_an_object_is_reset():
    state = load_state(json.dumps({"PCs": ["Alice"]}))
    assert state["PCs"] == {}


def test_bytes_snapshot_is_decoded():
    raw = json.dumps({"PCs": {"Zhana": {}}}, ensure_ascii=False).encode("utf-8")
    assert "Zhana" in load_state(raw)["PCs"]


def test_save_then_load_round_trips(memory_slot):
    state = default_state()
    state["Ammo_Tracker"].append({"Weapon": "Body Pistol", "Total Rounds": 6})
    state["PCs"]["Nicole – Admiral Rosa Perre"]["Inventory"].append({"Item": "Vacc suit"})

    save_state(state, memory_slot)

    assert load_state(memory_slot.data[STORAGE_KEY]) == state
    assert "–" in memory_slot.data[STORAGE_KEY]


def test_dump_state_is_plain_json():
    assert json.loads(dump_state(default_state())) == default_state()


def test_manager_starts_from_defaults_when_slot_is_empty(memory_slot):
    mgr = StateManager(memory_slot)

    assert mgr.created is True
    assert mgr.state == default_state()
    assert memory_slot.writes == 0


def test_manager_loads_existing_snapshot(memory_slot):
    memory_slot.data[STORAGE_KEY] = json.dumps({"Loans_Mortgage": [{"Lender": "Bank"}]})
    mgr = StateManager(memory_slot)

    assert mgr.created is False
    assert mgr.state["Loans_Mortgage"] == [{"Lender": "Bank"}]


def test_manager_backs_up_corrupt_snapshot(memory_slot):
    memory_slot.data[STORAGE_KEY] = "not json{"
    mgr = StateManager(memory_slot)

    assert mgr.created is True
    assert memory_slot.data[STORAGE_KEY + CORRUPT_SUFFIX] == "not json{"


def test_manager_survives_unreadable_slot(memory_slot):
    memory_slot.fail_reads = True
    mgr = StateManager(memory_slot, characters=("Solo",))

    assert mgr.state == default_state(("Solo",))


def test_commit_persists_immediately_without_autosave(memory_slot):
    mgr = StateManager(memory_slot)
    mgr.state["Ship_Cargo"].append({"Item": "Grain"})
    mgr.commit()

    assert json.loads(memory_slot.data[STORAGE_KEY])["Ship_Cargo"] == [{"Item": "Grain"}]
    assert mgr.dirty is False


def test_autosave_waits_for_interval(memory_slot):
    mgr = StateManager(memory_slot, autosave_interval=2)
    mgr.state["Ship_Cargo"].append({"Item": "Grain"})
    mgr.commit()

    assert mgr.dirty is True
    assert STORAGE_KEY not in memory_slot.data

    mgr.on_command_executed("fire")
    assert STORAGE_KEY not in memory_slot.data
    mgr.on_command_executed("fire")
    assert STORAGE_KEY in memory_slot.data
    assert mgr.dirty is False


def test_unresolved_commands_do_not_count_towards_autosave(memory_slot):
    mgr = StateManager(memory_slot, autosave_interval=1)
    mgr.mark_dirty()
    mgr.on_command_executed(None)

    assert STORAGE_KEY not in memory_slot.data


def test_save_on_exit_only_writes_when_dirty(memory_slot):
    mgr = StateManager(memory_slot, autosave_interval=10)
    mgr.save_on_exit()
    assert memory_slot.writes == 0

    mgr.mark_dirty()
    mgr.save_on_exit()
    assert memory_slot.writes == 1


def test_reset_persists_defaults(memory_slot):
    memory_slot.data[STORAGE_KEY] = json.dumps({"PCs": {"Alice": {}}})
    mgr = StateManager(memory_slot)
    mgr.reset()

    assert load_state(memory_slot.data[STORAGE_KEY]) == default_state()


@pytest.mark.parametrize(
    "raw",
    [
        "{}",
        '{"PCs": 1}',
        '{"PCs": {"A": null, "B": []}, "Ship_Cargo": 3}',
        '{"PCs": {"A": {"Ammo": {"Weapon": "Rifle"}, "Notes": "x"}}, "Extra": [1]}',
        '{"Party_Finances": [{"Amount (Cr)": 5}], "Ammo_Tracker": null}',
        "[]",
        "not json",
    ],
)
def test_repaired_state_is_stable_across_reload(raw):
    state = load_state(raw)

    assert load_state(dump_state(state)) == state
