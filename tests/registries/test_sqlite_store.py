from __future__ import annotations

import sqlite3

import pytest

from travtrack.registries.sqlite_store import (
    AGGREGATES,
    SQLiteCollectionStore,
    SQLiteConnectionManager,
)


def test_schema_is_migrated_to_latest(tmp_path) -> None:
    manager = SQLiteConnectionManager(tmp_path / "t.db")
    conn = manager.connect()

    version = conn.execute("SELECT version FROM schema_meta").fetchone()[0]
    tables = {
        row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    assert version == 2
    assert {"campaign_rows", "runtime_kv"}.issubset(tables)


def test_migration_from_v1_adds_runtime_kv() -> None:
    manager = SQLiteConnectionManager(db_path=":memory:")
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE TABLE schema_meta (version INTEGER NOT NULL)")
        conn.execute("INSERT INTO schema_meta(version) VALUES (1)")
        conn.commit()

        manager._ensure_schema(conn)

        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='runtime_kv'"
        ).fetchone()
        assert row is not None
        assert conn.execute("SELECT version FROM schema_meta").fetchone()[0] == 2
    finally:
        conn.close()


def test_every_aggregate_has_a_repository(stores) -> None:
    assert set(stores.collections) == set(AGGREGATES)
    assert len(AGGREGATES) == 12
    assert stores.for_collection("Ammo_Tracker") is stores.repository("campaign_ammo")
    assert stores.for_collection("Ammo", character=True) is stores.repository("character_ammo")
    with pytest.raises(KeyError):
        stores.repository("starships")


def test_add_list_update_delete(stores) -> None:
    repo = stores.repository("character_ammo")

    first = repo.add("Zhana", {"Weapon": "Gauss Rifle", "Rounds Loaded": 40})
    second = repo.add("Zhana", {"id": "fixed", "Weapon": "Snub Pistol"})
    repo.add("Travis", {"Weapon": "Cutlass"})

    assert first["id"]
    assert second["id"] == "fixed"
    assert [row["Weapon"] for row in repo.list("Zhana")] == ["Gauss Rifle", "Snub Pistol"]

    repo.update(first["id"], {"Rounds Loaded": 39, "id": "ignored"})
    updated = repo.get(first["id"])
    assert updated == {"id": first["id"], "Weapon": "Gauss Rifle", "Rounds Loaded": 39}

    repo.delete("fixed")
    assert [row["id"] for row in repo.list("Zhana")] == [first["id"]]


def test_missing_rows_raise_key_error(stores) -> None:
    repo = stores.repository("cargo")

    with pytest.raises(KeyError):
        repo.update("nope", {"Tons": 1})
    with pytest.raises(KeyError):
        repo.delete("nope")
    assert repo.get("nope") is None


def test_duplicate_id_raises_key_error(stores) -> None:
    repo = stores.repository("cargo")
    repo.add("default", {"id": "leg-1", "Item": "Grain"})

    with pytest.raises(KeyError):
        repo.add("default", {"id": "leg-1", "Item": "Grain"})
    assert len(repo.list("default")) == 1


def test_aggregates_are_isolated(stores) -> None:
    stores.repository("finances").add("default", {"id": "x", "Amount (Cr)": 10})

    assert stores.repository("ship_finances").list("default") == []
    assert stores.repository("ship_finances").get("x") is None


def test_unknown_aggregate_rejected(tmp_path) -> None:
    with pytest.raises(ValueError):
        SQLiteCollectionStore(SQLiteConnectionManager(tmp_path / "t.db"), "starships")


def test_runtime_kv_snapshot_slot(stores) -> None:
    slot = stores.snapshot
    assert slot.get("k") is None

    slot.set("k", "one")
    slot.set("k", "two")
    assert slot.get("k") == "two"

    slot.delete("k")
    slot.delete("k")
    assert slot.get("k") is None
