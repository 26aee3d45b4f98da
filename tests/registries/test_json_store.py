from __future__ import annotations

import importlib

from travtrack.registries.json_store import JSONSnapshotSlot


def test_json_slot_round_trip(tmp_path) -> None:
    slot = JSONSnapshotSlot(tmp_path / "snapshots")

    assert slot.get("traveller-ui-state-v1") is None
    slot.set("traveller-ui-state-v1", '{"PCs": {}}')

    path = slot.path_for("traveller-ui-state-v1")
    assert path == tmp_path / "snapshots" / "traveller-ui-state-v1.json"
    assert path.read_text(encoding="utf-8") == '{"PCs": {}}'
    assert slot.get("traveller-ui-state-v1") == '{"PCs": {}}'

    slot.delete("traveller-ui-state-v1")
    slot.delete("traveller-ui-state-v1")
    assert not path.exists()


def test_json_slot_sanitises_keys(tmp_path) -> None:
    slot = JSONSnapshotSlot(tmp_path)

    assert slot.path_for("../../etc/passwd").parent == tmp_path
    assert slot.path_for("").name == "slot.json"


def test_get_stores_json_backend(monkeypatch, tmp_path) -> None:
    import travtrack.persistence.paths as paths
    import travtrack.env as env
    import travtrack.registries.storage as storage

    monkeypatch.setenv("TRAVTRACK_STATE_ROOT", str(tmp_path))
    monkeypatch.setenv("TRAVTRACK_SNAPSHOT_BACKEND", "json")
    try:
        importlib.reload(paths)
        importlib.reload(env)
        importlib.reload(storage)

        stores = storage.get_stores(tmp_path / "travtrack.db")
        assert isinstance(stores.snapshot, storage.JSONSnapshotSlot)
        assert stores.snapshot.root == tmp_path / "snapshots"
        assert "campaign_ammo" in stores.collections
    finally:
        monkeypatch.delenv("TRAVTRACK_STATE_ROOT", raising=False)
        monkeypatch.delenv("TRAVTRACK_SNAPSHOT_BACKEND", raising=False)
        importlib.reload(paths)
        importlib.reload(env)
        importlib.reload(storage)
