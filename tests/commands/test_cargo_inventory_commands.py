from __future__ import annotations

ZHANA = "Carol – Lt Colonel Zhana"


def _texts(events, kind=None):
    return [ev["text"] for ev in events if kind is None or ev["kind"] == kind]


def test_cargo_add_sell_and_list(session):
    ctx, run = session

    events = run('cargo add "Regina–Efate" Electronics 20 Regina 12000 +1')
    assert _texts(events, "SYSTEM/OK") == ["Loaded 20 tons of Electronics for Regina–Efate."]

    events = run("cargo")
    text = _texts(events, "SYSTEM/OK")[0]
    assert "unsold" in text
    assert "Realised profit: 0 Cr" in text

    events = run("cargo sell 1 Efate 15000 500")
    assert _texts(events, "SYSTEM/OK") == ["Sold Electronics at Efate: profit 59,500 Cr."]

    leg = ctx["state_manager"].state["Ship_Cargo"][0]
    assert leg["Broker (±DM)"] == "+1"
    assert leg["Profit (Cr)"] == 59500
    assert ctx["stores"].repository("cargo").get(leg["id"])["Profit (Cr)"] == 59500
    assert "Realised profit: 59,500 Cr" in _texts(run("car"), "SYSTEM/OK")[0]


def test_cargo_rejects_bad_input(session):
    ctx, run = session

    assert "Tons must be positive" in _texts(run("cargo add A–B Grain 0 A 100"), "SYSTEM/WARN")[0]
    assert "No cargo leg 1" in _texts(run("cargo sell 1 Efate 100"), "SYSTEM/WARN")[0]
    assert "Usage: cargo" in _texts(run("cargo dump"), "SYSTEM/WARN")[0]
    assert ctx["state_manager"].state["Ship_Cargo"] == []


def test_inv_add_and_list_for_party_and_character(session):
    ctx, run = session

    events = run('inv add carol "Vacc Suit" 1 8 9000 Locker 3')
    assert _texts(events, "SYSTEM/OK") == [f"Added 1 x Vacc Suit to {ZHANA}."]
    run('inv add party "Ration pack" 10 0.5 20')

    row = ctx["state_manager"].state["PCs"][ZHANA]["Inventory"][0]
    assert row["Location/Container"] == "Locker 3"
    assert row["Total Value (Cr)"] == 9000

    text = _texts(run("inv carol"), "SYSTEM/OK")[0]
    assert "Vacc Suit" in text
    assert "Carried: 8 kg, worth 9,000 Cr" in text

    text = _texts(run("inv"), "SYSTEM/OK")[0]
    assert "Carried: 5 kg, worth 200 Cr" in text
    assert "Vacc Suit" in text
    remote = ctx["stores"].repository("party_inventory").list("default")
    assert [r["Item"] for r in remote] == ["Ration pack"]


def test_inv_rejects_missing_item(session):
    ctx, run = session

    assert "Usage: inv" in _texts(run("inv add party"), "SYSTEM/WARN")[0]
    assert "Item is required" in _texts(run('inv add party ""'), "SYSTEM/WARN")[0]
