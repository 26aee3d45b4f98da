"""
Shared constants for the travtrack application.

This file should have NO local imports to avoid circular dependencies.
"""

from __future__ import annotations

# Fixed key of the durable snapshot slot. Bump the suffix when the snapshot
# layout changes incompatibly.
STORAGE_KEY = "traveller-ui-state-v1"

# Pending remote writes live next to the snapshot under their own key.
OUTBOX_KEY = "traveller-sync-outbox-v1"

# Campaign-level collections, in the order they are presented.
PARTY_FINANCES = "Party_Finances"
SHIP_ACCOUNTS = "Ship_Accounts"
SHIP_CARGO = "Ship_Cargo"
SHIP_MAINTENANCE_LOG = "Ship_Maintenance_Log"
LOANS_MORTGAGE = "Loans_Mortgage"
PARTY_INVENTORY = "Party_Inventory"
AMMO_TRACKER = "Ammo_Tracker"

TOP_LEVEL_COLLECTIONS = (
    PARTY_FINANCES,
    SHIP_ACCOUNTS,
    SHIP_CARGO,
    SHIP_MAINTENANCE_LOG,
    LOANS_MORTGAGE,
    PARTY_INVENTORY,
    AMMO_TRACKER,
)

CHARACTERS_KEY = "PCs"

# Per-character sheets.
PC_FINANCE = "Finance"
PC_INVENTORY = "Inventory"
PC_WEAPONS = "Weapons"
PC_ARMOUR = "Armour"
PC_AMMO = "Ammo"

CHARACTER_COLLECTIONS = (PC_FINANCE, PC_INVENTORY, PC_WEAPONS, PC_ARMOUR, PC_AMMO)

# Display names seeded into the default state ("Player – Character").
CHARACTER_NAMES = (
    "Andrew – Dr Vax Vanderpool",
    "Nicole – Admiral Rosa Perre",
    "Carol – Lt Colonel Zhana",
    "Colin – Captain Travis Drevil",
)

# Repository aggregate names for each collection.
CAMPAIGN_AGGREGATES = {
    PARTY_FINANCES: "finances",
    SHIP_ACCOUNTS: "ship_finances",
    SHIP_CARGO: "cargo",
    SHIP_MAINTENANCE_LOG: "maintenance",
    LOANS_MORTGAGE: "loans",
    PARTY_INVENTORY: "party_inventory",
    AMMO_TRACKER: "campaign_ammo",
}

CHARACTER_AGGREGATES = {
    PC_FINANCE: "character_finances",
    PC_INVENTORY: "character_inventory",
    PC_WEAPONS: "character_weapons",
    PC_ARMOUR: "character_armour",
    PC_AMMO: "character_ammo",
}

TRANSACTION_CATEGORIES = ("Income", "Expense", "Transfer")
