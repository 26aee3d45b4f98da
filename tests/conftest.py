from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from travtrack.registries import sqlite_store


class MemorySlot:
    """In-memory snapshot slot that can be told to fail."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.writes = 0
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("slot unavailable")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("slot is read-only")
        self.writes += 1
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


@pytest.fixture
def stores(tmp_path: Path) -> Any:
    return sqlite_store.get_stores(tmp_path / "travtrack.db")


@pytest.fixture
def memory_slot() -> MemorySlot:
    return MemorySlot()
