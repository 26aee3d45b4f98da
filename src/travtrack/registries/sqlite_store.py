from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from pathlib import Path
from time import time
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
)

from travtrack.constants import CAMPAIGN_AGGREGATES, CHARACTER_AGGREGATES
from travtrack.env import get_state_database_path

logger = logging.getLogger(__name__)

DEBUG_QUERY_PLAN = bool(os.getenv("TRAVTRACK_SQLITE_DEBUG_PLAN"))

AGGREGATES: Sequence[str] = tuple(CAMPAIGN_AGGREGATES.values()) + tuple(
    CHARACTER_AGGREGATES.values()
)


def _epoch_ms() -> int:
    return int(time() * 1000)


def _coerce_int(value: Any, *, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _begin_immediate(conn: sqlite3.Connection) -> None:
    conn.execute("BEGIN IMMEDIATE")


def _debug_query_plan(
    conn: sqlite3.Connection, sql: str, params: Sequence[Any]
) -> None:
    if not DEBUG_QUERY_PLAN:
        return
    plan_sql = f"EXPLAIN QUERY PLAN {sql}"
    plan_rows = conn.execute(plan_sql, params).fetchall()
    for row in plan_rows:
        try:
            detail = row[3]
        except (IndexError, TypeError):
            detail = row
        logger.info("QUERY PLAN %s :: %s", sql, detail)


def _mint_row_id() -> str:
    return uuid.uuid4().hex


if TYPE_CHECKING:
    from .storage import CampaignStores


def _resolve_db_path(db_path: Optional[os.PathLike[str] | str]) -> Path:
    if db_path is not None:
        return Path(db_path)
    return get_state_database_path()


class SQLiteConnectionManager:
    """Create SQLite connections with project defaults applied."""

    __slots__ = ("_db_path", "_connection")

    def __init__(self, db_path: Optional[os.PathLike[str] | str] = None) -> None:
        self._db_path = _resolve_db_path(db_path)
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> Path:
        return self._db_path

    def connect(self) -> sqlite3.Connection:
        if self._connection is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._db_path)
            self._configure_connection(conn)
            self._ensure_schema(conn)
            self._connection = conn
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA busy_timeout=5000")

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        with conn:
            _begin_immediate(conn)
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_meta (
                    version INTEGER NOT NULL
                )
                """
            )
            row = conn.execute("SELECT version FROM schema_meta LIMIT 1").fetchone()
            if row is None:
                conn.execute("INSERT INTO schema_meta(version) VALUES (0)")
                version = 0
            else:
                version = _coerce_int(row[0], default=0)

            migrations: Sequence[tuple[int, Callable[[sqlite3.Connection], None]]] = (
                (1, self._migrate_to_v1),
                (2, self._migrate_to_v2),
            )

            for target_version, migration in migrations:
                if version < target_version:
                    migration(conn)
                    conn.execute(
                        "UPDATE schema_meta SET version = ?",
                        (target_version,),
                    )
                    version = target_version

    def _migrate_to_v1(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS campaign_rows (
                id TEXT PRIMARY KEY,
                aggregate TEXT NOT NULL,
                owner_id TEXT NOT NULL,
                data_json TEXT NOT NULL,
                created_at INTEGER NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS campaign_rows_owner_idx
            ON campaign_rows(aggregate, owner_id, created_at)
            """
        )

    def _migrate_to_v2(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS runtime_kv (
                key TEXT PRIMARY KEY,
                value TEXT
            )
            """
        )


class SQLiteCollectionStore:
    """SQLite-backed implementation of :class:`CollectionRepository`.

    Every aggregate shares the ``campaign_rows`` table; rows are kept as JSON
    so the spreadsheet-style column names survive unchanged.
    """

    __slots__ = ("_manager", "_aggregate")

    def __init__(self, manager: SQLiteConnectionManager, aggregate: str) -> None:
        if aggregate not in AGGREGATES:
            raise ValueError(f"Unknown aggregate: {aggregate}")
        self._manager = manager
        self._aggregate = aggregate

    @property
    def aggregate(self) -> str:
        return self._aggregate

    def _connection(self) -> sqlite3.Connection:
        return self._manager.connect()

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        try:
            data = json.loads(row["data_json"])
        except (TypeError, ValueError):
            logger.warning("Row %s has unreadable data; returning id only", row["id"])
            data = {}
        if not isinstance(data, dict):
            data = {}
        data["id"] = row["id"]
        return data

    def list(self, owner_id: str) -> List[Dict[str, Any]]:
        conn = self._connection()
        sql = (
            "SELECT id, data_json FROM campaign_rows "
            "WHERE aggregate = ? AND owner_id = ? ORDER BY created_at ASC, rowid ASC"
        )
        params = (self._aggregate, str(owner_id))
        _debug_query_plan(conn, sql, params)
        cur = conn.execute(sql, params)
        return [self._row_to_dict(row) for row in cur.fetchall()]

    def get(self, row_id: str) -> Optional[Dict[str, Any]]:
        conn = self._connection()
        cur = conn.execute(
            "SELECT id, data_json FROM campaign_rows WHERE id = ? AND aggregate = ?",
            (str(row_id), self._aggregate),
        )
        row = cur.fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    def add(self, owner_id: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        payload = dict(row)
        row_id = str(payload.pop("id", None) or _mint_row_id())
        conn = self._connection()
        try:
            with conn:
                _begin_immediate(conn)
                conn.execute(
                    "INSERT INTO campaign_rows (id, aggregate, owner_id, data_json, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        row_id,
                        self._aggregate,
                        str(owner_id),
                        json.dumps(payload, ensure_ascii=False),
                        _epoch_ms(),
                    ),
                )
        except sqlite3.IntegrityError as exc:  # duplicate id
            raise KeyError(row_id) from exc
        payload["id"] = row_id
        return payload

    def update(self, row_id: str, partial: Mapping[str, Any]) -> None:
        changes = {key: value for key, value in partial.items() if key != "id"}
        conn = self._connection()
        with conn:
            _begin_immediate(conn)
            cur = conn.execute(
                "SELECT data_json FROM campaign_rows WHERE id = ? AND aggregate = ?",
                (str(row_id), self._aggregate),
            )
            current = cur.fetchone()
            if current is None:
                raise KeyError(str(row_id))
            try:
                data = json.loads(current["data_json"])
            except (TypeError, ValueError):
                data = {}
            if not isinstance(data, dict):
                data = {}
            data.update(changes)
            conn.execute(
                "UPDATE campaign_rows SET data_json = ? WHERE id = ?",
                (json.dumps(data, ensure_ascii=False), str(row_id)),
            )

    def delete(self, row_id: str) -> None:
        conn = self._connection()
        with conn:
            _begin_immediate(conn)
            cur = conn.execute(
                "DELETE FROM campaign_rows WHERE id = ? AND aggregate = ?",
                (str(row_id), self._aggregate),
            )
            if cur.rowcount == 0:
                raise KeyError(str(row_id))


class SQLiteRuntimeKVStore:
    """Durable key/value slots; holds the campaign snapshot and sync outbox."""

    __slots__ = ("_manager",)

    def __init__(self, manager: SQLiteConnectionManager) -> None:
        self._manager = manager

    def _connection(self) -> sqlite3.Connection:
        return self._manager.connect()

    def get(self, key: str) -> Optional[str]:
        conn = self._connection()
        cur = conn.execute(
            "SELECT value FROM runtime_kv WHERE key = ?",
            (str(key),),
        )
        row = cur.fetchone()
        if row is None:
            return None
        value = row["value"]
        return str(value) if value is not None else None

    def set(self, key: str, value: str) -> None:
        conn = self._connection()
        with conn:
            _begin_immediate(conn)
            conn.execute(
                """
                INSERT INTO runtime_kv(key, value)
                VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (str(key), str(value)),
            )

    def delete(self, key: str) -> None:
        conn = self._connection()
        with conn:
            _begin_immediate(conn)
            conn.execute(
                "DELETE FROM runtime_kv WHERE key = ?",
                (str(key),),
            )


def get_stores(db_path: Optional[os.PathLike[str] | str] = None) -> "CampaignStores":
    manager = SQLiteConnectionManager(db_path)
    return _build_campaign_stores(manager)


def _build_campaign_stores(manager: SQLiteConnectionManager) -> "CampaignStores":
    from .storage import CampaignStores

    return CampaignStores(
        collections={name: SQLiteCollectionStore(manager, name) for name in AGGREGATES},
        snapshot=SQLiteRuntimeKVStore(manager),
    )
