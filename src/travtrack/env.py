from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final, Tuple

from travtrack.constants import CHARACTER_NAMES
from travtrack.persistence.paths import state_path
from travtrack.util import parse_bool, parse_int

_LOG = logging.getLogger(__name__)

_SNAPSHOT_BACKEND_ENV: Final[str] = "TRAVTRACK_SNAPSHOT_BACKEND"
_VALID_SNAPSHOT_BACKENDS: Final[frozenset[str]] = frozenset({"sqlite", "json"})
_DB_FILENAME: Final[str] = "travtrack.db"
_SNAPSHOT_DIRNAME: Final[str] = "snapshots"
_CAMPAIGN_ID_ENV: Final[str] = "TRAVTRACK_CAMPAIGN_ID"
_CHARACTERS_ENV: Final[str] = "TRAVTRACK_CHARACTERS"
_SYNC_ATTEMPTS_ENV: Final[str] = "TRAVTRACK_SYNC_MAX_ATTEMPTS"
_AUTOSAVE_ENV: Final[str] = "TRAVTRACK_AUTOSAVE_INTERVAL"
_DEBUG_ENV: Final[str] = "TRAVTRACK_DEBUG"
_CONFIG_LOGGED = False


def _parse_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = parse_int(raw.strip())
    except ValueError:
        return default
    return value


def get_snapshot_backend() -> str:
    """Return the configured snapshot backend.

    The backend is controlled via the ``TRAVTRACK_SNAPSHOT_BACKEND`` environment
    variable. ``"sqlite"`` stores the snapshot in the state database,
    ``"json"`` writes one file per key under the state root. Any other value
    falls back to ``"sqlite"``.
    """

    raw = os.getenv(_SNAPSHOT_BACKEND_ENV)
    if raw is None:
        backend = "sqlite"
    else:
        candidate = raw.strip().lower()
        backend = candidate if candidate in _VALID_SNAPSHOT_BACKENDS else "sqlite"

    _log_configuration_once(backend)
    return backend


def get_state_database_path() -> Path:
    """Return the resolved path to the SQLite state database file."""

    return state_path(_DB_FILENAME)


def get_snapshot_dir() -> Path:
    """Return the directory holding JSON snapshot slots."""

    return state_path(_SNAPSHOT_DIRNAME)


def get_campaign_id() -> str:
    raw = os.getenv(_CAMPAIGN_ID_ENV)
    if raw is None or not raw.strip():
        return "default"
    return raw.strip()


def get_character_names() -> Tuple[str, ...]:
    """Return the known character display names.

    ``TRAVTRACK_CHARACTERS`` takes a comma-separated list; blank entries are
    skipped and duplicates keep their first position.
    """

    raw = os.getenv(_CHARACTERS_ENV)
    if raw is None:
        return CHARACTER_NAMES
    names = [part.strip() for part in raw.split(",")]
    return tuple(dict.fromkeys(name for name in names if name))


def sync_max_attempts() -> int:
    return max(1, _parse_int_env(_SYNC_ATTEMPTS_ENV, 5))


def autosave_interval() -> int:
    return max(0, _parse_int_env(_AUTOSAVE_ENV, 0))


def debug_enabled() -> bool:
    """Return ``True`` when verbose logging was requested."""

    return parse_bool(os.getenv(_DEBUG_ENV), default=False)


def _log_configuration_once(backend: str) -> None:
    global _CONFIG_LOGGED

    if _CONFIG_LOGGED:
        return

    _LOG.info(
        "snapshot backend=%s db_path=%s campaign=%s characters=%d sync_attempts=%d",
        backend,
        get_state_database_path(),
        get_campaign_id(),
        len(get_character_names()),
        sync_max_attempts(),
    )
    _CONFIG_LOGGED = True
