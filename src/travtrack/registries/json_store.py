from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

from travtrack.io.atomic import atomic_write_text, read_text

__all__ = ["JSONSnapshotSlot"]

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class JSONSnapshotSlot:
    """File-backed implementation of :class:`SnapshotSlot`.

    Each key maps to ``<root>/<key>.json``. Values are stored verbatim (they are
    already serialised JSON) and every write goes through
    :func:`atomic_write_text` so a crash never leaves a half-written snapshot.
    """

    __slots__ = ("_root",)

    _LOG = logging.getLogger(__name__)

    def __init__(self, root: os.PathLike[str] | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        name = _UNSAFE_CHARS.sub("_", str(key)).strip("._") or "slot"
        return self._root / f"{name}.json"

    def get(self, key: str) -> Optional[str]:
        return read_text(self.path_for(key))

    def set(self, key: str, value: str) -> None:
        target = self.path_for(key)

        def _on_error(path: Path, tmp: Optional[str], exc: BaseException) -> None:
            self._LOG.error("Failed to write snapshot %s (tmp=%s): %s", path, tmp, exc)

        atomic_write_text(target, str(value), on_error=_on_error)

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return
