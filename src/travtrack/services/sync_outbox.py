"""Queue of remote writes that follow a local commit.

Local changes are committed first; the matching remote write is queued here
and delivered best-effort. A failed write stays queued and is retried on the
next :meth:`SyncOutbox.flush` until it succeeds or runs out of attempts, at
which point it is dropped and logged. Local and remote data may then diverge;
nothing here tries to reconcile them.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from travtrack.constants import OUTBOX_KEY

LOG = logging.getLogger(__name__)

OPS = ("add", "update", "delete")


@dataclass
class PendingWrite:
    op: str
    aggregate: str
    owner_id: Optional[str] = None
    row_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    attempts: int = 0
    last_error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingWrite":
        op = str(data.get("op") or "")
        if op not in OPS:
            raise ValueError(f"unknown op {op!r}")
        payload = data.get("payload")
        return cls(
            op=op,
            aggregate=str(data.get("aggregate") or ""),
            owner_id=data.get("owner_id"),
            row_id=data.get("row_id"),
            payload=dict(payload) if isinstance(payload, dict) else {},
            attempts=int(data.get("attempts") or 0),
            last_error=data.get("last_error"),
        )


@dataclass
class SyncReport:
    sent: int = 0
    failed: int = 0
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.dropped == 0


class SyncOutbox:
    def __init__(
        self,
        repository_for: Callable[[str], Any],
        *,
        slot: Any = None,
        key: str = OUTBOX_KEY,
        max_attempts: int = 5,
    ) -> None:
        self._repository_for = repository_for
        self._slot = slot
        self._key = key
        self.max_attempts = max(1, int(max_attempts))
        self._pending: List[PendingWrite] = self._restore()

    @property
    def pending(self) -> List[PendingWrite]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    def _restore(self) -> List[PendingWrite]:
        if self._slot is None:
            return []
        try:
            raw = self._slot.get(self._key)
        except Exception:
            LOG.exception("Failed to read sync outbox '%s'", self._key)
            return []
        if not raw:
            return []
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("outbox is not a list")
            return [PendingWrite.from_dict(entry) for entry in entries]
        except (TypeError, ValueError) as exc:
            LOG.warning("Discarding unreadable sync outbox '%s' (%s)", self._key, exc)
            return []

    def _save(self) -> None:
        if self._slot is None:
            return
        try:
            self._slot.set(self._key, json.dumps([asdict(entry) for entry in self._pending]))
        except Exception:
            LOG.exception("Failed to persist sync outbox '%s'", self._key)

    # ------------------------------------------------------------------
    def enqueue(
        self,
        op: str,
        aggregate: str,
        *,
        owner_id: Optional[str] = None,
        row_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> PendingWrite:
        if op not in OPS:
            raise ValueError(f"Unsupported outbox op: {op}")
        if op == "add" and owner_id is None:
            raise ValueError("add requires owner_id")
        if op in {"update", "delete"} and not row_id:
            raise ValueError(f"{op} requires row_id")
        entry = PendingWrite(
            op=op,
            aggregate=aggregate,
            owner_id=owner_id,
            row_id=row_id,
            payload=dict(payload or {}),
        )
        self._pending.append(entry)
        self._save()
        return entry

    def _deliver(self, entry: PendingWrite) -> None:
        repo = self._repository_for(entry.aggregate)
        if entry.op == "add":
            row = dict(entry.payload)
            if entry.row_id:
                row["id"] = entry.row_id
            try:
                repo.add(entry.owner_id, row)
            except KeyError:
                # Same id already stored: an earlier flush got through.
                if not entry.row_id:
                    raise
                LOG.info("Row %s/%s already delivered", entry.aggregate, entry.row_id)
        elif entry.op == "update":
            repo.update(entry.row_id, entry.payload)
        else:
            repo.delete(entry.row_id)

    def flush(self) -> SyncReport:
        """Try to deliver every pending write in order."""

        report = SyncReport()
        remaining: List[PendingWrite] = []
        blocked: Set[str] = set()
        for entry in self._pending:
            # Keep per-aggregate order: nothing overtakes a failed write.
            if entry.aggregate in blocked:
                remaining.append(entry)
                continue
            try:
                self._deliver(entry)
            except Exception as exc:
                entry.attempts += 1
                entry.last_error = f"{type(exc).__name__}: {exc}"
                if entry.attempts >= self.max_attempts:
                    LOG.error(
                        "Dropping %s %s/%s after %d attempts: %s",
                        entry.op,
                        entry.aggregate,
                        entry.row_id,
                        entry.attempts,
                        entry.last_error,
                    )
                    report.dropped += 1
                    continue
                LOG.warning(
                    "Remote %s %s/%s failed (attempt %d/%d): %s",
                    entry.op,
                    entry.aggregate,
                    entry.row_id,
                    entry.attempts,
                    self.max_attempts,
                    entry.last_error,
                )
                report.failed += 1
                blocked.add(entry.aggregate)
                remaining.append(entry)
                continue
            report.sent += 1
        self._pending = remaining
        self._save()
        return report
