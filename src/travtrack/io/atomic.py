from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

ErrorHook = Callable[[Path, Optional[str], BaseException], None]


def _notify(on_error: ErrorHook | None, path: Path, tmp_name: str | None, error: BaseException) -> None:
    if on_error is None:
        return
    try:
        on_error(path, tmp_name, error)
    except Exception:
        pass


def atomic_write_text(
    path: str | Path,
    payload: str,
    *,
    on_error: ErrorHook | None = None,
) -> None:
    """
    Write ``payload`` atomically: tmp → fsync → replace.

    On Windows the final ``os.replace`` can raise ``PermissionError`` while
    another process holds the destination open. In that case one direct
    (non-atomic) write is attempted so the snapshot is not lost.
    Creates parent directories as needed.
    """

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=p.name, dir=str(p.parent))
    except Exception as exc:
        _notify(on_error, p, tmp_name, exc)
        raise

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())

        try:
            os.replace(tmp_name, p)
        except PermissionError as exc:
            try:
                with p.open("w", encoding="utf-8") as direct:
                    direct.write(payload)
                    direct.flush()
                    os.fsync(direct.fileno())
            except Exception as inner_exc:
                _notify(on_error, p, tmp_name, inner_exc)
                raise inner_exc from exc
        except Exception as exc:
            _notify(on_error, p, tmp_name, exc)
            raise
    finally:
        try:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        except OSError:
            pass


def read_text(path: str | Path, default: Optional[str] = None) -> Optional[str]:
    """
    Best-effort text read.
    - Returns `default` if the file is missing.
    - Other OS errors propagate so callers can decide how to recover.
    """
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
