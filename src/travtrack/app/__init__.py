from __future__ import annotations

from .context import build_context, flush_feedback

__all__ = ["build_context", "flush_feedback"]
