from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """UTC timestamp for run metadata, second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()
