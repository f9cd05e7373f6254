from __future__ import annotations

from datetime import datetime, timezone
import threading
import time

_lock = threading.Lock()
_last_ms = 0


def unix_ms() -> int:
    """
    Millisecond wall clock that never repeats or goes backwards within a process.
    Ties (two calls in the same millisecond) are broken by bumping the later call.
    """
    global _last_ms
    with _lock:
        now = int(time.time() * 1000)
        if now <= _last_ms:
            now = _last_ms + 1
        _last_ms = now
        return now


def from_unix_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def iso_utc(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
