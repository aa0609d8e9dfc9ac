import random
import re
import time
from datetime import datetime, timezone

SEPARATOR = "-"
_UNSAFE = re.compile(r"[^A-Za-z0-9.-]")

def sanitize(name: str) -> str:
    """Replace every character outside [A-Za-z0-9.-] with '_'. Not reversible."""
    return _UNSAFE.sub("_", name)

def stored_name_for(original: str, now_ms: int | None = None, rand: int | None = None) -> str:
    """
    Build the on-disk name: <timestamp ms>-<random 0..1e9>-<sanitized original>.
    Neither prefix contains the separator, so the original part is always
    everything after the second '-'.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if rand is None:
        rand = random.randint(0, 10**9)
    return f"{now_ms}{SEPARATOR}{rand}{SEPARATOR}{sanitize(original)}"

def original_name_of(stored: str) -> str:
    parts = stored.split(SEPARATOR)
    return SEPARATOR.join(parts[2:]) or stored

def iso_utc(dt: datetime | None = None) -> str:
    # millisecond precision with a Z suffix, e.g. 2025-01-02T03:04:05.678Z
    dt = (dt or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def iso_from_timestamp(ts: float) -> str:
    return iso_utc(datetime.fromtimestamp(ts, tz=timezone.utc))
