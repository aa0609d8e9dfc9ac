import math
from datetime import datetime, timezone

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]

def _round2(x: float) -> float:
    # half-up, like the browser bundle's Math.round
    return math.floor(x * 100 + 0.5) / 100

def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    i = 0
    while i < len(SIZE_UNITS) - 1 and size >= 1024 ** (i + 1):
        i += 1
    value = _round2(size / 1024 ** i)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[i]}"

def parse_iso(value: str) -> datetime:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def format_relative_date(value: str | datetime, now: datetime | None = None) -> str:
    """
    Short "how long ago" label: Just now / 5m ago / 3h ago / 2d ago,
    and the locale date for anything a week or older.
    """
    date = parse_iso(value) if isinstance(value, str) else value
    now = now or datetime.now(timezone.utc)
    minutes = math.floor((now - date).total_seconds() / 60)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    if minutes < 10080:
        return f"{minutes // 1440}d ago"
    return date.astimezone().strftime("%x")
