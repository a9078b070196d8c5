from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from typing import Optional

CLUB_TZ = ZoneInfo("America/New_York")

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if not dt:
        return None

    # Treat naive values as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)

def to_club_time(dt: Optional[datetime], tz: ZoneInfo = CLUB_TZ) -> Optional[datetime]:
    dt = as_utc(dt)
    if not dt:
        return None
    return dt.astimezone(tz)

def format_session_date(dt: Optional[datetime], tz: ZoneInfo = CLUB_TZ) -> str:
    """
    "Tuesday, October 20, 2026 at 6:00 PM" in the club's timezone.
    """
    local = to_club_time(dt, tz)
    if not local:
        return "N/A"

    hour = local.hour % 12 or 12
    return f"{local:%A, %B} {local.day}, {local.year} at {hour}:{local:%M %p}"

def parse_local_datetime(raw: Optional[str], tz: ZoneInfo = CLUB_TZ) -> Optional[datetime]:
    """
    Parse an <input type="datetime-local"> value ("2026-10-20T18:00")
    entered in club time. Returns an aware UTC datetime, or None if blank/invalid.
    """
    raw = (raw or "").strip()
    if not raw:
        return None

    try:
        local = datetime.fromisoformat(raw)
    except ValueError:
        return None

    if local.tzinfo is None:
        local = local.replace(tzinfo=tz)

    return local.astimezone(timezone.utc)
