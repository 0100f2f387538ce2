"""UTC helpers shared by the evaluator, the expiry job and the admin services."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(moment: datetime) -> Tuple[datetime, datetime]:
    """Return [start of day, start of next day) for the UTC day containing moment."""
    moment = ensure_utc(moment)
    start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


_ARABIC_MONTHS = (
    "يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
    "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
)

_ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


def format_arabic_date(value: datetime) -> str:
    """Long Egyptian-Arabic date, e.g. ``١٥ مارس ٢٠٢٦``."""
    value = ensure_utc(value)
    text = f"{value.day} {_ARABIC_MONTHS[value.month - 1]} {value.year}"
    return text.translate(_ARABIC_DIGITS)
