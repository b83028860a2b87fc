import calendar
from datetime import date, datetime, timezone


def parse_day(value: str | date | datetime | None) -> date | None:
    """Calendar day of a stored ``date`` value, taken as written (no timezone shift).

    Returns ``None`` when the value is empty or unparseable; such rows belong to
    no day or month.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    return None


def parse_day_param(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_amount(amount: float) -> str:
    return f"{amount:,.2f}"


def format_month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def format_day_label(day: date, *, with_year: bool = True) -> str:
    label = f"{calendar.month_abbr[day.month]} {day.day}"
    return f"{label}, {day.year}" if with_year else label


def format_stored_day(value: str | None) -> str:
    day = parse_day(value)
    return format_day_label(day) if day is not None else (value or "")
