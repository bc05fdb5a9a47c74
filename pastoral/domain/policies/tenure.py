"""TenurePolicy — date arithmetic for ages, elapsed durations and month cutoffs.

All dates are date-only values; no time component or timezone is involved.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime

from pastoral.domain.errors import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12


def parse_date(value: date | str | None, field: str = "date") -> date:
    """Parse an ISO ``YYYY-MM-DD`` string (or pass a date through).

    Raises:
        ValidationError: if the value is missing or not a real calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)

    raw = str(value).strip()
    if not _ISO_DATE.match(raw):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field=field)
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{field} is not a valid calendar date: {raw}", field=field)


def age_at(birthdate: date | str | None, today: date) -> int | None:
    """Completed years between birthdate and today.

    Returns None when the birthdate is absent, unparsable or in the future.
    """
    if birthdate is None:
        return None
    try:
        born = parse_date(birthdate, field="birthdate")
    except ValidationError:
        return None

    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age if age >= 0 else None


def days_between(from_date: date, to_date: date) -> int:
    return (to_date - from_date).days


def format_elapsed(from_date: date, today: date) -> str:
    """Human-readable tenure using 30-day months and 12-month years.

    The approximation is intentional: 360 days is "1 ano", not 11 months.
    """
    days = max(0, days_between(from_date, today))
    if days < DAYS_PER_MONTH:
        return f"{days} dias"

    months = days // DAYS_PER_MONTH
    if months < MONTHS_PER_YEAR:
        return _months_label(months)

    years = months // MONTHS_PER_YEAR
    rem_months = months % MONTHS_PER_YEAR
    years_label = f"{years} ano" if years == 1 else f"{years} anos"
    if rem_months == 0:
        return years_label
    return f"{years_label} e {_months_label(rem_months)}"


def _months_label(months: int) -> str:
    return "1 mês" if months == 1 else f"{months} meses"


def add_months(reference: date, n: int) -> date:
    """Shift a date by n calendar months (n may be negative).

    The day of month is clamped to the length of the target month, so
    2024-03-31 minus one month is 2024-02-29.
    """
    month_index = reference.year * 12 + (reference.month - 1) + n
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(reference.day, last_day))


def months_ago(reference: date, n: int) -> date:
    return add_months(reference, -n)


def month_window(today: date) -> tuple[date, date]:
    """Half-open window [first of this month, first of next month)."""
    start = today.replace(day=1)
    return start, add_months(start, 1)
