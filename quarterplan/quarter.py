"""Quarter calendar decomposition.

Maps a (year, quarter) pair onto the Monday-start ISO weeks shown in the
planner grid. Each week is assigned to the calendar month holding most of its
seven days; weeks whose majority month belongs to the neighbouring quarter are
left out.

Everything here is pure: no I/O, no module state besides the month name
tables. Malformed strings yield ``None`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

MONTH_NAMES: dict[str, tuple[str, ...]] = {
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    "et": (
        "jaanuar", "veebruar", "märts", "aprill", "mai", "juuni",
        "juuli", "august", "september", "oktoober", "november", "detsember",
    ),
}
DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class QuarterKey:
    year: int
    quarter: int


@dataclass(frozen=True)
class WeekInfo:
    start: date
    end: date
    iso_week: int
    month: int  # 0-indexed majority month

    @property
    def key(self) -> str:
        return format_iso_date(self.start)

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "start": format_iso_date(self.start),
            "end": format_iso_date(self.end),
            "iso_week": self.iso_week,
            "month": self.month,
        }


@dataclass(frozen=True)
class MonthInfo:
    month: int
    name: str
    weeks: tuple[WeekInfo, ...]

    def to_dict(self) -> dict[str, object]:
        return {"month": self.month, "name": self.name, "weeks": [w.to_dict() for w in self.weeks]}


@dataclass(frozen=True)
class QuarterStructure:
    year: int
    quarter: int
    label: str
    months: tuple[MonthInfo, ...]
    weeks: tuple[WeekInfo, ...]

    @property
    def key(self) -> QuarterKey:
        return QuarterKey(self.year, self.quarter)


class DateRange(Protocol):
    start: date
    end: date


def quarter_from_date(value: date) -> QuarterKey:
    """Q1 = Jan-Mar, Q2 = Apr-Jun, Q3 = Jul-Sep, Q4 = Oct-Dec."""
    return QuarterKey(value.year, (value.month - 1) // 3 + 1)


def shift_quarter(key: QuarterKey, delta: int) -> QuarterKey:
    """Move ``delta`` quarters forward (or back), rolling over year boundaries."""
    total = key.year * 4 + (key.quarter - 1) + delta
    year, index = divmod(total, 4)
    return QuarterKey(year, index + 1)


def start_of_week(value: date) -> date:
    if isinstance(value, datetime):
        value = value.date()
    return value - timedelta(days=value.weekday())


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def iso_week_number(value: date) -> int:
    """ISO-8601 week number.

    Week 1 is the week holding the year's first Thursday, so late-December
    dates can land in week 1 and early-January dates in week 52/53 of the
    previous ISO year.
    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isocalendar()[1]


def majority_month(week_start: date, length: int = 7) -> int:
    """Return the 0-indexed month holding most of the ``length`` days.

    Ties go to the month seen first (strictly-greater update).
    """
    counts: dict[int, int] = {}
    for offset in range(length):
        month = add_days(week_start, offset).month - 1
        counts[month] = counts.get(month, 0) + 1
    selected = week_start.month - 1
    best = 0
    for month, count in counts.items():
        if count > best:
            best = count
            selected = month
    return selected


def week_overlaps_range(week: DateRange, start: date, end: date) -> bool:
    """Inclusive interval intersection between ``week`` and ``[start, end]``."""
    return week.end >= start and week.start <= end


def month_name(month: int, locale: str = DEFAULT_LOCALE) -> str:
    names = MONTH_NAMES.get(locale) or MONTH_NAMES[DEFAULT_LOCALE]
    return names[month % 12]


def _first_of_month(year: int, month: int) -> date:
    # month is 0-indexed and may fall outside 0..11
    y, m = divmod(year * 12 + month, 12)
    return date(y, m + 1, 1)


def _collect_weeks(quarter_start: date, quarter_end: date, months: list[int]) -> list[WeekInfo]:
    weeks: list[WeekInfo] = []
    cursor = start_of_week(quarter_start)
    last = start_of_week(quarter_end)
    while cursor <= last:
        owner = majority_month(cursor)
        if owner in months:
            weeks.append(
                WeekInfo(
                    start=cursor,
                    end=add_days(cursor, 6),
                    iso_week=iso_week_number(cursor),
                    month=owner,
                )
            )
        cursor = add_days(cursor, 7)
    return weeks


def build_quarter_structure(year: int, quarter: int, locale: str = DEFAULT_LOCALE) -> QuarterStructure:
    first_month = (quarter - 1) * 3
    months = [first_month, first_month + 1, first_month + 2]
    quarter_start = _first_of_month(year, first_month)
    quarter_end = _first_of_month(year, first_month + 3) - timedelta(days=1)

    weeks = _collect_weeks(quarter_start, quarter_end, months)
    month_infos = tuple(
        MonthInfo(
            month=m,
            name=month_name(m, locale),
            weeks=tuple(w for w in weeks if w.month == m),
        )
        for m in months
    )
    return QuarterStructure(
        year=year,
        quarter=quarter,
        label=f"Q{quarter} {year}",
        months=month_infos,
        weeks=tuple(weeks),
    )


def parse_iso_date(value: str) -> date | None:
    """Parse ``YYYY-MM-DD`` leniently.

    Missing or empty month/day default to 1 and out-of-range components roll
    over (``2025-13-01`` is 2026-01-01, ``2025-02-30`` is 2025-03-02).
    Non-numeric components and unrepresentable years give ``None``.
    """
    parts = value.split("-")
    try:
        numbers = [int(p) if p.strip() else None for p in parts[:3]]
    except ValueError:
        return None
    if len(parts) > 3 or numbers[0] is None:
        return None
    year = numbers[0]
    month = numbers[1] if len(numbers) > 1 and numbers[1] is not None else 1
    day = numbers[2] if len(numbers) > 2 and numbers[2] is not None else 1
    try:
        return _first_of_month(year, month - 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def format_iso_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 datetime; naive values are local wall-clock time."""
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        return parsed.astimezone(UTC)
    except (ValueError, OverflowError):
        return None


def format_timestamp(value: datetime) -> str:
    """Canonical ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_date(value: datetime) -> date:
    """Wall-clock date of an aware timestamp in the server's local zone."""
    return value.astimezone().date()


__all__ = [
    "QuarterKey",
    "WeekInfo",
    "MonthInfo",
    "QuarterStructure",
    "quarter_from_date",
    "shift_quarter",
    "start_of_week",
    "add_days",
    "iso_week_number",
    "majority_month",
    "week_overlaps_range",
    "month_name",
    "build_quarter_structure",
    "parse_iso_date",
    "format_iso_date",
    "parse_timestamp",
    "format_timestamp",
    "local_date",
]
