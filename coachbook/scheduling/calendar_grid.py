from datetime import date, timedelta

CalendarWeek = tuple[date, date, date, date, date, date, date]


def _last_day_of_month(year: int, month: int) -> date:
    next_year, next_month = shift_month(year, month, 1)
    return date(next_year, next_month, 1) - timedelta(days=1)


def weeks_for_month(year: int, month: int) -> list[CalendarWeek]:
    """Sunday-first weeks covering the whole month.

    The first week starts on the Sunday on or before the 1st; weeks follow
    until the one holding the last day of the month is complete. Leading and
    trailing days from the neighbouring months are included as-is.
    """
    first_day = date(year, month, 1)
    last_day = _last_day_of_month(year, month)
    # date.weekday(): Monday is 0, Sunday is 6
    week_start = first_day - timedelta(days=(first_day.weekday() + 1) % 7)

    weeks: list[CalendarWeek] = []
    while week_start <= last_day:
        weeks.append(tuple(week_start + timedelta(days=i) for i in range(7)))  # type: ignore[arg-type]
        week_start += timedelta(days=7)
    return weeks


def first_upcoming_week_index(weeks: list[CalendarWeek], today: date) -> int:
    """Index of the first week whose Saturday is not in the past, else 0."""
    for index, week in enumerate(weeks):
        if week[6] >= today:
            return index
    return 0


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (or back) from year/month."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
