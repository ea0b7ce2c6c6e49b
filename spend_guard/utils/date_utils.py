"""Date manipulation utilities"""

from datetime import date, datetime, time
from typing import List

from dateutil.relativedelta import SU, relativedelta


def month_key(moment: date) -> str:
    """Calendar month bucket key, e.g. '2024-03'"""
    return f"{moment.year:04d}-{moment.month:02d}"


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment) + relativedelta(day=1)


def subtract_months(moment: datetime, months: int) -> datetime:
    """Shift back by calendar months; relativedelta clamps to the target month's length"""
    return moment - relativedelta(months=months)


def days_remaining_in_month(today: date) -> int:
    """Days left in the calendar month, counting today (minimum 1)"""
    last_day = today + relativedelta(day=31)
    return max(1, (last_day - today).days + 1)


def start_of_week(moment: datetime) -> datetime:
    """Start of the Sunday-based calendar week containing moment"""
    return start_of_day(moment) + relativedelta(weekday=SU(-1))


def calendar_weeks(moment: datetime, count: int) -> List[tuple[datetime, datetime]]:
    """(start, end) bounds of the current week and the count-1 weeks before it, newest first"""
    current_start = start_of_week(moment)
    weeks = []
    for i in range(count):
        week_start = current_start - relativedelta(weeks=i)
        week_end = end_of_day(week_start + relativedelta(days=6))
        weeks.append((week_start, week_end))
    return weeks
