# engagement/core/dates.py
"""Календарные окна в UTC: день, неделя (с воскресенья), месяц, хвостовые периоды."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today(now: Optional[datetime] = None) -> date:
    return (now or utc_now()).astimezone(timezone.utc).date()


def start_of_day(day: date) -> datetime:
    """00:00:00 UTC указанного дня"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Начало недели: ближайшее воскресенье (индекс 0), 00:00:00 UTC"""
    today = utc_today(now)
    # date.weekday(): понедельник = 0, воскресенье = 6
    days_since_sunday = (today.weekday() + 1) % 7
    return start_of_day(today - timedelta(days=days_since_sunday))


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """1-е число текущего месяца, 00:00:00 UTC"""
    return start_of_day(utc_today(now).replace(day=1))


def trailing_days(end: date, days: int) -> tuple[date, date]:
    """Включительный диапазон из `days` календарных дней, заканчивающийся `end`"""
    return end - timedelta(days=days - 1), end
