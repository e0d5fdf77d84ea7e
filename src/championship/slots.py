"""
Date/time slot packing for generated matches.
"""
import datetime
import math
from typing import Iterable, Iterator, List, Tuple, TypeVar

from .errors import ValidationError

T = TypeVar('T')


def parse_time(time_str: str) -> datetime.time:
    try:
        return datetime.datetime.strptime(time_str, '%H:%M').time()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid time '{time_str}' (expected HH:MM)")


def parse_date(date_str: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(str(date_str))
    except ValueError:
        raise ValidationError(f"Invalid date '{date_str}' (expected YYYY-MM-DD)")


def parse_start(date_str: str, time_str: str) -> datetime.datetime:
    """Combine a YYYY-MM-DD date and an HH:MM time into the first slot."""
    return datetime.datetime.combine(parse_date(date_str), parse_time(time_str))


def validate_slot_settings(matches_per_day: int, interval_minutes: int):
    if not isinstance(matches_per_day, int) or matches_per_day < 1:
        raise ValidationError(f"matches_per_day must be a positive integer, got {matches_per_day!r}")
    if not isinstance(interval_minutes, int) or interval_minutes < 1:
        raise ValidationError(f"interval_minutes must be a positive integer, got {interval_minutes!r}")


def iter_slots(pairings: Iterable[T], start: datetime.datetime, matches_per_day: int,
               interval_minutes: int) -> Iterator[Tuple[T, datetime.datetime]]:
    """
    Yield (pairing, timestamp) in input order.

    The clock advances by ``interval_minutes`` after every match. Once
    ``matches_per_day`` matches sit on the current day, the clock moves to
    the next day at the time of day of ``start``.
    """
    validate_slot_settings(matches_per_day, interval_minutes)
    interval = datetime.timedelta(minutes=interval_minutes)
    day_start_time = start.time()
    current = start
    scheduled_today = 0

    for pairing in pairings:
        if scheduled_today >= matches_per_day:
            next_day = current.date() + datetime.timedelta(days=1)
            current = datetime.datetime.combine(next_day, day_start_time)
            scheduled_today = 0
        yield pairing, current
        current += interval
        scheduled_today += 1


def assign_slots(pairings: Iterable[T], start: datetime.datetime, matches_per_day: int,
                 interval_minutes: int) -> List[Tuple[T, datetime.datetime]]:
    return list(iter_slots(pairings, start, matches_per_day, interval_minutes))


def estimate_days(total_matches: int, matches_per_day: int) -> int:
    """Days needed to play ``total_matches`` at ``matches_per_day``."""
    if total_matches <= 0:
        return 0
    validate_slot_settings(matches_per_day, 1)
    return math.ceil(total_matches / matches_per_day)
