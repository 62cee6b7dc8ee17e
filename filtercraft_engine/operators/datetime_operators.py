"""
Temporal operators.

    $recent     0 <= now - value <= duration (days + hours + minutes)
    $upcoming   0 <= value - now <= duration
    $dayOfWeek  value's weekday in the operand list, 0 = Sunday .. 6 = Saturday
    $timeOfDay  start <= hour <= end
    $age        elapsed time in years (365.25 d), months (30.44 d) or days
    $isWeekday  (Mon..Fri) == operand
    $isWeekend  (Sat, Sun) == operand
    $isBefore   value < operand
    $isAfter    value > operand

Non-date values never match. Plain dates are treated as midnight.
"""
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Optional

from filtercraft_data_model.operand_models import AgeQuery, RelativeTimeQuery, TimeOfDayQuery

SECONDS_PER_UNIT = {
    'years': 365.25 * 86400,
    'months': 30.44 * 86400,
    'days': 86400.0,
}


def _now(tz=None) -> datetime:
    return datetime.now(tz)


def as_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return None


def _elapsed_seconds(value) -> Optional[float]:
    """Seconds from ``value`` to now, or None for non-dates."""
    moment = as_datetime(value)
    if moment is None:
        return None
    return (_now(moment.tzinfo) - moment).total_seconds()


def _recent(value, query: RelativeTimeQuery, ctx) -> bool:
    elapsed = _elapsed_seconds(value)
    return elapsed is not None and 0 <= elapsed <= query.total_seconds()


def _upcoming(value, query: RelativeTimeQuery, ctx) -> bool:
    elapsed = _elapsed_seconds(value)
    return elapsed is not None and 0 <= -elapsed <= query.total_seconds()


def day_of_week(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


def _day_of_week(value, days, ctx) -> bool:
    moment = as_datetime(value)
    return moment is not None and day_of_week(moment) in days


def _time_of_day(value, query: TimeOfDayQuery, ctx) -> bool:
    moment = as_datetime(value)
    return moment is not None and query.start <= moment.hour <= query.end


def _age(value, query: AgeQuery, ctx) -> bool:
    elapsed = _elapsed_seconds(value)
    if elapsed is None:
        return False
    age = elapsed / SECONDS_PER_UNIT[query.unit]
    if query.min is not None and age < query.min:
        return False
    if query.max is not None and age > query.max:
        return False
    return True


def _is_weekday(value, expected: bool, ctx) -> bool:
    moment = as_datetime(value)
    return moment is not None and (moment.weekday() < 5) == expected


def _is_weekend(value, expected: bool, ctx) -> bool:
    moment = as_datetime(value)
    return moment is not None and (moment.weekday() >= 5) == expected


def _relative(compare: Callable[[datetime, datetime], bool]):
    def handler(value, operand, ctx) -> bool:
        moment = as_datetime(value)
        if moment is None:
            return False
        try:
            return compare(moment, as_datetime(operand))
        except TypeError:
            # naive vs aware datetimes have no ordering
            return False
    return handler


DATETIME_OPERATORS: Dict[str, Callable[[Any, Any, Any], bool]] = {
    "$recent": _recent,
    "$upcoming": _upcoming,
    "$dayOfWeek": _day_of_week,
    "$timeOfDay": _time_of_day,
    "$age": _age,
    "$isWeekday": _is_weekday,
    "$isWeekend": _is_weekend,
    "$isBefore": _relative(lambda moment, operand: moment < operand),
    "$isAfter": _relative(lambda moment, operand: moment > operand),
}
