"""
Availability evaluation for the slot catalog.

Works on any objects exposing the appointment/blocked-time column names, so
it runs unchanged on ORM rows, pydantic models and plain test doubles.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from ...config import BOOKING_HORIZON_WEEKDAYS, FULLY_BOOKED_THRESHOLD
from .slots import SLOT_CATALOG, normalize_time, slot_minutes
from .status import AppointmentStatus

DateLike = Union[date, datetime, str]


def date_key(value: DateLike) -> str:
    """YYYY-MM-DD key used to compare dates from rows, requests and query strings"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _active_appointments_on(appointments: Iterable, target: str) -> list:
    return [
        appt
        for appt in appointments
        if date_key(appt.appointment_date) == target
        and appt.status != AppointmentStatus.CANCELLED.value
    ]


def _blocks_on(blocked_times: Iterable, target: str) -> list:
    return [block for block in blocked_times if date_key(block.block_date) == target]


def _safe_normalize(value: str) -> Optional[str]:
    try:
        return normalize_time(value)
    except ValueError:
        return None


def taken_times(target_date: DateLike, appointments: Iterable, blocked_times: Iterable) -> set[str]:
    """Normalized times removed from the catalog on target_date by bookings or blocks"""
    target = date_key(target_date)
    taken = {_safe_normalize(a.appointment_time) for a in _active_appointments_on(appointments, target)}
    taken |= {_safe_normalize(b.block_time) for b in _blocks_on(blocked_times, target)}
    taken.discard(None)
    return taken


def available_slots(
    target_date: DateLike,
    appointments: Iterable,
    blocked_times: Iterable,
    now: Optional[datetime] = None,
) -> list[str]:
    """
    Catalog labels still bookable on target_date, in catalog order.

    A slot is unavailable when it is blocked, taken by a non-cancelled
    appointment, or (for today) at or before the current wall-clock minute.
    ``now`` is local time; pass None to skip past-slot exclusion.
    """
    target = date_key(target_date)
    taken = taken_times(target, appointments, blocked_times)

    cutoff = None
    if now is not None and date_key(now) == target:
        cutoff = now.hour * 60 + now.minute

    free = []
    for label in SLOT_CATALOG:
        if normalize_time(label) in taken:
            continue
        if cutoff is not None and slot_minutes(label) <= cutoff:
            continue
        free.append(label)
    return free


def is_slot_available(
    target_date: DateLike,
    time_value: str,
    appointments: Iterable,
    blocked_times: Iterable,
    now: Optional[datetime] = None,
) -> bool:
    label = _safe_normalize(time_value)
    if label is None:
        return False
    return label[:5] in available_slots(target_date, appointments, blocked_times, now)


def booked_count(target_date: DateLike, appointments: Iterable, blocked_times: Iterable) -> int:
    target = date_key(target_date)
    return len(_active_appointments_on(appointments, target)) + len(_blocks_on(blocked_times, target))


def is_date_fully_booked(
    target_date: DateLike,
    appointments: Iterable,
    blocked_times: Iterable,
    threshold: Optional[int] = None,
) -> bool:
    """True once non-cancelled appointments plus blocked times reach the threshold"""
    limit = FULLY_BOOKED_THRESHOLD if threshold is None else threshold
    return booked_count(target_date, appointments, blocked_times) >= limit


def upcoming_weekdays(start: date, count: Optional[int] = None) -> list[date]:
    """The next ``count`` Monday-to-Friday dates, starting with ``start`` itself"""
    wanted = BOOKING_HORIZON_WEEKDAYS if count is None else count
    days = []
    current = start
    while len(days) < wanted:
        if current.weekday() < 5:
            days.append(current)
        current += timedelta(days=1)
    return days


def bookable_dates(
    appointments: Iterable,
    blocked_times: Iterable,
    now: datetime,
    count: Optional[int] = None,
) -> list[date]:
    """
    Weekdays within the booking horizon that are neither fully booked nor
    left without a free slot (today after the last slot, for instance).
    """
    appointments = list(appointments)
    blocked_times = list(blocked_times)
    result = []
    for day in upcoming_weekdays(now.date(), count):
        if is_date_fully_booked(day, appointments, blocked_times):
            continue
        if not available_slots(day, appointments, blocked_times, now):
            continue
        result.append(day)
    return result
