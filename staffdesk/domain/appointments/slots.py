"""Fixed catalog of bookable interview slots and time-label normalization"""

import re

FIRST_HOUR = 8
LAST_HOUR = 17
SLOT_MINUTES = 30

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def build_slot_catalog() -> list[str]:
    """
    Return the ordered slot labels for a working day: 08:00, 08:30, ..., 17:00, 17:30.

    The catalog does not depend on the date.
    """
    slots = []
    for hour in range(FIRST_HOUR, LAST_HOUR + 1):
        slots.append(f"{hour:02d}:00")
        if hour < LAST_HOUR:
            slots.append(f"{hour:02d}:{SLOT_MINUTES:02d}")
    # Last slot of the day is added outside the loop so the loop never reaches 18:00
    slots.append(f"{LAST_HOUR:02d}:{SLOT_MINUTES:02d}")
    return slots


SLOT_CATALOG = tuple(build_slot_catalog())


def normalize_time(value: str) -> str:
    """
    Normalize "H:MM", "HH:MM" or "HH:MM:SS" to "HH:MM:SS".

    Idempotent: normalize_time(normalize_time(x)) == normalize_time(x).

    Raises:
        ValueError: If the value is not a time of day
    """
    match = _TIME_PATTERN.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid time format: {value!r}")

    hour, minute, second = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"Invalid time format: {value!r}")

    return f"{hour:02d}:{minute:02d}:{second:02d}"


def slot_label(value: str) -> str:
    """Display label ("HH:MM") for a stored or user-supplied time"""
    return normalize_time(value)[:5]


def is_catalog_slot(value: str) -> bool:
    try:
        return slot_label(value) in SLOT_CATALOG and normalize_time(value).endswith(":00")
    except ValueError:
        return False


def slot_minutes(value: str) -> int:
    """Minutes since midnight for a time label"""
    normalized = normalize_time(value)
    return int(normalized[:2]) * 60 + int(normalized[3:5])


def stored_time_forms(value: str) -> list[str]:
    """Both forms a slot time may be stored in: "HH:MM:SS" and legacy "HH:MM" """
    normalized = normalize_time(value)
    return [normalized, normalized[:5]]
