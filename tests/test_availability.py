from datetime import date, datetime
from types import SimpleNamespace

from staffdesk.domain.appointments.availability import (
    available_slots,
    bookable_dates,
    booked_count,
    is_date_fully_booked,
    is_slot_available,
    upcoming_weekdays,
)
from staffdesk.domain.appointments.slots import SLOT_CATALOG

THURSDAY = date(2025, 6, 12)


def appt(on_date, time_value, status="confirmed"):
    return SimpleNamespace(appointment_date=on_date, appointment_time=time_value, status=status)


def block(on_date, time_value):
    return SimpleNamespace(block_date=on_date, block_time=time_value)


def test_empty_day_offers_whole_catalog():
    assert available_slots(THURSDAY, [], []) == list(SLOT_CATALOG)


def test_booking_page_scenario_leaves_eighteen_slots():
    appointments = [appt(THURSDAY, "10:00:00")]
    blocked = [block(THURSDAY, "14:00")]

    slots = available_slots(THURSDAY, appointments, blocked, now=datetime(2025, 6, 10, 9, 0))

    assert len(slots) == 18
    assert set(SLOT_CATALOG) - set(slots) == {"10:00", "14:00"}


def test_mixed_time_formats_still_match():
    appointments = [appt(THURSDAY, "09:30")]
    blocked = [block("2025-06-12", "11:00:00")]

    slots = available_slots(THURSDAY, appointments, blocked)

    assert "09:30" not in slots
    assert "11:00" not in slots


def test_cancelled_appointment_does_not_block():
    appointments = [appt(THURSDAY, "10:00:00", status="cancelled")]
    assert "10:00" in available_slots(THURSDAY, appointments, [])


def test_other_statuses_block():
    for status in ("pending", "confirmed", "interessiert", "abgelehnt", "mailbox", "infos_angefragt"):
        assert "10:00" not in available_slots(THURSDAY, [appt(THURSDAY, "10:00", status)], [])


def test_adding_bookings_never_increases_availability():
    base = available_slots(THURSDAY, [], [])
    with_block = available_slots(THURSDAY, [], [block(THURSDAY, "08:30")])
    with_both = available_slots(
        THURSDAY, [appt(THURSDAY, "12:00")], [block(THURSDAY, "08:30")]
    )

    assert set(with_block) <= set(base)
    assert set(with_both) <= set(with_block)


def test_removing_blocks_or_bookings_never_decreases_availability():
    appointments = [appt(THURSDAY, "12:00"), appt(THURSDAY, "15:30:00", status="pending")]
    blocked = [block(THURSDAY, "08:30"), block(THURSDAY, "16:00:00")]
    full = available_slots(THURSDAY, appointments, blocked)

    without_block = available_slots(THURSDAY, appointments, blocked[1:])
    without_booking = available_slots(THURSDAY, appointments[1:], blocked)
    without_both = available_slots(THURSDAY, appointments[1:], blocked[1:])

    assert set(full) <= set(without_block)
    assert set(full) <= set(without_booking)
    assert set(without_block) | set(without_booking) <= set(without_both)
    assert "08:30" in without_block and "12:00" in without_booking


def test_bookings_on_other_dates_are_ignored():
    other_day = date(2025, 6, 13)
    slots = available_slots(THURSDAY, [appt(other_day, "10:00")], [block(other_day, "14:00")])
    assert slots == list(SLOT_CATALOG)


def test_past_slots_are_excluded_today_only():
    now = datetime(2025, 6, 12, 14, 35)

    today = available_slots(THURSDAY, [], [], now=now)
    tomorrow = available_slots(date(2025, 6, 13), [], [], now=now)

    assert "14:30" not in today
    assert "08:00" not in today
    assert today[0] == "15:00"
    assert "14:30" in tomorrow
    assert tomorrow == list(SLOT_CATALOG)


def test_slot_starting_this_minute_is_past():
    now = datetime(2025, 6, 12, 15, 0)
    assert "15:00" not in available_slots(THURSDAY, [], [], now=now)


def test_is_slot_available():
    appointments = [appt(THURSDAY, "10:00:00")]
    assert not is_slot_available(THURSDAY, "10:00", appointments, [])
    assert is_slot_available(THURSDAY, "10:30:00", appointments, [])
    assert not is_slot_available(THURSDAY, "garbage", appointments, [])


def test_fully_booked_at_nineteen():
    labels = list(SLOT_CATALOG)
    appointments = [appt(THURSDAY, label) for label in labels[:18]]

    assert booked_count(THURSDAY, appointments, []) == 18
    assert not is_date_fully_booked(THURSDAY, appointments, [])

    blocked = [block(THURSDAY, labels[18])]
    assert is_date_fully_booked(THURSDAY, appointments, blocked)


def test_cancelled_do_not_count_towards_fully_booked():
    appointments = [appt(THURSDAY, label, status="cancelled") for label in SLOT_CATALOG]
    assert booked_count(THURSDAY, appointments, []) == 0
    assert not is_date_fully_booked(THURSDAY, appointments, [])


def test_upcoming_weekdays_skips_weekends():
    friday = date(2025, 6, 13)
    days = upcoming_weekdays(friday, count=3)
    assert days == [date(2025, 6, 13), date(2025, 6, 16), date(2025, 6, 17)]


def test_upcoming_weekdays_starting_on_saturday():
    days = upcoming_weekdays(date(2025, 6, 14), count=1)
    assert days == [date(2025, 6, 16)]


def test_upcoming_weekdays_default_horizon():
    days = upcoming_weekdays(date(2025, 6, 10))
    assert len(days) == 14
    assert all(day.weekday() < 5 for day in days)


def test_bookable_dates_drop_fully_booked_days():
    now = datetime(2025, 6, 10, 9, 0)
    appointments = [appt(THURSDAY, label) for label in SLOT_CATALOG[:19]]

    dates = bookable_dates(appointments, [], now, count=5)

    assert THURSDAY not in dates
    assert date(2025, 6, 10) in dates
    assert len(dates) == 4


def test_bookable_dates_drop_today_after_last_slot():
    now = datetime(2025, 6, 10, 17, 45)
    dates = bookable_dates([], [], now, count=3)
    assert date(2025, 6, 10) not in dates
    assert dates[0] == date(2025, 6, 11)
