import pytest

from staffdesk.domain.appointments.slots import (
    SLOT_CATALOG,
    build_slot_catalog,
    is_catalog_slot,
    normalize_time,
    slot_label,
    slot_minutes,
)


def test_catalog_has_twenty_half_hour_slots():
    catalog = build_slot_catalog()

    assert len(catalog) == 20
    assert catalog[0] == "08:00"
    assert catalog[-1] == "17:30"
    assert tuple(catalog) == SLOT_CATALOG


def test_catalog_is_strictly_increasing_in_thirty_minute_steps():
    minutes = [slot_minutes(label) for label in SLOT_CATALOG]
    gaps = {later - earlier for earlier, later in zip(minutes, minutes[1:])}
    assert gaps == {30}


def test_catalog_does_not_reach_six_pm():
    assert "18:00" not in SLOT_CATALOG
    assert "17:00" in SLOT_CATALOG


@pytest.mark.parametrize("value", ["09:00", "09:00:00", "9:00"])
def test_normalize_time_is_idempotent(value):
    once = normalize_time(value)
    assert once == "09:00:00"
    assert normalize_time(once) == once


@pytest.mark.parametrize("value", ["", "9", "25:00", "10:60", "ten o'clock", None])
def test_normalize_time_rejects_garbage(value):
    with pytest.raises(ValueError):
        normalize_time(value)


def test_slot_label_drops_seconds():
    assert slot_label("14:30:00") == "14:30"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("08:00", True),
        ("17:30:00", True),
        ("12:30", True),
        ("08:15", False),
        ("18:00", False),
        ("07:30", False),
        ("10:00:30", False),
        ("not a time", False),
    ],
)
def test_is_catalog_slot(value, expected):
    assert is_catalog_slot(value) is expected
