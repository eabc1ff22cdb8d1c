import runpy
from datetime import date
from pathlib import Path

import pytest

from staffdesk.database import engine
from staffdesk.models import Appointment, BlockedTime

MIGRATION = Path(__file__).parent.parent / "migrations" / "add_active_slot_unique_index.py"
THURSDAY = date(2025, 6, 12)


@pytest.fixture
def migration(db):
    module = runpy.run_path(str(MIGRATION))
    # Start from a database that predates the index
    module["downgrade"](engine)
    return module


def test_upgrade_normalizes_legacy_times_and_creates_index(
    db, migration, make_recipient, make_appointment, make_blocked_time
):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00")
    blocked = make_blocked_time(THURSDAY, "14:30")
    db.commit()

    assert migration["upgrade"](engine) is True

    db.expire_all()
    assert db.get(Appointment, appointment.id).appointment_time == "10:00:00"
    assert db.get(BlockedTime, blocked.id).block_time == "14:30:00"


def test_upgrade_finds_collisions_across_time_formats(
    db, migration, make_recipient, make_appointment
):
    make_appointment(make_recipient(), THURSDAY, "10:00", status="confirmed")
    make_appointment(make_recipient("Ben", "Meyer"), THURSDAY, "10:00:00", status="pending")
    make_appointment(make_recipient("Cara", "Wolf"), THURSDAY, "10:00", status="cancelled")
    db.commit()

    assert migration["upgrade"](engine) is False

    with engine.connect() as conn:
        collisions = migration["find_slot_collisions"](conn)
    assert [(row[1], row[2]) for row in collisions] == [("10:00:00", 2)]
