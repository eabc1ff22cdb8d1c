from datetime import date

import pytest
from fastapi import HTTPException

from staffdesk.domain.appointments.service import AppointmentService
from staffdesk.domain.appointments.status import (
    ALLOWED_STATUSES,
    AppointmentStatus,
    InvalidStatusError,
    validate_status,
)
from staffdesk.models import AppointmentStatusHistory
from staffdesk.realtime import ChangeFeed

THURSDAY = date(2025, 6, 12)


def test_allow_list_has_seven_values():
    assert ALLOWED_STATUSES == [
        "pending",
        "confirmed",
        "cancelled",
        "interessiert",
        "abgelehnt",
        "mailbox",
        "infos_angefragt",
    ]


def test_validate_status_accepts_every_allowed_value():
    for value in ALLOWED_STATUSES:
        assert validate_status(value).value == value


@pytest.mark.parametrize("value", ["approved", "Confirmed", "", None, 3])
def test_validate_status_rejects_unknown_values(value):
    with pytest.raises(InvalidStatusError) as exc_info:
        validate_status(value)

    detail = exc_info.value.to_detail()
    assert detail["invalid_status"] == value
    assert detail["allowed_statuses"] == ALLOWED_STATUSES


def test_invalid_status_is_rejected_before_any_write(db, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="pending")
    service = AppointmentService(db, feed=ChangeFeed())

    with pytest.raises(HTTPException) as exc_info:
        service.update_status(appointment.id, "approved")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["invalid_status"] == "approved"
    db.expire_all()
    assert db.get(type(appointment), appointment.id).status == "pending"
    assert db.query(AppointmentStatusHistory).count() == 0


def test_mailbox_is_persisted_with_history(db, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="confirmed")
    service = AppointmentService(db, feed=ChangeFeed())

    updated = service.update_status(appointment.id, "mailbox")

    assert updated.status == "mailbox"
    history = service.get_status_history(appointment.id)
    assert [(h.old_status, h.new_status) for h in history] == [("confirmed", "mailbox")]


def test_confirming_sets_confirmed_at(db, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="pending")
    service = AppointmentService(db, feed=ChangeFeed())

    updated = service.update_status(appointment.id, AppointmentStatus.CONFIRMED.value)

    assert updated.confirmed_at is not None


def test_any_status_may_follow_any_other(db, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="cancelled")
    service = AppointmentService(db, feed=ChangeFeed())

    assert service.update_status(appointment.id, "confirmed").status == "confirmed"
    assert service.update_status(appointment.id, "abgelehnt").status == "abgelehnt"
    assert service.update_status(appointment.id, "pending").status == "pending"


def test_reviving_cancelled_appointment_onto_taken_slot_conflicts(
    db, make_recipient, make_appointment
):
    cancelled = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="cancelled")
    make_appointment(make_recipient("Ben", "Meyer"), THURSDAY, "10:00:00", status="confirmed")
    service = AppointmentService(db, feed=ChangeFeed())

    with pytest.raises(HTTPException) as exc_info:
        service.update_status(cancelled.id, "confirmed")

    assert exc_info.value.status_code == 409


def test_reviving_onto_legacy_time_row_conflicts(db, make_recipient, make_appointment):
    cancelled = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="cancelled")
    make_appointment(make_recipient("Ben", "Meyer"), THURSDAY, "10:00", status="confirmed")
    service = AppointmentService(db, feed=ChangeFeed())

    with pytest.raises(HTTPException) as exc_info:
        service.update_status(cancelled.id, "pending")

    assert exc_info.value.status_code == 409


def test_reviving_onto_blocked_but_free_slot_succeeds(
    db, make_recipient, make_appointment, make_blocked_time
):
    cancelled = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="cancelled")
    make_blocked_time(THURSDAY, "10:00:00", reason="Teammeeting")
    service = AppointmentService(db, feed=ChangeFeed())

    updated = service.update_status(cancelled.id, "confirmed")

    assert updated.status == "confirmed"
    assert updated.confirmed_at is not None


def test_unknown_appointment_is_404(db):
    service = AppointmentService(db, feed=ChangeFeed())
    with pytest.raises(HTTPException) as exc_info:
        service.update_status(999, "confirmed")
    assert exc_info.value.status_code == 404


def test_status_endpoint_reports_invalid_value(client, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00")

    response = client.patch(f"/appointments/{appointment.id}/status", json={"status": "approved"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Ungültiger Status"
    assert detail["invalid_status"] == "approved"
    assert "mailbox" in detail["allowed_statuses"]


def test_status_endpoint_and_history(client, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), THURSDAY, "10:00:00", status="confirmed")

    response = client.patch(
        f"/appointments/{appointment.id}/status", json={"status": "infos_angefragt"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "infos_angefragt"

    history = client.get(f"/appointments/{appointment.id}/history").json()
    assert len(history) == 1
    assert history[0]["new_status"] == "infos_angefragt"
