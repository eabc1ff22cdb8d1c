from datetime import date

from staffdesk.models import Appointment

THURSDAY = "2025-06-12"


def booking_scenario(make_recipient, make_appointment, make_blocked_time):
    recipient = make_recipient(token="abc123")
    other = make_recipient("Ben", "Meyer")
    make_appointment(other, date(2025, 6, 12), "10:00:00", status="confirmed")
    make_blocked_time(date(2025, 6, 12), "14:00")
    return recipient


def test_booking_page_lists_horizon_dates(
    client, frozen_now, make_recipient, make_appointment, make_blocked_time
):
    booking_scenario(make_recipient, make_appointment, make_blocked_time)

    response = client.get("/booking/abc123")

    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == "Anna"
    assert body["available_dates"][0] == "2025-06-10"
    assert THURSDAY in body["available_dates"]
    assert "2025-06-14" not in body["available_dates"]
    assert len(body["available_dates"]) == 14


def test_slots_for_scenario_date(
    client, frozen_now, make_recipient, make_appointment, make_blocked_time
):
    booking_scenario(make_recipient, make_appointment, make_blocked_time)

    response = client.get("/booking/abc123/slots", params={"date": THURSDAY})

    assert response.status_code == 200
    slots = response.json()["slots"]
    assert len(slots) == 18
    assert "10:00" not in slots
    assert "14:00" not in slots
    assert response.json()["fully_booked"] is False


def test_slots_today_exclude_past_times(client, frozen_now, make_recipient):
    make_recipient(token="abc123")

    slots = client.get("/booking/abc123/slots", params={"date": "2025-06-10"}).json()["slots"]

    assert "09:00" not in slots
    assert slots[0] == "09:30"


def test_slots_outside_horizon_are_empty(client, frozen_now, make_recipient):
    make_recipient(token="abc123")

    saturday = client.get("/booking/abc123/slots", params={"date": "2025-06-14"}).json()

    assert saturday["slots"] == []


def test_booking_creates_confirmed_appointment(
    client, db, frozen_now, mailer, make_recipient, make_appointment, make_blocked_time
):
    recipient = booking_scenario(make_recipient, make_appointment, make_blocked_time)

    response = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "11:30"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["appointment"]["status"] == "confirmed"
    assert body["appointment"]["appointment_time"] == "11:30:00"
    assert body["notification_sent"] is True
    assert mailer.sent[0]["to"] == recipient.email
    assert mailer.sent[0]["subject"].startswith("Terminbestätigung")

    db.expire_all()
    stored = db.query(Appointment).filter(Appointment.recipient_id == recipient.id).one()
    assert stored.status == "confirmed"
    assert stored.confirmed_at is not None


def test_booking_survives_email_failure(client, db, frozen_now, mailer, make_recipient):
    make_recipient(token="abc123")
    mailer.fail = True

    response = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "09:00"}
    )

    assert response.status_code == 201
    assert response.json()["notification_sent"] is False
    assert response.json()["appointment"]["status"] == "confirmed"
    db.expire_all()
    assert db.query(Appointment).count() == 1


def test_booking_taken_slot_conflicts(
    client, db, frozen_now, mailer, make_recipient, make_appointment, make_blocked_time
):
    booking_scenario(make_recipient, make_appointment, make_blocked_time)

    taken = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "10:00"}
    )
    blocked = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "14:00:00"}
    )

    assert taken.status_code == 409
    assert blocked.status_code == 409
    db.expire_all()
    assert db.query(Appointment).count() == 1


def test_slot_is_free_again_after_cancellation(
    client, frozen_now, mailer, make_recipient, make_appointment
):
    make_recipient(token="abc123")
    make_appointment(make_recipient("Ben", "Meyer"), date(2025, 6, 12), "10:00:00", "cancelled")

    response = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "10:00"}
    )

    assert response.status_code == 201


def test_booking_twice_for_same_slot_only_once(client, frozen_now, mailer, make_recipient):
    make_recipient(token="abc123")
    make_recipient("Ben", "Meyer", token="def456")
    payload = {"appointment_date": THURSDAY, "appointment_time": "15:30"}

    first = client.post("/booking/abc123", json=payload)
    second = client.post("/booking/def456", json=payload)

    assert first.status_code == 201
    assert second.status_code == 409


def test_booking_requires_date_and_time(client, db, frozen_now, make_recipient):
    make_recipient(token="abc123")

    no_time = client.post("/booking/abc123", json={"appointment_date": THURSDAY})
    no_date = client.post("/booking/abc123", json={"appointment_time": "10:00"})

    assert no_time.status_code == 400
    assert no_date.status_code == 400
    db.expire_all()
    assert db.query(Appointment).count() == 0


def test_booking_rejects_non_catalog_time(client, frozen_now, make_recipient):
    make_recipient(token="abc123")

    response = client.post(
        "/booking/abc123", json={"appointment_date": THURSDAY, "appointment_time": "10:15"}
    )

    assert response.status_code == 400


def test_booking_rejects_dates_outside_horizon(client, frozen_now, make_recipient):
    make_recipient(token="abc123")

    weekend = client.post(
        "/booking/abc123", json={"appointment_date": "2025-06-14", "appointment_time": "10:00"}
    )
    past = client.post(
        "/booking/abc123", json={"appointment_date": "2025-06-09", "appointment_time": "10:00"}
    )

    assert weekend.status_code == 400
    assert past.status_code == 400


def test_booking_rejects_past_slot_today(client, frozen_now, make_recipient):
    make_recipient(token="abc123")

    response = client.post(
        "/booking/abc123", json={"appointment_date": "2025-06-10", "appointment_time": "08:30"}
    )

    assert response.status_code == 409


def test_unknown_token_redirects_home(client, frozen_now):
    response = client.get("/booking/does-not-exist")

    assert response.status_code == 404
    assert response.headers["X-Redirect-To"] == "/"

    post = client.post(
        "/booking/does-not-exist", json={"appointment_date": THURSDAY, "appointment_time": "10:00"}
    )
    assert post.status_code == 404


def test_admin_create_respects_slot_rules(client, make_recipient, make_blocked_time):
    recipient = make_recipient()
    make_blocked_time(date(2025, 6, 12), "12:00:00")

    created = client.post(
        "/appointments",
        json={"recipient_id": recipient.id, "appointment_date": THURSDAY, "appointment_time": "11:00"},
    )
    blocked = client.post(
        "/appointments",
        json={"recipient_id": recipient.id, "appointment_date": THURSDAY, "appointment_time": "12:00"},
    )
    bad_status = client.post(
        "/appointments",
        json={
            "recipient_id": recipient.id,
            "appointment_date": THURSDAY,
            "appointment_time": "13:00",
            "status": "approved",
        },
    )

    assert created.status_code == 201
    assert created.json()["status"] == "pending"
    assert blocked.status_code == 409
    assert bad_status.status_code == 400


def test_admin_create_sees_slots_stored_without_seconds(
    client, db, make_recipient, make_appointment, make_blocked_time
):
    recipient = make_recipient()
    make_appointment(make_recipient("Ben", "Meyer"), date(2025, 6, 12), "10:00", status="confirmed")
    make_blocked_time(date(2025, 6, 12), "12:00")

    taken = client.post(
        "/appointments",
        json={"recipient_id": recipient.id, "appointment_date": THURSDAY, "appointment_time": "10:00"},
    )
    blocked = client.post(
        "/appointments",
        json={"recipient_id": recipient.id, "appointment_date": THURSDAY, "appointment_time": "12:00"},
    )
    duplicate_block = client.post(
        "/blocked-times", json={"block_date": THURSDAY, "block_time": "12:00:00"}
    )

    assert taken.status_code == 409
    assert blocked.status_code == 409
    assert duplicate_block.status_code == 409
    active = (
        db.query(Appointment)
        .filter(Appointment.appointment_date == date(2025, 6, 12), Appointment.status != "cancelled")
        .count()
    )
    assert active == 1


def test_admin_lists_appointments_by_date(client, make_recipient, make_appointment):
    recipient = make_recipient()
    make_appointment(recipient, date(2025, 6, 12), "11:00:00")
    make_appointment(recipient, date(2025, 6, 12), "09:00:00")
    make_appointment(recipient, date(2025, 6, 13), "09:00:00")

    response = client.get("/appointments", params={"date": THURSDAY})

    assert response.status_code == 200
    times = [row["appointment_time"] for row in response.json()]
    assert times == ["09:00:00", "11:00:00"]
    assert response.json()[0]["recipient"]["first_name"] == "Anna"


def test_blocked_time_endpoints(client):
    created = client.post(
        "/blocked-times", json={"block_date": THURSDAY, "block_time": "12:30", "reason": "Mittag"}
    )
    duplicate = client.post("/blocked-times", json={"block_date": THURSDAY, "block_time": "12:30:00"})

    assert created.status_code == 201
    assert created.json()["block_time"] == "12:30:00"
    assert duplicate.status_code == 409

    listed = client.get("/blocked-times", params={"start": THURSDAY, "end": THURSDAY}).json()
    assert len(listed) == 1

    deleted = client.delete(f"/blocked-times/{created.json()['id']}")
    assert deleted.status_code == 200
    assert client.get("/blocked-times").json() == []


def test_missed_appointment_email(client, mailer, make_recipient, make_appointment):
    recipient = make_recipient()
    appointment = make_appointment(recipient, date(2025, 6, 12), "10:00:00")

    response = client.post(f"/appointments/{appointment.id}/missed-email")

    assert response.status_code == 200
    assert mailer.sent[0]["to"] == recipient.email


def test_missed_appointment_email_failure_is_502(client, mailer, make_recipient, make_appointment):
    appointment = make_appointment(make_recipient(), date(2025, 6, 12), "10:00:00")
    mailer.fail = True

    response = client.post(f"/appointments/{appointment.id}/missed-email")

    assert response.status_code == 502
