from datetime import date

from staffdesk.domain.recipients.parsing import (
    DUPLICATE_ERROR,
    FORMAT_ERROR,
    INVALID_EMAIL_ERROR,
    MISSING_FIELDS_ERROR,
    parse_recipient_lines,
)
from staffdesk.models import Appointment, Recipient


def test_parser_reports_each_bad_line():
    text = "\n".join(
        [
            "Anna:Schmidt:anna@example.com",
            "",
            "Ben:Meyer",
            "Clara::clara@example.com",
            "Dora:Klein:not-an-email",
            "Emil:Wolf:ANNA@example.com",
            "  Finn : Bauer : finn@example.com  ",
        ]
    )

    parsed = parse_recipient_lines(text, existing_emails=[])

    assert [(c.line, c.first_name, c.last_name, c.email) for c in parsed.candidates] == [
        (1, "Anna", "Schmidt", "anna@example.com"),
        (6, "Finn", "Bauer", "finn@example.com"),
    ]
    assert [(e.line, e.error) for e in parsed.errors] == [
        (2, FORMAT_ERROR),
        (3, MISSING_FIELDS_ERROR),
        (4, INVALID_EMAIL_ERROR),
        (5, DUPLICATE_ERROR),
    ]
    assert parsed.duplicates == 1


def test_parser_checks_existing_emails_case_insensitively():
    parsed = parse_recipient_lines("Anna:Schmidt:Anna@Example.com", existing_emails=["anna@example.com"])

    assert parsed.candidates == []
    assert parsed.duplicates == 1


def test_parser_ignores_empty_input():
    parsed = parse_recipient_lines("\n \n", existing_emails=[])

    assert parsed.candidates == []
    assert parsed.errors == []


def test_import_endpoint_inserts_valid_lines(client, db, make_recipient):
    make_recipient(email="anna@example.com")

    response = client.post(
        "/recipients/import",
        json={"content": "Ben:Meyer:Ben@Example.com\nAnna:Schmidt:anna@example.com\nkaputt"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] == 1
    assert body["duplicates"] == 1
    assert [error["line"] for error in body["errors"]] == [2, 3]

    db.expire_all()
    ben = db.query(Recipient).filter(Recipient.last_name == "Meyer").one()
    assert ben.email == "ben@example.com"
    assert ben.unique_token
    assert ben.email_sent is False


def test_create_recipient_validates_and_deduplicates(client):
    created = client.post(
        "/recipients",
        json={"first_name": "Anna", "last_name": "Schmidt", "email": " Anna@Example.com "},
    )
    duplicate = client.post(
        "/recipients", json={"first_name": "A", "last_name": "S", "email": "anna@example.com"}
    )
    invalid = client.post("/recipients", json={"first_name": "A", "last_name": "S", "email": "nope"})

    assert created.status_code == 201
    assert created.json()["email"] == "anna@example.com"
    assert duplicate.status_code == 409
    assert invalid.status_code == 400


def test_recipient_tokens_are_unique(make_recipient):
    first = make_recipient()
    second = make_recipient("Ben", "Meyer")

    assert first.unique_token != second.unique_token


def test_send_invitation_flags_recipient(client, mailer, make_recipient):
    recipient = make_recipient()

    response = client.post(f"/recipients/{recipient.id}/send-invitation")

    assert response.status_code == 200
    assert response.json()["email_sent"] is True
    assert mailer.sent[0]["to"] == recipient.email
    assert recipient.unique_token in mailer.sent[0]["body"]


def test_failed_invitation_leaves_flag_unset(client, db, mailer, make_recipient):
    recipient = make_recipient()
    mailer.fail = True

    response = client.post(f"/recipients/{recipient.id}/send-invitation")

    assert response.status_code == 502
    db.expire_all()
    assert db.get(Recipient, recipient.id).email_sent is False


def test_phone_note_update(client, make_recipient):
    recipient = make_recipient()

    response = client.patch(
        f"/recipients/{recipient.id}/phone-note", json={"phone_note": "  0151 2345678  "}
    )

    assert response.json()["phone_note"] == "0151 2345678"


def test_delete_recipient_removes_appointments(client, db, make_recipient, make_appointment):
    recipient = make_recipient()
    make_appointment(recipient, date(2025, 6, 12), "10:00:00")

    assert client.delete(f"/recipients/{recipient.id}").status_code == 200

    db.expire_all()
    assert db.query(Recipient).count() == 0
    assert db.query(Appointment).count() == 0
