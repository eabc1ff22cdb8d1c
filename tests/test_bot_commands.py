import asyncio
from datetime import date, datetime

import pytest

from staffdesk import config
from staffdesk.models import ActivationRequest, PhoneNumber
from staffdesk.services.bot_commands import (
    COMMAND_USAGE,
    execute_command,
    format_appointments_table,
    help_text,
    parse_command,
    process_update,
)

NOW = datetime(2025, 6, 12, 8, 0)


@pytest.fixture
def pending_request(db):
    number = PhoneNumber(phone="+4915112345678", access_code="4711")
    db.add(number)
    db.commit()
    request = ActivationRequest(phone_number_id=number.id, short_id="ABC123", status="pending")
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


def run(db, text, now=NOW):
    return execute_command(db, parse_command(text), now)


def test_parse_command_strips_bot_mention_and_splits_args():
    command = parse_command("  /Send@ExpandereBot ABC123 5512  ")

    assert command.name == "send"
    assert command.args == ["ABC123", "5512"]


def test_plain_text_is_not_a_command():
    assert parse_command("hallo") is None
    assert parse_command("") is None
    assert parse_command(None) is None


def test_unknown_command_lists_all_commands(db):
    reply = run(db, "/start")

    assert "Unbekannter Befehl: /start" in reply.text
    for usage in COMMAND_USAGE.values():
        assert usage in reply.text


def test_help_text_without_unknown():
    assert help_text().startswith("Verfügbare Befehle:")


@pytest.mark.parametrize("text", ["/activate", "/send ABC123", "/complete"])
def test_missing_arguments_reply_with_usage(db, text):
    reply = run(db, text)

    assert reply.text.startswith("⚠️ Verwendung:")


def test_activate_send_complete(db, pending_request):
    assert "erfolgreich aktiviert" in run(db, "/activate ABC123").text

    reply = run(db, "/send ABC123 5512")
    assert "5512" in reply.text

    db.expire_all()
    request = db.get(ActivationRequest, pending_request.id)
    assert request.status == "sms_requested"
    assert request.sms_code == "5512"

    assert "abgeschlossen" in run(db, "/complete ABC123").text
    db.expire_all()
    assert db.get(PhoneNumber, request.phone_number_id).is_used is True


def test_activate_by_phone_number(db, pending_request):
    reply = run(db, "/activate +4915112345678")

    assert "ABC123" in reply.text
    db.expire_all()
    assert db.get(ActivationRequest, pending_request.id).status == "activated"


def test_state_errors_become_reply_text(db, pending_request):
    assert run(db, "/send ABC123 5512").text.startswith("❌")
    assert run(db, "/activate NOPE00").text.startswith("❌")

    run(db, "/activate ABC123")
    assert run(db, "/activate ABC123").text.startswith("❌")


def test_termine_lists_todays_confirmed_appointments(db, make_recipient, make_appointment):
    anna = make_recipient(phone_note="0151 1111111")
    ben = make_recipient("Ben", "Meyer")
    make_appointment(anna, date(2025, 6, 12), "14:00:00")
    make_appointment(ben, date(2025, 6, 12), "09:30:00")
    make_appointment(ben, date(2025, 6, 12), "11:00:00", status="cancelled")
    make_appointment(anna, date(2025, 6, 13), "09:00:00")

    reply = run(db, "/termine")

    assert reply.parse_mode == "Markdown"
    assert "12.06.2025" in reply.text
    assert reply.text.index("09:30") < reply.text.index("14:00")
    assert "11:00" not in reply.text
    assert "0151 1111111" in reply.text
    assert "Nicht verfügbar" in reply.text
    assert "Gesamt: 2 Termine" in reply.text


def test_termine_without_appointments():
    text = format_appointments_table([], date(2025, 6, 12))

    assert "Keine Termine für heute" in text


def test_long_names_are_truncated_in_table():
    text = format_appointments_table(
        [("10:00:00", "Maximilian Alexander von Hohenberg", None)], date(2025, 6, 12)
    )

    assert "Maximilian Alexa..." in text


def test_process_update_ignores_unauthorized_chat(db, telegram, pending_request):
    update = {"message": {"chat": {"id": 4242}, "text": "/activate ABC123"}}

    result = asyncio.run(process_update(db, update, NOW))

    assert result == {"handled": False, "reason": "unauthorized"}
    assert telegram.messages == []
    db.expire_all()
    assert db.get(ActivationRequest, pending_request.id).status == "pending"


def test_process_update_replies_to_sender(db, telegram, pending_request):
    update = {"message": {"chat": {"id": 1002}, "text": "/activate ABC123"}}

    result = asyncio.run(process_update(db, update, NOW))

    assert result == {"handled": True, "command": "activate", "reply_sent": True}
    assert [m["chat_id"] for m in telegram.messages] == ["1002"]


def test_process_update_ignores_non_text(db, telegram):
    update = {"message": {"chat": {"id": 1001}, "sticker": {}}}

    assert asyncio.run(process_update(db, update))["handled"] is False


def test_webhook_always_acknowledges(client, telegram):
    not_json = client.post(
        "/bot/webhook", content=b"not json", headers={"Content-Type": "application/json"}
    )
    not_object = client.post("/bot/webhook", json=["x"])
    plain = client.post("/bot/webhook", json={"message": {"chat": {"id": 1001}, "text": "hi"}})

    assert not_json.status_code == 200
    assert not_json.json() == {"ok": True, "handled": False}
    assert not_object.json() == {"ok": True, "handled": False}
    assert plain.json() == {"ok": True, "handled": False, "reason": "not_a_command"}


def test_webhook_checks_secret_when_configured(client, telegram, monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_WEBHOOK_SECRET", "hook-secret")
    update = {"message": {"chat": {"id": 1001}, "text": "/termine"}}

    rejected = client.post("/bot/webhook", json=update)
    accepted = client.post(
        "/bot/webhook", json=update, headers={"X-Telegram-Bot-Api-Secret-Token": "hook-secret"}
    )

    assert rejected.status_code == 401
    assert accepted.status_code == 200
    assert accepted.json()["command"] == "termine"
