import os

# Must be set before staffdesk.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AUTH_JWT_SECRET"] = "test-jwt-secret"
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"
os.environ["TELEGRAM_BOT_TOKEN"] = "123456:test-token"
os.environ["TELEGRAM_ADMIN_CHAT_IDS"] = "1001,1002"
os.environ["CRON_SECRET"] = "cron-test-secret"
os.environ["APP_TIMEZONE"] = "Europe/Berlin"
os.environ["RESEND_API_KEY"] = "re_test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from staffdesk import email_service  # noqa: E402
from staffdesk.auth import CurrentUser, get_current_admin  # noqa: E402
from staffdesk.database import Base, SessionLocal, engine  # noqa: E402
from staffdesk.main import app  # noqa: E402
from staffdesk.models import Appointment, BlockedTime, Recipient  # noqa: E402
from staffdesk.services import bot_commands, telegram_service  # noqa: E402

# Tuesday morning used by the booking scenarios
FROZEN_NOW = datetime(2025, 6, 10, 9, 0)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin_user():
    return CurrentUser(user_id="admin-user", email="admin@expandere-agentur.com", role="admin")


@pytest.fixture
def client(db, admin_user):
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def public_client(db):
    """Client without the admin override, for auth tests"""
    return TestClient(app)


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the booking workflow's wall clock to FROZEN_NOW"""
    monkeypatch.setattr("staffdesk.domain.appointments.service.local_now", lambda: FROZEN_NOW)
    return FROZEN_NOW


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_email(self, to, subject, mjml_content, from_address=None):
        if self.fail:
            raise email_service.EmailDeliveryError("Failed to send email: provider down")
        self.sent.append({"to": to, "subject": subject, "body": mjml_content, "from": from_address})
        return {"id": f"email-{len(self.sent)}"}


@pytest.fixture
def mailer(monkeypatch):
    fake = FakeMailer()
    monkeypatch.setattr(email_service, "send_email", fake.send_email)
    return fake


class FakeTelegram:
    def __init__(self):
        self.messages = []
        self.failing_chats = set()

    async def send_message(self, chat_id, text, parse_mode=None):
        if str(chat_id) in self.failing_chats:
            return False, "Forbidden: bot was blocked by the user"
        self.messages.append({"chat_id": str(chat_id), "text": text, "parse_mode": parse_mode})
        return True, None


@pytest.fixture
def telegram(monkeypatch):
    fake = FakeTelegram()
    monkeypatch.setattr(telegram_service, "send_telegram_message", fake.send_message)
    monkeypatch.setattr(bot_commands, "send_telegram_message", fake.send_message)
    return fake


@pytest.fixture
def make_recipient(db):
    def _make(first_name="Anna", last_name="Schmidt", email=None, token=None, phone_note=None):
        recipient = Recipient(
            first_name=first_name,
            last_name=last_name,
            email=email or f"{first_name.lower()}.{last_name.lower()}@example.com",
            phone_note=phone_note,
        )
        if token:
            recipient.unique_token = token
        db.add(recipient)
        db.commit()
        db.refresh(recipient)
        return recipient

    return _make


@pytest.fixture
def make_appointment(db):
    def _make(recipient, on_date: date, time_value: str, status="confirmed"):
        appointment = Appointment(
            recipient_id=recipient.id,
            appointment_date=on_date,
            appointment_time=time_value,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def make_blocked_time(db):
    def _make(on_date: date, time_value: str, reason=None):
        blocked = BlockedTime(block_date=on_date, block_time=time_value, reason=reason)
        db.add(blocked)
        db.commit()
        db.refresh(blocked)
        return blocked

    return _make
