import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./staffdesk.db")

# Wall clock for "today", past-slot exclusion and reminders
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Europe/Berlin")

# Booking rules
BOOKING_HORIZON_WEEKDAYS = int(os.getenv("BOOKING_HORIZON_WEEKDAYS", "14"))
# One below the 20-slot catalog; kept at the value the booking calendar has always used
FULLY_BOOKED_THRESHOLD = int(os.getenv("FULLY_BOOKED_THRESHOLD", "19"))

# Reminder tolerance band (minutes before appointment start)
REMINDER_WINDOW_MIN_MINUTES = int(os.getenv("REMINDER_WINDOW_MIN_MINUTES", "25"))
REMINDER_WINDOW_MAX_MINUTES = int(os.getenv("REMINDER_WINDOW_MAX_MINUTES", "35"))

# Frontend base URL for booking and contract links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
BOOKING_URL_PATH = os.getenv("BOOKING_URL_PATH", "/termin-buchen")
CONTRACT_URL_PATH = os.getenv("CONTRACT_URL_PATH", "/arbeitsvertrag")
CONTRACT_TOKEN_EXPIRE_DAYS = int(os.getenv("CONTRACT_TOKEN_EXPIRE_DAYS", "7"))

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Expandere <karriere@email.expandere-agentur.com>")
HR_FROM_ADDRESS = os.getenv("HR_FROM_ADDRESS", EMAIL_FROM_ADDRESS)

# Telegram bot (admin notifications and commands)
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
TELEGRAM_ADMIN_CHAT_IDS = [
    chat_id.strip()
    for chat_id in os.getenv("TELEGRAM_ADMIN_CHAT_IDS", "").split(",")
    if chat_id.strip().lstrip("-").isdigit()
]
# Optional secret Telegram echoes in X-Telegram-Bot-Api-Secret-Token on webhook calls
TELEGRAM_WEBHOOK_SECRET = os.getenv("TELEGRAM_WEBHOOK_SECRET")

# Managed auth service - CRITICAL: No default secret in production
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")
if not AUTH_JWT_SECRET:
    import warnings

    warnings.warn(
        "AUTH_JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    AUTH_JWT_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")

# Managed auth admin API (account provisioning on contract acceptance)
AUTH_ADMIN_URL = os.getenv("AUTH_ADMIN_URL")
AUTH_SERVICE_ROLE_KEY = os.getenv("AUTH_SERVICE_ROLE_KEY")

# Cloudflare R2 Configuration (ID documents)
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "staffdesk")

# Shared secret for externally scheduled reminder checks
CRON_SECRET = os.getenv("CRON_SECRET")

# Deployment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

# Redis (rate limiting and the arq reminder worker)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
