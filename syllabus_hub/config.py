"""
Syllabus Hub Configuration
Environment-driven settings, loaded once from .env
"""

import os
import re
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Server
PORT = int(os.getenv("PORT", "4000"))
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

# MongoDB
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "syllabus_hub")

# JWT
JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET")
JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = os.getenv("ACCESS_TOKEN_TTL", "15m")
REFRESH_TOKEN_TTL = os.getenv("REFRESH_TOKEN_TTL", "7d")

# HTTP
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")
COOKIE_SECURE = _flag("COOKIE_SECURE")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED", "true")

# Email (SMTP)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_SECURE = _flag("SMTP_SECURE")
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
EMAIL_FROM = os.getenv("EMAIL_FROM")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Campus Syllabus Hub")
DISABLE_EMAIL = _flag("DISABLE_EMAIL")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _flag("LOG_JSON")

REQUIRED_SETTINGS = ("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET", "MONGO_URI")

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def is_production() -> bool:
    return ENVIRONMENT == "production"


def parse_duration(value: str) -> timedelta:
    """Parse TTL strings such as '30s', '15m', '12h' or '7d'."""
    match = _DURATION_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def validate_settings() -> None:
    """Fail fast when a required variable is missing."""
    missing = [name for name in REQUIRED_SETTINGS if not globals().get(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")
    parse_duration(ACCESS_TOKEN_TTL)
    parse_duration(REFRESH_TOKEN_TTL)
