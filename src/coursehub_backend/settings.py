import os
import re
import threading
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")

_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}

def parse_duration(value: str) -> timedelta:
    """Parse durations like ``7d``, ``4h`` or ``30m``; anything else counts as one hour."""
    match = _DURATION_PATTERN.match((value or "").strip())
    if match is None:
        return timedelta(hours=1)
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})

def _database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    postgres_url = os.environ.get("POSTGRES_URL")
    if postgres_url:
        user = os.environ.get("POSTGRES_USER")
        password = os.environ.get("POSTGRES_PASSWORD")
        database = os.environ.get("POSTGRES_DB")
        return f"postgresql://{user}:{password}@{postgres_url}/{database}"

    return "sqlite:///./coursehub.db"

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.DATABASE_URL = _database_url()

        # Signed credentials
        self.JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRY = parse_duration(os.environ.get("JWT_EXPIRY", "7d"))
        self.ADMIN_JWT_EXPIRY = parse_duration(os.environ.get("ADMIN_JWT_EXPIRY", "4h"))

        # Admin sessions
        self.ADMIN_SESSION_TIMEOUT = parse_duration(os.environ.get("ADMIN_SESSION_TIMEOUT", "4h"))
        self.ADMIN_SESSION_SWEEP_INTERVAL = int(os.environ.get("ADMIN_SESSION_SWEEP_INTERVAL", "60"))
        self.HARDCODED_ADMIN_EMAIL = os.environ.get("HARDCODED_ADMIN_EMAIL", None)
        self.HARDCODED_ADMIN_PASSWORD = os.environ.get("HARDCODED_ADMIN_PASSWORD", None)

        self.EMAIL_VERIFICATION_TTL = parse_duration(os.environ.get("EMAIL_VERIFICATION_TTL", "24h"))

        # Payment gateway
        self.STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
        self.STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")
        self.PAYMENT_GATEWAY_TIMEOUT = float(os.environ.get("PAYMENT_GATEWAY_TIMEOUT", "10"))
        self.FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
