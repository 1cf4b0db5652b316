import logging
import os
from zoneinfo import ZoneInfo

from dotenv import load_dotenv


class _Config:
    DATABASE_URL: str
    LEDGER_TIMEOUT_SECONDS: float

    CREDITS_TIMEZONE: ZoneInfo
    ROUTER_MAX_MATCHES: int

    LOG_LEVEL: int
    LOG_FILE: str | None

    JWT_SECRET: str
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int
    IS_DEVELOPMENT: bool

    ADMIN_SECRET: str
    CRON_SECRET: str

    GENERATION_API_BASE_URL: str
    GENERATION_API_KEY: str | None
    GENERATION_TIMEOUT_SECONDS: float

    NOTIFICATION_WEBHOOK_URL: str | None

    def __init__(self):
        load_dotenv()
        self.DATABASE_URL = os.path.expandvars(os.getenv("DATABASE_URL", "sqlite:///./companion_gate.db"))
        self.LEDGER_TIMEOUT_SECONDS = float(os.getenv("LEDGER_TIMEOUT_SECONDS", "2"))

        # Daily quotas roll over at midnight in this timezone
        self.CREDITS_TIMEZONE = ZoneInfo(os.getenv("CREDITS_TIMEZONE", "UTC"))
        self.ROUTER_MAX_MATCHES = int(os.getenv("ROUTER_MAX_MATCHES", "0"))

        # Configure logging
        log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_LEVEL = getattr(logging, log_level_str, logging.INFO)
        self.LOG_FILE = os.getenv("LOG_FILE", None)

        self.JWT_SECRET = os.getenv("JWT_SECRET", "")
        self.JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
        self.IS_DEVELOPMENT = os.getenv("IS_DEVELOPMENT", "False").lower() == "true"

        self.ADMIN_SECRET = os.getenv("ADMIN_SECRET", "")
        self.CRON_SECRET = os.getenv("CRON_SECRET", "")

        self.GENERATION_API_BASE_URL = os.getenv("GENERATION_API_BASE_URL", "http://localhost:8081")
        self.GENERATION_API_KEY = os.getenv("GENERATION_API_KEY", None)
        self.GENERATION_TIMEOUT_SECONDS = float(os.getenv("GENERATION_TIMEOUT_SECONDS", "60"))

        self.NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", None)


config = _Config()
