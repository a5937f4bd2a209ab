"""Configuration loaded from environment variables."""

import os
from dataclasses import dataclass, field


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


@dataclass
class Settings:
    # Idempotency ledger (sqlite file)
    LEDGER_PATH: str = field(default_factory=lambda: _env("MAINT_LEDGER_PATH", "cycles.sqlite"))

    # Schedule file served by the web app
    SCHEDULE_FILE: str = field(default_factory=lambda: _env("MAINT_SCHEDULE_FILE", "schedules.yaml"))

    # Preview bounds
    PREVIEW_DEFAULT: int = field(default_factory=lambda: int(_env("MAINT_PREVIEW_DEFAULT", "10")))
    PREVIEW_MAX: int = field(default_factory=lambda: int(_env("MAINT_PREVIEW_MAX", "100")))

    # Lead time applied when a schedule file omits leadTimeDays
    DEFAULT_LEAD_DAYS: int = field(default_factory=lambda: int(_env("MAINT_DEFAULT_LEAD_DAYS", "7")))

    LOG_LEVEL: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    SECRET_KEY: str = field(default_factory=lambda: _env("SECRET_KEY", "dev-secret-key-change-in-prod"))


settings = Settings()
