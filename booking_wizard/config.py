"""Configuration utilities for environment-based settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from .models import DownPaymentPolicy

DEFAULT_DOWN_PAYMENT_PER_TOURIST = Decimal("500")
DEFAULT_DOWN_PAYMENT_FLOOR = Decimal("500")
DEFAULT_LOG_LEVEL = "INFO"


def load_env(dotenv_path: Optional[str] = None) -> None:
    """Load environment variables from a .env file without overriding existing values."""
    load_dotenv(dotenv_path=dotenv_path or ".env", override=False)


def _decimal_env(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        parsed = Decimal(raw)
    except InvalidOperation:
        return default
    if not parsed.is_finite() or parsed < 0:
        return default
    return parsed


def _log_level_env(name: str, default: str) -> str:
    level = os.getenv(name, default).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return default
    return level


@dataclass(frozen=True)
class Settings:
    """Structured configuration values for the booking wizard."""

    down_payment_per_tourist: Decimal = DEFAULT_DOWN_PAYMENT_PER_TOURIST
    down_payment_floor: Decimal = DEFAULT_DOWN_PAYMENT_FLOOR
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def policy(self) -> DownPaymentPolicy:
        return DownPaymentPolicy(per_tourist=self.down_payment_per_tourist, floor=self.down_payment_floor)


@lru_cache(maxsize=1)
def get_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Return cached settings, ensuring environment variables are loaded once."""
    load_env(dotenv_path)
    return Settings(
        down_payment_per_tourist=_decimal_env("BOOKING_DOWN_PAYMENT_PER_TOURIST", DEFAULT_DOWN_PAYMENT_PER_TOURIST),
        down_payment_floor=_decimal_env("BOOKING_DOWN_PAYMENT_FLOOR", DEFAULT_DOWN_PAYMENT_FLOOR),
        log_level=_log_level_env("BOOKING_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
