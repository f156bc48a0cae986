# config.py

"""Relay configuration utilities.

Values are primarily loaded from ``config.json`` and may be overridden by
environment variables. The :func:`get_settings` helper merges the two sources
and caches the result.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ExitPassPricing(str, Enum):
    """Select how the exit-pass pricing lines are computed.

    ``SERVICE_FEE_ON_EMPTY`` prints a flat per-seat service fee multiplied by
    the vehicle capacity when every seat is accounted for (the vehicle leaves
    empty of bookings) and ``basePrice * seatNumber`` otherwise.
    ``BASE_PRICE_ONLY`` always prints ``basePrice * seatNumber``. The two
    station builds disagree on this, so the choice is left to the operator.
    """

    SERVICE_FEE_ON_EMPTY = "service_fee_on_empty"
    BASE_PRICE_ONLY = "base_price_only"


class Settings(BaseSettings):
    """Relay settings merged from JSON and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    relay_host: str = "127.0.0.1"
    relay_port: int = 8105

    printer_id: str = "printer1"
    printer_name: str = "Local Printer"
    printer_ip: str = "192.168.192.168"
    printer_port: int = 9100
    printer_width: int = 48
    printer_timeout_ms: int = 5000
    printer_model: str = "ESC/POS"

    send_timeout_ms: int = 5000
    post_write_settle_ms: int = 500
    assume_delivered_on_post_write_timeout: bool = True

    exit_pass_pricing: ExitPassPricing = ExitPassPricing.SERVICE_FEE_ON_EMPTY
    service_fee_per_seat: Decimal = Decimal("0.15")
    currency: str = "TND"
    ticket_timezone: str = "Africa/Tunis"
    banner_company: str = "STE DHRAIFF SERVICES"
    banner_activity: str = "TRANSPORT"

    log_level: str = "INFO"


# Cached singleton to avoid repeated file reads
@lru_cache
def get_settings() -> Settings:
    """Return merged settings with environment variable precedence.

    The configuration is read from ``config.json`` located alongside this file
    when present and fed into :class:`Settings`. Environment variables override
    any values from the JSON file. The result is cached to prevent repeated
    disk reads; tests call ``get_settings.cache_clear()`` after patching the
    environment.
    """

    config_path = Path(__file__).with_name("config.json")
    data = json.loads(config_path.read_text()) if config_path.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    merged = {**data, **env_override}
    # Environment variables override values from the JSON file.
    return Settings(**merged)
