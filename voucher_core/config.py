from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Tuple

from .models import PENDING_RESERVATION_STATUS, ReminderConfig

CONFIG_ENV_VAR = "CONFIG_PATH"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.json"

SMS_PROVIDERS = ("solapi", "twilio")


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing."""


def load_config(path: Path | str | None = None) -> ReminderConfig:
    """
    Load reminder configuration from JSON.

    ENV override: CONFIG_PATH. A missing default config.json falls back to
    built-in defaults, an explicitly requested file must exist.
    """
    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return ReminderConfig()

    with open(config_path, "r", encoding="utf-8") as fh:
        payload: Dict[str, Any] = json.load(fh)

    defaults = ReminderConfig()
    provider = str(payload.get("sms_provider", defaults.sms_provider)).strip().lower()
    if provider not in SMS_PROVIDERS:
        raise ConfigurationError(
            f"Unknown sms_provider '{provider}' in {config_path}. Expected one of: {', '.join(SMS_PROVIDERS)}"
        )

    order_type = payload.get("order_type", defaults.order_type)
    return ReminderConfig(
        timezone=payload.get("timezone", defaults.timezone),
        site_url=payload.get("site_url", defaults.site_url),
        pending_status=payload.get("pending_status", PENDING_RESERVATION_STATUS),
        order_type=order_type or None,
        orders_table=payload.get("orders_table", defaults.orders_table),
        sms_provider=provider,
        sender_number=payload.get("sender_number"),
        default_country_code=str(payload.get("default_country_code", defaults.default_country_code)),
    )


def _resolve_config_path(path: Path | str | None) -> Tuple[Path, bool]:
    """Resolve config file location; the flag tells whether it was requested explicitly."""
    if path:
        return Path(path).expanduser(), True

    env_override = os.getenv(CONFIG_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser(), True

    return DEFAULT_CONFIG_PATH.expanduser(), False
