from __future__ import annotations

from .models import (
    PENDING_RESERVATION_STATUS,
    DeliveryRecord,
    OrderSummary,
    ReminderConfig,
    RunReport,
    ScheduledMessage,
    Secrets,
    SMSResult,
)
from .config import ConfigurationError, load_config
from .secrets import load_secrets
from .civil_dates import days_between, parse_civil_date, resolve_today
from .scheduler import classify_offset, plan_messages

__all__ = [
    "PENDING_RESERVATION_STATUS",
    "ConfigurationError",
    "DeliveryRecord",
    "OrderSummary",
    "ReminderConfig",
    "RunReport",
    "ScheduledMessage",
    "Secrets",
    "SMSResult",
    "classify_offset",
    "days_between",
    "load_config",
    "load_secrets",
    "parse_civil_date",
    "plan_messages",
    "resolve_today",
]
