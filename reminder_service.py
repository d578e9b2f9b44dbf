"""
Daily reminder run for reserve orders awaiting voucher delivery.

Fetches pending orders, lets the scheduler decide today's messages and
dispatches them one by one through the configured SMS gateway. A failure for
one recipient is logged and never stops the rest of the batch.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Tuple

from voucher_core import (
    ConfigurationError,
    DeliveryRecord,
    OrderSummary,
    ReminderConfig,
    RunReport,
    ScheduledMessage,
    Secrets,
    SMSResult,
    load_config,
    load_secrets,
    plan_messages,
    resolve_today,
)
from voucher_core.civil_dates import DateLike
from voucher_core.models import DELIVERY_DRY_RUN, DELIVERY_FAILED, DELIVERY_SENT
from voucher_core.scheduler import classify_offset, order_offset

from order_store import SupabaseOrderStore
from solapi_gateway import SolapiService
from telephony import TwilioService

LOGGER = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def build_sms_gateway(config: ReminderConfig, secrets: Secrets) -> Any:
    """Create the gateway selected by ``config.sms_provider``."""
    provider = config.sms_provider
    if provider == "solapi":
        if not (secrets.solapi_api_key and secrets.solapi_api_secret):
            raise ConfigurationError("Solapi API key or secret is missing (SOLAPI_API_KEY / SOLAPI_API_SECRET).")
        if "CHANGE_ME" in secrets.solapi_api_secret:
            raise ConfigurationError("SOLAPI_API_SECRET still holds the placeholder value.")
        return SolapiService(
            api_key=secrets.solapi_api_key,
            api_secret=secrets.solapi_api_secret,
            sender=secrets.solapi_sender_number or config.sender_number,
        )
    if provider == "twilio":
        from_phone = secrets.twilio_phone or config.sender_number
        if not (secrets.twilio_sid and secrets.twilio_token and from_phone):
            raise ConfigurationError("Twilio credentials not found in secrets or config.")
        return TwilioService(
            account_sid=secrets.twilio_sid,
            auth_token=secrets.twilio_token,
            from_phone=from_phone,
            country_code=config.default_country_code,
        )
    raise ConfigurationError(f"Unknown sms_provider: {provider}")


class ReminderService:
    """Wires the order store, the scheduler and the SMS gateway together."""

    def __init__(self, config: ReminderConfig, store: Any, gateway: Optional[Any] = None):
        self.config = config
        self.store = store
        self.gateway = gateway

    @classmethod
    def from_environment(cls, config_path: Path | str | None = None, with_gateway: bool = True) -> "ReminderService":
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Failed to load config: {exc}") from exc
        try:
            secrets = load_secrets()
        except (FileNotFoundError, KeyError, ValueError) as exc:
            raise ConfigurationError(f"Failed to load secrets: {exc}") from exc

        store = SupabaseOrderStore(
            url=secrets.supabase_url,
            key=secrets.supabase_key,
            table=config.orders_table,
        )
        gateway = build_sms_gateway(config, secrets) if with_gateway else None
        return cls(config=config, store=store, gateway=gateway)

    def fetch_orders(self) -> List[OrderSummary]:
        return self.store.fetch_pending_orders(
            status=self.config.pending_status,
            order_type=self.config.order_type,
        )

    def run(
        self,
        today: Optional[DateLike] = None,
        dry_run: bool = False,
        phone: Optional[str] = None,
    ) -> RunReport:
        """Send today's reminders and return a summary of what happened."""
        run_date = resolve_today(self.config.timezone, today)
        LOGGER.info("Checking reservations for %s (%s)", run_date.isoformat(), self.config.timezone)

        orders = self.fetch_orders()
        candidates = len(orders)
        skipped = 0
        if phone is not None:
            wanted = normalize_phone(phone)
            if not wanted:
                raise ConfigurationError(f"Phone filter {phone!r} contains no digits.")
            selected = [order for order in orders if normalize_phone(order.phone) == wanted]
            skipped = candidates - len(selected)
            LOGGER.info("Phone filter %s keeps %s of %s orders", phone, len(selected), candidates)
            orders = selected

        messages = plan_messages(run_date, orders, self.config.site_url, self.config.timezone)
        report = RunReport(
            today=run_date,
            timezone=self.config.timezone,
            candidates=candidates,
            planned=len(messages),
            skipped=skipped,
            dry_run=dry_run,
        )

        if messages and not dry_run and self.gateway is None:
            raise ConfigurationError("No SMS gateway configured for a live run.")

        for message in messages:
            report.deliveries.append(self._deliver(message, dry_run))

        LOGGER.info(
            "Reminder run finished: %s candidates, %s planned, %s sent, %s failed%s",
            report.candidates,
            report.planned,
            report.sent,
            report.failed,
            " (dry run)" if dry_run else "",
        )
        return report

    def preview(self, today: Optional[DateLike] = None) -> Tuple[date, List[Tuple[OrderSummary, Optional[int], Optional[str]]]]:
        """Offset and phase of every pending order, without sending anything."""
        run_date = resolve_today(self.config.timezone, today)
        rows: List[Tuple[OrderSummary, Optional[int], Optional[str]]] = []
        for order in self.fetch_orders():
            day_offset = order_offset(run_date, order, self.config.timezone)
            phase = classify_offset(day_offset) if day_offset is not None else None
            rows.append((order, day_offset, phase))
        return run_date, rows

    def _deliver(self, message: ScheduledMessage, dry_run: bool) -> DeliveryRecord:
        record = DeliveryRecord(
            order_id=message.order_id,
            applicant_name=message.applicant_name,
            phone=message.phone,
            day_offset=message.day_offset,
            phase=message.phase,
            status=DELIVERY_DRY_RUN,
        )
        if dry_run:
            LOGGER.info(
                "[dry-run] %s to %s (%s, order %s, offset %s):\n%s",
                message.phase,
                message.phone,
                message.applicant_name,
                message.order_id,
                message.day_offset,
                message.body,
            )
            return record

        LOGGER.info(
            "Sending %s SMS to %s (%s, offset %s)",
            message.phase,
            message.applicant_name,
            message.phone,
            message.day_offset,
        )
        try:
            result = self.gateway.send_sms(message.phone, message.body)
        except Exception as exc:
            result = SMSResult(success=False, error=str(exc))

        if result.success:
            record.status = DELIVERY_SENT
        else:
            record.status = DELIVERY_FAILED
            record.error = result.error or "unknown error"
            LOGGER.error("Failed to deliver reminder to %s (order %s): %s", message.phone, message.order_id, record.error)
        return record
