"""
Reminder scheduling for pending reserve orders.

Given the civil "today" and the pending orders, decide which customers get
which message. The cadence relative to the expected date is:

    D-1            pre-due reminder
    D-day          due-date reminder with the submission link
    overdue 1..7   daily legal notice
    overdue 8, 15, 22, ...   weekly escalation (overdue_days % 7 == 1)

Everything else produces nothing. The function is pure, so running it twice
for the same day yields the same batch.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from .civil_dates import DEFAULT_TIMEZONE, DateLike, days_between, parse_civil_date
from .models import (
    PHASE_DUE,
    PHASE_OVERDUE_DAILY,
    PHASE_OVERDUE_WEEKLY,
    PHASE_PRE_DUE,
    OrderSummary,
    ScheduledMessage,
)
from .templates import DEFAULT_SITE_URL, render_message

LOGGER = logging.getLogger(__name__)

DAILY_OVERDUE_WINDOW = 7
WEEKLY_INTERVAL = 7


def classify_offset(day_offset: int) -> Optional[str]:
    """Return the phase for a signed day offset (expected - today), or None."""
    if day_offset == 1:
        return PHASE_PRE_DUE
    if day_offset == 0:
        return PHASE_DUE
    if day_offset < 0:
        overdue_days = -day_offset
        if overdue_days <= DAILY_OVERDUE_WINDOW:
            return PHASE_OVERDUE_DAILY
        if (overdue_days - DAILY_OVERDUE_WINDOW) % WEEKLY_INTERVAL == 1:
            return PHASE_OVERDUE_WEEKLY
    return None


def order_offset(
    today: DateLike, order: OrderSummary, timezone_name: str = DEFAULT_TIMEZONE
) -> Optional[int]:
    """
    Day offset for one order, or None when it has no usable expected date.

    Malformed dates are logged and treated like a missing date.
    """
    if order.expected_date is None or order.expected_date == "":
        return None
    try:
        expected = parse_civil_date(order.expected_date)
    except ValueError as exc:
        LOGGER.warning("Skipping order %s: %s", order.id, exc)
        return None
    return days_between(today, expected, timezone_name)


def plan_messages(
    today: date,
    orders: Iterable[OrderSummary],
    site_url: str = DEFAULT_SITE_URL,
    timezone_name: str = DEFAULT_TIMEZONE,
) -> List[ScheduledMessage]:
    """Build today's message batch, preserving the input order."""
    batch: List[ScheduledMessage] = []
    for order in orders:
        day_offset = order_offset(today, order, timezone_name)
        if day_offset is None:
            continue

        phase = classify_offset(day_offset)
        if phase is None:
            LOGGER.debug("No message for order %s (offset %s)", order.id, day_offset)
            continue

        batch.append(
            ScheduledMessage(
                order_id=order.id,
                phone=order.phone,
                applicant_name=order.applicant_name,
                day_offset=day_offset,
                body=render_message(phase, order.applicant_name, site_url),
                phase=phase,
            )
        )
    return batch
