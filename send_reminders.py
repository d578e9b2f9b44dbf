#!/usr/bin/env python3
"""
Send today's reserve-order reminders by SMS.

Meant to be run once a day (cron, CI schedule). ``--date`` replays any day,
``--dry-run`` logs the messages instead of sending them and ``--phone``
restricts the run to a single recipient for safe checks against production
data.
"""

from __future__ import annotations

import argparse
import logging
import sys

from order_store import OrderStoreError
from reminder_service import ReminderService
from voucher_core import ConfigurationError, parse_civil_date


def civil_date_arg(value: str):
    try:
        return parse_civil_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send SMS reminders for pending reserve orders.")
    parser.add_argument(
        "--date",
        type=civil_date_arg,
        help="Treat this YYYY-MM-DD as today (default: current date in the configured timezone).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the messages that would be sent without calling the SMS gateway.",
    )
    parser.add_argument(
        "--phone",
        help="Only process orders for this phone number.",
    )
    parser.add_argument(
        "--config",
        help="Path to config.json. Falls back to CONFIG_PATH or the project default.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        service = ReminderService.from_environment(config_path=args.config, with_gateway=not args.dry_run)
        report = service.run(today=args.date, dry_run=args.dry_run, phone=args.phone)
    except ConfigurationError as exc:
        logging.error("Configuration error: %s", exc)
        return 2
    except OrderStoreError as exc:
        logging.error("Order store error: %s", exc)
        return 1
    except Exception as exc:  # pragma: no cover - defensive automation guard
        logging.exception("Unexpected failure while sending reminders: %s", exc)
        return 1

    for delivery in report.deliveries:
        logging.info(
            "%s %s (%s) D%+d %s",
            delivery.status.upper(),
            delivery.phone,
            delivery.applicant_name,
            -delivery.day_offset,
            delivery.phase,
        )
    logging.info(
        "Reminders for %s: %s planned, %s sent, %s failed",
        report.today.isoformat(),
        report.planned,
        report.sent,
        report.failed,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
