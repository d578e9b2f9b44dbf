#!/usr/bin/env python3
"""
Print the pending reserve orders and which reminder each one gets today.

Nothing is sent; useful to check the schedule before the daily run.
"""

from __future__ import annotations

import argparse
import logging
import sys

from order_store import OrderStoreError
from reminder_service import ReminderService
from send_reminders import civil_date_arg
from voucher_core import ConfigurationError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List pending reserve orders with their reminder phase.")
    parser.add_argument("--date", type=civil_date_arg, help="Treat this YYYY-MM-DD as today.")
    parser.add_argument("--config", help="Path to config.json.")
    return parser.parse_args(argv)


def format_table(rows) -> str:
    header = f"{'Order':<38} {'Name':<12} {'Phone':<15} {'Expected':<12} {'Offset':>6}  Phase"
    lines = [header, "-" * len(header)]
    for order, day_offset, phase in rows:
        expected = str(order.expected_date or "-")
        offset = "-" if day_offset is None else str(day_offset)
        lines.append(
            f"{order.id:<38} {order.applicant_name or '-':<12} {order.phone:<15} {expected:<12} {offset:>6}  {phase or '-'}"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        service = ReminderService.from_environment(config_path=args.config, with_gateway=False)
        today, rows = service.preview(today=args.date)
    except ConfigurationError as exc:
        logging.error("Configuration error: %s", exc)
        return 2
    except OrderStoreError as exc:
        logging.error("Order store error: %s", exc)
        return 1

    print(f"Active reservations as of {today.isoformat()} ({service.config.timezone}): {len(rows)}")
    print(format_table(rows))
    return 0


if __name__ == "__main__":
    sys.exit(main())
