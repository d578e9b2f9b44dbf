#!/usr/bin/env python3
"""
Flask endpoint for the scheduled reminder run.

A hosted cron (e.g. daily at 09:00 KST = 00:00 UTC) calls ``GET /api/cron``.
The request may carry ``date=YYYY-MM-DD`` to replay a specific day and
``dry_run=1`` to skip sending. When CRON_SECRET is set the caller must send
``Authorization: Bearer <secret>``.
"""

from __future__ import annotations

import hmac
import logging
import os

from flask import Flask, jsonify, request

from order_store import OrderStoreError
from reminder_service import ReminderService
from voucher_core import ConfigurationError, parse_civil_date

LOGGER = logging.getLogger(__name__)

app = Flask(__name__)

TRUTHY = {"1", "true", "yes", "on"}


def _authorized() -> bool:
    secret = os.getenv("CRON_SECRET")
    if not secret:
        return True
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header, f"Bearer {secret}")


@app.route("/api/cron", methods=["GET", "POST"])
def run_cron():
    if not _authorized():
        LOGGER.warning("Rejected cron request from %s", request.remote_addr)
        return jsonify({"error": "Unauthorized"}), 401

    raw_date = request.args.get("date")
    dry_run = request.args.get("dry_run", "").strip().lower() in TRUTHY
    try:
        today = parse_civil_date(raw_date) if raw_date else None
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        service = ReminderService.from_environment(with_gateway=not dry_run)
        report = service.run(today=today, dry_run=dry_run)
    except ConfigurationError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return jsonify({"error": str(exc)}), 500
    except OrderStoreError as exc:
        LOGGER.error("Cron error: %s", exc)
        return jsonify({"error": str(exc)}), 500
    except Exception as exc:
        LOGGER.exception("Unexpected cron failure: %s", exc)
        return jsonify({"error": str(exc)}), 500

    payload = report.to_dict()
    payload["success"] = True
    return jsonify(payload), 200


@app.route("/health", methods=["GET"])
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    port = int(os.getenv("CRON_PORT", "5000"))
    host = os.getenv("CRON_HOST", "127.0.0.1")
    app.run(host=host, port=port, debug=False)
