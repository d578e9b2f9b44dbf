"""
Solapi SMS gateway.

Requests are authenticated with an HMAC-SHA256 header built from the API
secret, the current UTC timestamp and a random salt.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import platform
import secrets
from datetime import datetime
from typing import Optional

import pytz
import requests

from voucher_core.models import SMSResult

LOGGER = logging.getLogger(__name__)

SOLAPI_SEND_URL = "https://api.solapi.com/messages/v4/send"
DEFAULT_SENDER_NUMBER = "01000000000"
REQUEST_TIMEOUT_SECONDS = 10


def generate_signature(api_secret: str, date_time: str, salt: str) -> str:
    return hmac.new(
        api_secret.encode("utf-8"),
        (date_time + salt).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def build_auth_header(
    api_key: str,
    api_secret: str,
    date_time: Optional[str] = None,
    salt: Optional[str] = None,
) -> str:
    date_time = date_time or datetime.now(pytz.UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    salt = salt or secrets.token_hex(16)
    signature = generate_signature(api_secret, date_time, salt)
    return f"HMAC-SHA256 apiKey={api_key}, date={date_time}, salt={salt}, signature={signature}"


class SolapiService:
    """Send single SMS messages through the Solapi REST API."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        sender: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key.strip()
        self.api_secret = api_secret.strip()
        self.sender = (sender or "").strip() or DEFAULT_SENDER_NUMBER
        self.session = session or requests.Session()

    def send_sms(self, to_phone: str, body: str) -> SMSResult:
        payload = {
            "message": {
                "to": to_phone,
                "from": self.sender,
                "text": body,
            },
            "agent": {
                "sdkVersion": "python/reminder-job",
                "osPlatform": platform.system().lower() or "unknown",
            },
        }
        headers = {
            "Authorization": build_auth_header(self.api_key, self.api_secret),
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(
                SOLAPI_SEND_URL, json=payload, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS
            )
        except requests.exceptions.RequestException as exc:
            LOGGER.error("SMS error to %s: %s", to_phone, exc)
            return SMSResult(success=False, error=str(exc))

        if not response.ok:
            LOGGER.error("SMS failed to %s: %s", to_phone, response.text)
            return SMSResult(success=False, error=f"HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        message_id = data.get("messageId") or data.get("groupId")
        LOGGER.info("SMS sent to %s", to_phone)
        return SMSResult(success=True, message_id=message_id)
