from __future__ import annotations

import logging
import re

from twilio.rest import Client

from voucher_core.models import SMSResult

LOGGER = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "82"


def to_e164(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Convert a domestic number such as ``010-1234-5678`` to ``+821012345678``."""
    raw = phone.strip()
    if raw.startswith("+"):
        return "+" + re.sub(r"\D", "", raw)
    digits = re.sub(r"\D", "", raw)
    if digits.startswith("00"):
        return "+" + digits[2:]
    if digits.startswith("0"):
        digits = digits[1:]
    return f"+{country_code}{digits}"


class TwilioService:
    """SMS helper around the Twilio client, used as an alternative gateway."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_phone: str,
        country_code: str = DEFAULT_COUNTRY_CODE,
        client: Client | None = None,
    ):
        self.client = client or Client(account_sid, auth_token)
        self.from_phone = from_phone
        self.country_code = country_code

    def send_sms(self, to_phone: str, body: str) -> SMSResult:
        target = to_e164(to_phone, self.country_code)
        try:
            message = self.client.messages.create(to=target, from_=self.from_phone, body=body)
        except Exception as exc:
            LOGGER.error("SMS error to %s: %s", target, exc)
            return SMSResult(success=False, error=str(exc))
        LOGGER.info("SMS sent to %s", target)
        return SMSResult(success=True, message_id=message.sid)
