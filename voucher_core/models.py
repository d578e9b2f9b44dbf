from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Union

PENDING_RESERVATION_STATUS = "예약일정 대기중"

PHASE_PRE_DUE = "pre-due"
PHASE_DUE = "due"
PHASE_OVERDUE_DAILY = "overdue-daily"
PHASE_OVERDUE_WEEKLY = "overdue-weekly"

DELIVERY_SENT = "sent"
DELIVERY_FAILED = "failed"
DELIVERY_DRY_RUN = "dry-run"


@dataclass
class ReminderConfig:
    """Runtime configuration loaded from json."""

    timezone: str = "Asia/Seoul"
    site_url: str = "https://simpletk.co.kr/"
    pending_status: str = PENDING_RESERVATION_STATUS
    order_type: Optional[str] = "reserve"
    orders_table: str = "orders"
    sms_provider: str = "solapi"
    sender_number: Optional[str] = None
    default_country_code: str = "82"


@dataclass
class Secrets:
    """Holds API credentials required by the reminder job."""

    supabase_url: str
    supabase_key: str
    solapi_api_key: Optional[str] = None
    solapi_api_secret: Optional[str] = None
    solapi_sender_number: Optional[str] = None
    twilio_sid: Optional[str] = None
    twilio_token: Optional[str] = None
    twilio_phone: Optional[str] = None


@dataclass
class OrderSummary:
    """The part of a stored order the reminder job looks at."""

    id: str
    phone: str
    applicant_name: str = ""
    expected_date: Union[date, str, None] = None
    status: str = PENDING_RESERVATION_STATUS

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderSummary":
        return cls(
            id=str(row.get("id", "")),
            phone=str(row.get("phone") or ""),
            applicant_name=str(row.get("applicant_name") or ""),
            expected_date=row.get("expected_date") or None,
            status=str(row.get("status") or ""),
        )


@dataclass
class ScheduledMessage:
    """A single SMS the scheduler decided to send today."""

    order_id: str
    phone: str
    applicant_name: str
    day_offset: int
    body: str
    phase: str


@dataclass
class SMSResult:
    """SMS gateway outcome."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DeliveryRecord:
    """What happened to one scheduled message during a run."""

    order_id: str
    applicant_name: str
    phone: str
    day_offset: int
    phase: str
    status: str
    error: Optional[str] = None


@dataclass
class RunReport:
    today: date
    timezone: str
    candidates: int
    planned: int
    skipped: int = 0
    dry_run: bool = False
    deliveries: List[DeliveryRecord] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return sum(1 for item in self.deliveries if item.status == DELIVERY_SENT)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.deliveries if item.status == DELIVERY_FAILED)

    @property
    def processed(self) -> int:
        return sum(1 for item in self.deliveries if item.status != DELIVERY_FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "timezone": self.timezone,
            "candidates": self.candidates,
            "planned": self.planned,
            "skipped": self.skipped,
            "dry_run": self.dry_run,
            "processed": self.processed,
            "sent": self.sent,
            "failed": self.failed,
            "results": [asdict(item) for item in self.deliveries],
        }
