import logging
from datetime import date
from typing import List, Optional

import pytest

import reminder_service
from order_store import OrderStoreError
from reminder_service import ReminderService, build_sms_gateway, normalize_phone
from solapi_gateway import SolapiService
from telephony import TwilioService
from voucher_core import ConfigurationError, OrderSummary, ReminderConfig, Secrets, SMSResult


class _DummyStore:
    def __init__(self, orders: Optional[List[OrderSummary]] = None, error: Optional[Exception] = None):
        self.orders = orders or []
        self.error = error
        self.calls: List[dict] = []

    def fetch_pending_orders(self, status="", order_type=None):
        self.calls.append({"status": status, "order_type": order_type})
        if self.error:
            raise self.error
        return list(self.orders)


class _DummyGateway:
    def __init__(self, failing=(), raising=()):
        self.failing = set(failing)
        self.raising = set(raising)
        self.sent: List[tuple] = []

    def send_sms(self, to_phone: str, body: str) -> SMSResult:
        self.sent.append((to_phone, body))
        if to_phone in self.raising:
            raise RuntimeError("gateway exploded")
        if to_phone in self.failing:
            return SMSResult(success=False, error="invalid recipient")
        return SMSResult(success=True, message_id=f"msg-{len(self.sent)}")


ORDERS = [
    OrderSummary(id="1", phone="010-1111-1111", applicant_name="가", expected_date="2026-01-30"),
    OrderSummary(id="2", phone="010-2222-2222", applicant_name="나", expected_date="2026-01-29"),
    OrderSummary(id="3", phone="010-3333-3333", applicant_name="다", expected_date="2026-01-21"),
    OrderSummary(id="4", phone="010-4444-4444", applicant_name="라", expected_date="2026-01-15"),
    OrderSummary(id="5", phone="010-5555-5555", applicant_name="마", expected_date=None),
]


def _service(gateway=None, orders=ORDERS, **config):
    store = _DummyStore(orders)
    return ReminderService(ReminderConfig(**config), store, gateway), store


def test_run_sends_planned_messages():
    gateway = _DummyGateway()
    service, store = _service(gateway)

    report = service.run(today="2026-01-29")

    assert report.today == date(2026, 1, 29)
    assert report.candidates == 5
    assert report.planned == 3
    assert report.sent == 3
    assert report.failed == 0
    assert [phone for phone, _ in gateway.sent] == ["010-1111-1111", "010-2222-2222", "010-3333-3333"]
    assert store.calls == [{"status": "예약일정 대기중", "order_type": "reserve"}]


def test_failure_for_one_recipient_does_not_stop_others(caplog):
    gateway = _DummyGateway(failing={"010-1111-1111"}, raising={"010-2222-2222"})
    service, _ = _service(gateway)

    caplog.set_level(logging.ERROR)
    report = service.run(today="2026-01-29")

    assert len(gateway.sent) == 3
    assert report.sent == 1
    assert report.failed == 2
    statuses = {item.order_id: (item.status, item.error) for item in report.deliveries}
    assert statuses["1"] == ("failed", "invalid recipient")
    assert statuses["2"] == ("failed", "gateway exploded")
    assert statuses["3"] == ("sent", None)
    assert "010-1111-1111" in caplog.text
    assert "010-2222-2222" in caplog.text


def test_dry_run_never_calls_gateway(caplog):
    gateway = _DummyGateway()
    service, _ = _service(gateway)

    caplog.set_level(logging.INFO)
    report = service.run(today="2026-01-29", dry_run=True)

    assert gateway.sent == []
    assert report.dry_run is True
    assert report.processed == 3
    assert {item.status for item in report.deliveries} == {"dry-run"}
    assert "[dry-run]" in caplog.text


def test_dry_run_without_gateway_is_allowed():
    service, _ = _service(gateway=None)

    report = service.run(today="2026-01-29", dry_run=True)

    assert report.planned == 3


def test_live_run_without_gateway_is_a_configuration_error():
    service, _ = _service(gateway=None)

    with pytest.raises(ConfigurationError):
        service.run(today="2026-01-29")


def test_phone_filter_ignores_formatting():
    gateway = _DummyGateway()
    service, _ = _service(gateway)

    report = service.run(today="2026-01-29", phone="01022222222")

    assert report.candidates == 5
    assert report.skipped == 4
    assert [item.order_id for item in report.deliveries] == ["2"]
    assert gateway.sent[0][0] == "010-2222-2222"


def test_store_errors_propagate():
    store = _DummyStore(error=OrderStoreError("connection refused"))
    service = ReminderService(ReminderConfig(), store, _DummyGateway())

    with pytest.raises(OrderStoreError):
        service.run(today="2026-01-29")


def test_same_day_rerun_sends_again():
    gateway = _DummyGateway()
    service, _ = _service(gateway)

    service.run(today="2026-01-29")
    service.run(today="2026-01-29")

    assert len(gateway.sent) == 6


def test_preview_lists_every_order():
    service, _ = _service()

    today, rows = service.preview(today="2026-01-29")

    assert today == date(2026, 1, 29)
    assert [(order.id, offset, phase) for order, offset, phase in rows] == [
        ("1", 1, "pre-due"),
        ("2", 0, "due"),
        ("3", -8, "overdue-weekly"),
        ("4", -14, None),
        ("5", None, None),
    ]


def test_run_uses_configured_site_url():
    gateway = _DummyGateway()
    service, _ = _service(gateway, site_url="https://example.invalid/")

    service.run(today="2026-01-29", phone="010-1111-1111")

    assert gateway.sent[0][1].endswith("https://example.invalid/")


def test_report_to_dict():
    service, _ = _service(_DummyGateway())

    payload = service.run(today="2026-01-29").to_dict()

    assert payload["today"] == "2026-01-29"
    assert payload["processed"] == 3
    assert payload["results"][0]["phase"] == "pre-due"


def test_normalize_phone():
    assert normalize_phone("010-1234 5678") == "01012345678"
    assert normalize_phone("") == ""


def test_build_sms_gateway_solapi():
    secrets = Secrets(supabase_url="u", supabase_key="k", solapi_api_key="key", solapi_api_secret="secret")

    gateway = build_sms_gateway(ReminderConfig(sender_number="0212345678"), secrets)

    assert isinstance(gateway, SolapiService)
    assert gateway.sender == "0212345678"


def test_build_sms_gateway_requires_credentials():
    secrets = Secrets(supabase_url="u", supabase_key="k")

    with pytest.raises(ConfigurationError):
        build_sms_gateway(ReminderConfig(), secrets)
    with pytest.raises(ConfigurationError):
        build_sms_gateway(ReminderConfig(sms_provider="twilio"), secrets)


def test_build_sms_gateway_rejects_placeholder_secret():
    secrets = Secrets(supabase_url="u", supabase_key="k", solapi_api_key="key", solapi_api_secret="CHANGE_ME")

    with pytest.raises(ConfigurationError):
        build_sms_gateway(ReminderConfig(), secrets)


def test_build_sms_gateway_twilio(monkeypatch):
    monkeypatch.setattr("telephony.Client", lambda sid, token: object())
    secrets = Secrets(
        supabase_url="u",
        supabase_key="k",
        twilio_sid="AC123",
        twilio_token="token",
        twilio_phone="+15550001111",
    )

    gateway = build_sms_gateway(ReminderConfig(sms_provider="twilio"), secrets)

    assert isinstance(gateway, TwilioService)
    assert gateway.from_phone == "+15550001111"


def test_from_environment_wraps_missing_secrets(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing-config.json"))
    with pytest.raises(ConfigurationError):
        ReminderService.from_environment()

    monkeypatch.delenv("CONFIG_PATH")
    monkeypatch.setattr(reminder_service, "load_config", lambda path=None: ReminderConfig())
    monkeypatch.setenv("SECRETS_PATH", str(tmp_path / "missing-secrets.json"))
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    with pytest.raises(ConfigurationError):
        ReminderService.from_environment()


def test_from_environment_wraps_malformed_secrets_file(monkeypatch, tmp_path):
    secrets_file = tmp_path / "secrets.json"
    secrets_file.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(reminder_service, "load_config", lambda path=None: ReminderConfig())
    monkeypatch.setenv("SECRETS_PATH", str(secrets_file))

    with pytest.raises(ConfigurationError, match="Failed to load secrets"):
        ReminderService.from_environment(with_gateway=False)


@pytest.mark.parametrize("phone", ["abc", "", "  -  "])
def test_phone_filter_without_digits_is_rejected(phone):
    gateway = _DummyGateway()
    orders = [OrderSummary(id="blank", phone="", applicant_name="가", expected_date="2026-01-29")]
    service, _ = _service(gateway, orders=orders)

    with pytest.raises(ConfigurationError):
        service.run(today="2026-01-29", phone=phone)
    assert gateway.sent == []
