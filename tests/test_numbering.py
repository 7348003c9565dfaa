import random
import re
from datetime import datetime, timezone

from agencyhub.billing.numbering import generate_invoice_number, generate_quote_number


def test_invoice_number_format():
    now = datetime(2026, 3, 9, 12, 0, tzinfo=timezone.utc)
    number = generate_invoice_number(now=now, rng=random.Random(7))
    assert re.fullmatch(r"INV-202603-\d{3}", number)


def test_invoice_number_suffix_is_zero_padded():
    class Low:
        def randrange(self, n):
            return 4

    now = datetime(2026, 11, 1, tzinfo=timezone.utc)
    assert generate_invoice_number(now=now, rng=Low()) == "INV-202611-004"


def test_invoice_number_defaults_to_current_month():
    number = generate_invoice_number()
    assert number.startswith(f"INV-{datetime.now():%Y%m}-")


def test_invoice_month_is_local_not_utc(monkeypatch):
    class LateOctober(datetime):
        # 23:30 local on Oct 31 is already November in UTC.
        @classmethod
        def now(cls, tz=None):
            if tz is None:
                return datetime(2026, 10, 31, 23, 30)
            return datetime(2026, 11, 1, 4, 30, tzinfo=tz)

    monkeypatch.setattr("agencyhub.billing.numbering.datetime", LateOctober)
    assert generate_invoice_number().startswith("INV-202610-")


def test_quote_number_is_last_six_millisecond_digits():
    now = datetime.fromtimestamp(1760000123.456, tz=timezone.utc)
    assert generate_quote_number(now=now) == "Q-123456"


def test_quote_number_offset_steps_past_a_clash():
    now = datetime.fromtimestamp(1760000123.456, tz=timezone.utc)
    assert generate_quote_number(now=now, offset_ms=1) == "Q-123457"


def test_quote_number_format():
    assert re.fullmatch(r"Q-\d{6}", generate_quote_number())
