# agencyhub/billing/numbering.py
from __future__ import annotations

import random
from datetime import datetime, timezone


def generate_invoice_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """
    INV-YYYYMM-nnn, e.g. INV-202610-042. The month is the server's local
    calendar month, the one printed on the invoice.
    Note: not unique by construction. The invoice_number unique constraint
    rejects a clash and the caller retries with a fresh number.
    """
    now = now or datetime.now()
    rng = rng or random
    return f"INV-{now:%Y%m}-{rng.randrange(1000):03d}"


def generate_quote_number(now: datetime | None = None, offset_ms: int = 0) -> str:
    """
    Q-xxxxxx: last six digits of the millisecond timestamp.
    ``offset_ms`` lets a retry step past a number taken in the same millisecond.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp()) * 1000 + now.microsecond // 1000 + offset_ms
    return f"Q-{str(millis)[-6:]}"
