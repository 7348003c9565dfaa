# agencyhub/utils/parsing.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from flask import request


class PayloadError(ValueError):
    """Request body or query string could not be used."""


def parse_int(val: Any) -> int | None:
    try:
        if val is None or str(val).strip() == "":
            return None
        return int(val)
    except (TypeError, ValueError):
        return None


def parse_date(val: Any) -> date | None:
    """Accepts YYYY-MM-DD or a full ISO timestamp (date part kept)."""
    try:
        if not val:
            return None
        if isinstance(val, datetime):
            return val.date()
        if isinstance(val, date):
            return val
        s = str(val).strip()
        if "T" in s:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        return date.fromisoformat(s)
    except (TypeError, ValueError):
        return None


def clean_str(value: Any, maxlen: int | None = None) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    return s[:maxlen] if maxlen else s


def json_body() -> dict:
    """Return the JSON object body or raise PayloadError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PayloadError("Request body must be a JSON object")
    return data


def filter_arg(name: str) -> str | None:
    """Query-string filter where "all" (or empty) means no filter."""
    value = clean_str(request.args.get(name))
    if value is None or value == "all":
        return None
    return value
