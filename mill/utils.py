from __future__ import annotations

import uuid
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return utc_now().isoformat()


def parse_dt(value) -> datetime:
    """Accepts a datetime or an ISO string; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def new_id() -> str:
    return uuid.uuid4().hex


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def fmt_kg(v: float) -> str:
    return f"{float(v):g}kg"


def clean_text(s) -> str:
    return str(s or "").strip()


def positive_number(value, label: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number.")
    if v <= 0:
        raise ValueError(f"{label} must be > 0.")
    return v
