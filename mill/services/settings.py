from __future__ import annotations

from dataclasses import asdict

from mill.ledger import LedgerStore, UpdateSettings
from mill.models import AppSettings
from mill.utils import clean_text


def _non_negative(value, label: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number.")
    if v < 0:
        raise ValueError(f"{label} cannot be negative.")
    return v


def save_settings(store: LedgerStore, **updates) -> AppSettings:
    """Validates and merges any subset of the settings fields."""
    clean: dict = {}
    for key, value in updates.items():
        if key == "low_stock_threshold":
            clean[key] = _non_negative(value, "Low stock threshold")
        elif key == "default_flour_price":
            clean[key] = _non_negative(value, "Default flour price")
        elif key in ("business_name", "owner_name"):
            text = clean_text(value)
            if not text:
                raise ValueError("Business name and owner name cannot be empty.")
            clean[key] = text
        elif key == "notifications":
            clean[key] = bool(value)
        else:
            raise ValueError(f"Unknown setting: {key}")

    store.dispatch(UpdateSettings(clean))
    return store.state.settings


def reset_settings(store: LedgerStore) -> AppSettings:
    store.dispatch(UpdateSettings(asdict(AppSettings())))
    return store.state.settings


def clear_all_data(store: LedgerStore) -> None:
    # Back to a fresh install, which also ends the session.
    store.reset()
