from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional, Union

from mill.db import get_row, insert_row, select_rows, update_row
from mill.ledger import AddTransport, LedgerStore, UpdateTransport
from mill.models import TRANSPORT_STATUSES, TRANSPORT_TYPES, Transport
from mill.storage import revive
from mill.utils import clean_text, iso_now, parse_dt, positive_number

DateLike = Union[datetime, str, None]


@dataclass
class TransportStats:
    total: int
    scheduled: int
    in_transit: int
    delivered: int


def _iso_or_none(value: DateLike) -> Optional[str]:
    if value in (None, ""):
        return None
    return parse_dt(value).isoformat()


def row_to_transport(row: dict) -> Transport:
    return revive(Transport, row)


def create_transport(
    conn: sqlite3.Connection,
    user_id: str,
    *,
    reference: str,
    type: str,
    quantity: float,
    origin: str,
    destination: str,
    unit: str = "kg",
    driver_name: str = "",
    driver_phone: str = "",
    vehicle_number: str = "",
    scheduled_date: DateLike = None,
    estimated_arrival: DateLike = None,
) -> Transport:
    reference, origin, destination = clean_text(reference), clean_text(origin), clean_text(destination)
    if not reference or not origin or not destination:
        raise ValueError("Please fill in all required fields")
    if type not in TRANSPORT_TYPES:
        raise ValueError("Transport type must be 'maize' or 'flour'.")

    row = insert_row(
        conn,
        "transports",
        user_id,
        {
            "reference": reference,
            "type": type,
            "status": "scheduled",
            "quantity": positive_number(quantity, "Quantity"),
            "unit": clean_text(unit) or "kg",
            "origin": origin,
            "destination": destination,
            "driver_name": clean_text(driver_name),
            "driver_phone": clean_text(driver_phone),
            "vehicle_number": clean_text(vehicle_number),
            "scheduled_date": _iso_or_none(scheduled_date) or iso_now(),
            "estimated_arrival": _iso_or_none(estimated_arrival),
        },
    )
    return row_to_transport(row)


def list_transports(conn: sqlite3.Connection, user_id: str, status: Optional[str] = None) -> list[Transport]:
    where = {"status": status} if status else {}
    return [row_to_transport(r) for r in select_rows(conn, "transports", user_id, **where)]


def get_transport(conn: sqlite3.Connection, user_id: str, transport_id: str) -> Optional[Transport]:
    row = get_row(conn, "transports", user_id, transport_id)
    return row_to_transport(row) if row else None


def update_transport_status(
    conn: sqlite3.Connection,
    user_id: str,
    transport_id: str,
    status: str,
) -> Transport:
    if status not in TRANSPORT_STATUSES:
        raise ValueError(f"Unknown transport status: {status}")

    updates: dict = {"status": status}
    if status == "in_transit":
        updates["actual_departure"] = iso_now()
    return row_to_transport(update_row(conn, "transports", user_id, transport_id, updates))


def active_transports(transports: list[Transport]) -> list[Transport]:
    return [t for t in transports if t.status != "delivered"]


def recent_arrivals(transports: list[Transport], limit: int = 5) -> list[Transport]:
    return [t for t in transports if t.status == "delivered"][:limit]


def transport_stats(transports: list[Transport]) -> TransportStats:
    return TransportStats(
        total=len(transports),
        scheduled=sum(1 for t in transports if t.status == "scheduled"),
        in_transit=sum(1 for t in transports if t.status == "in_transit"),
        delivered=sum(1 for t in transports if t.status == "delivered"),
    )


def mirror_transport(store: LedgerStore, transport: Transport) -> None:
    """Keeps the ledger's copy of a backend transport current."""
    if any(t.id == transport.id for t in store.state.transports):
        updates = {k: v for k, v in asdict(transport).items() if k != "id"}
        store.dispatch(UpdateTransport(transport.id, updates))
    else:
        store.dispatch(AddTransport(transport))
