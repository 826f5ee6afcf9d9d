from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from mill.db import get_row, insert_values, select_rows, update_values
from mill.ledger import AddDelivery, LedgerStore
from mill.models import DELIVERY_CONDITIONS, Delivery, Transport
from mill.storage import revive
from mill.services.transport import get_transport, row_to_transport
from mill.utils import clean_text, iso_now, parse_dt

logger = logging.getLogger(__name__)


@dataclass
class DeliveryStats:
    total: int
    today: int
    excellent: int
    damaged: int


def row_to_delivery(row: dict) -> Delivery:
    return revive(Delivery, row)


def list_deliveries(conn: sqlite3.Connection, user_id: str) -> list[Delivery]:
    return [row_to_delivery(r) for r in select_rows(conn, "deliveries", user_id)]


def pending_deliveries(transports: list[Transport]) -> list[Transport]:
    return [t for t in transports if t.status == "in_transit"]


def confirm_delivery(
    conn: sqlite3.Connection,
    user_id: str,
    *,
    transport_id: str,
    received_by: str,
    actual_quantity: float,
    condition: str = "good",
    damage_claims: Optional[str] = None,
    notes: Optional[str] = None,
    received_date: Union[datetime, str, None] = None,
) -> tuple[Delivery, Transport]:
    """
    Records the delivery and marks its transport delivered in one
    transaction; on any failure neither write is kept.
    """
    received_by = clean_text(received_by)
    if not transport_id or not received_by:
        raise ValueError("Please fill in all required fields")
    if condition not in DELIVERY_CONDITIONS:
        raise ValueError("Condition must be one of: " + ", ".join(DELIVERY_CONDITIONS))
    try:
        qty = float(actual_quantity)
    except (TypeError, ValueError):
        raise ValueError("Actual quantity must be a number.")
    if qty < 0:
        raise ValueError("Actual quantity cannot be negative.")

    transport = get_transport(conn, user_id, transport_id)
    if transport is None:
        raise LookupError(f"No transport with id {transport_id}.")
    if transport.status != "in_transit":
        raise ValueError("Only transports in transit can be confirmed as delivered.")

    try:
        with conn:
            delivery_id = insert_values(
                conn,
                "deliveries",
                user_id,
                {
                    "transport_id": transport_id,
                    "received_by": received_by,
                    "received_date": parse_dt(received_date).isoformat() if received_date else iso_now(),
                    "actual_quantity": qty,
                    "condition": condition,
                    "damage_claims": clean_text(damage_claims) or None,
                    "notes": clean_text(notes) or None,
                },
            )
            update_values(conn, "transports", user_id, transport_id, {"status": "delivered"})
    except sqlite3.Error:
        logger.exception("Delivery confirmation for transport %s failed", transport_id)
        raise

    delivery = row_to_delivery(get_row(conn, "deliveries", user_id, delivery_id))
    return delivery, row_to_transport(get_row(conn, "transports", user_id, transport_id))


def delivery_stats(deliveries: list[Delivery], now: datetime) -> DeliveryStats:
    today = now.date()
    return DeliveryStats(
        total=len(deliveries),
        today=sum(1 for d in deliveries if d.received_date.date() == today),
        excellent=sum(1 for d in deliveries if d.condition == "excellent"),
        damaged=sum(1 for d in deliveries if d.condition == "damaged" or d.damage_claims),
    )


def mirror_delivery(store: LedgerStore, delivery: Delivery) -> None:
    if not any(d.id == delivery.id for d in store.state.deliveries):
        store.dispatch(AddDelivery(delivery))
