from __future__ import annotations

import random
import sqlite3
from datetime import timedelta

from mill.db import ensure_schema, x
from mill.ledger import LedgerStore
from mill.services.deliveries import confirm_delivery
from mill.services.grinding import record_grinding
from mill.services.purchases import add_supplier, record_purchase
from mill.services.sales import add_customer, record_sale
from mill.services.transport import create_transport, update_transport_status
from mill.utils import utc_now

DEMO_SUPPLIERS = [
    ("Kamau Farm", "0712 345 678", "Nakuru"),
    ("Wanjiru Growers", "0723 456 789", "Eldoret"),
    ("Rift Valley Co-op", "0734 567 890", "Kitale"),
]
DEMO_CUSTOMERS = [
    ("Mama Njeri Shop", "0745 678 901", "Nairobi"),
    ("Baraka Bakery", "0756 789 012", "Thika"),
    ("Upendo School", "0767 890 123", None),
]


def load_demo_data(store: LedgerStore, *, seed: int = 7) -> None:
    """Fills the ledger through the normal service path (all checks apply)."""
    rng = random.Random(seed)
    base = utc_now() - timedelta(days=6)

    suppliers = [
        add_supplier(store, name=n, contact=c, location=loc, now=base)
        for n, c, loc in DEMO_SUPPLIERS
    ]
    customers = [
        add_customer(store, name=n, contact=c, location=loc, now=base)
        for n, c, loc in DEMO_CUSTOMERS
    ]

    for day in range(6):
        ts = base + timedelta(days=day, hours=8)
        purchase = record_purchase(
            store,
            supplier_id=rng.choice(suppliers).id,
            amount_kg=rng.choice([200, 250, 300, 400]),
            price_per_kg=rng.choice([38, 40, 42, 45]),
            notes="Demo purchase",
            now=ts,
        )

        maize = round(purchase.amount_kg * rng.uniform(0.5, 0.9))
        record_grinding(
            store,
            purchase_id=purchase.id,
            maize_amount_kg=maize,
            flour_yield_kg=round(maize * rng.uniform(0.72, 0.85)),
            grinding_cost=round(maize * 3),
            now=ts + timedelta(hours=3),
        )

        qty = min(store.state.inventory.flour_stock_kg, rng.choice([50, 80, 100, 120]))
        if qty > 0:
            record_sale(
                store,
                customer_id=rng.choice(customers).id,
                quantity_kg=qty,
                price_per_kg=store.state.settings.default_flour_price,
                payment_method=rng.choice(["cash", "mobile_money", "credit"]),
                now=ts + timedelta(hours=6),
            )


def load_demo_transports(conn: sqlite3.Connection, user_id: str) -> None:
    ensure_schema(conn)
    now = utc_now()

    create_transport(
        conn,
        user_id,
        reference="TR-MAIZE-001",
        type="maize",
        quantity=300,
        origin="Kamau Farm, Nakuru",
        destination="Mill",
        driver_name="Otieno",
        driver_phone="0701 111 222",
        vehicle_number="KBX 123A",
        scheduled_date=now + timedelta(days=1),
    )

    moving = create_transport(
        conn,
        user_id,
        reference="TR-FLOUR-001",
        type="flour",
        quantity=120,
        origin="Mill",
        destination="Baraka Bakery, Thika",
        driver_name="Mwangi",
        driver_phone="0702 333 444",
        vehicle_number="KCA 456B",
        scheduled_date=now - timedelta(hours=5),
    )
    update_transport_status(conn, user_id, moving.id, "in_transit")

    done = create_transport(
        conn,
        user_id,
        reference="TR-FLOUR-000",
        type="flour",
        quantity=80,
        origin="Mill",
        destination="Mama Njeri Shop, Nairobi",
        scheduled_date=now - timedelta(days=2),
    )
    update_transport_status(conn, user_id, done.id, "in_transit")
    confirm_delivery(
        conn,
        user_id,
        transport_id=done.id,
        received_by="Njeri",
        actual_quantity=80,
        condition="excellent",
    )


def wipe_transports(conn: sqlite3.Connection, user_id: str) -> None:
    # Deliveries first (FK to transports).
    for t in ["deliveries", "transports"]:
        x(conn, f"DELETE FROM {t} WHERE user_id=?", (user_id,))
