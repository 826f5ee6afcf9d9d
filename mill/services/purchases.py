from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Optional

from mill.ledger import AddPurchase, AddSupplier, LedgerStore
from mill.models import LedgerState, MaizePurchase, Supplier, new_purchase, new_supplier
from mill.utils import clean_text, positive_number


def get_supplier(state: LedgerState, supplier_id: str) -> Optional[Supplier]:
    return next((s for s in state.suppliers if s.id == supplier_id), None)


def add_supplier(
    store: LedgerStore,
    *,
    name: str,
    contact: str,
    location: str = "",
    now: Optional[datetime] = None,
) -> Supplier:
    name, contact = clean_text(name), clean_text(contact)
    if not name or not contact:
        raise ValueError("Name and contact are required")

    supplier = new_supplier(name=name, contact=contact, location=clean_text(location), now=now)
    store.dispatch(AddSupplier(supplier))
    return supplier


def record_purchase(
    store: LedgerStore,
    *,
    supplier_id: str,
    amount_kg: float,
    price_per_kg: float,
    notes: str = "",
    now: Optional[datetime] = None,
) -> MaizePurchase:
    if not supplier_id or amount_kg in (None, "") or price_per_kg in (None, ""):
        raise ValueError("All fields except notes are required")

    supplier = get_supplier(store.state, supplier_id)
    if supplier is None:
        raise ValueError("Supplier not found")

    purchase = new_purchase(
        supplier=supplier,
        amount_kg=positive_number(amount_kg, "Amount (kg)"),
        price_per_kg=positive_number(price_per_kg, "Price per kg"),
        notes=clean_text(notes),
        now=now,
    )
    store.dispatch(AddPurchase(purchase))
    return purchase


def purchase_counts_by_supplier(state: LedgerState) -> dict[str, int]:
    return dict(Counter(p.supplier_id for p in state.purchases))


def recent_purchases(state: LedgerState, limit: int = 20) -> list[MaizePurchase]:
    return sorted(state.purchases, key=lambda p: p.purchase_date, reverse=True)[:limit]
