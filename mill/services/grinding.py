from __future__ import annotations

from datetime import datetime
from typing import Optional

from mill.ledger import AddGrinding, LedgerStore
from mill.models import GrindingRecord, LedgerState, MaizePurchase, new_grinding
from mill.utils import clean_text, fmt_kg, positive_number, safe_div


def ground_from_purchase(state: LedgerState, purchase_id: str) -> float:
    return sum(g.maize_amount_kg for g in state.grindings if g.purchase_id == purchase_id)


def remaining_for_purchase(state: LedgerState, purchase_id: str) -> float:
    """Unprocessed maize left on a purchase (0 for unknown purchases)."""
    purchase = next((p for p in state.purchases if p.id == purchase_id), None)
    if purchase is None:
        return 0.0
    return purchase.amount_kg - ground_from_purchase(state, purchase_id)


def available_purchases(state: LedgerState) -> list[tuple[MaizePurchase, float]]:
    out = []
    for p in state.purchases:
        remaining = remaining_for_purchase(state, p.id)
        if remaining > 0:
            out.append((p, remaining))
    return out


def yield_percentage(maize_amount_kg: float, flour_yield_kg: float) -> float:
    return safe_div(flour_yield_kg, maize_amount_kg) * 100.0


def record_grinding(
    store: LedgerStore,
    *,
    purchase_id: str,
    maize_amount_kg: float,
    flour_yield_kg: float,
    grinding_cost: Optional[float] = None,
    notes: str = "",
    now: Optional[datetime] = None,
) -> GrindingRecord:
    """
    Validates a grinding against the purchase remainder and the maize stock,
    then dispatches it. Grinding cost is optional (defaults to 0).
    """
    if not purchase_id or not maize_amount_kg or not flour_yield_kg:
        raise ValueError("Purchase, maize amount, and flour yield are required")

    state = store.state
    if not any(p.id == purchase_id for p in state.purchases):
        raise ValueError("Purchase not found")

    maize = positive_number(maize_amount_kg, "Maize amount (kg)")
    flour = positive_number(flour_yield_kg, "Flour yield (kg)")
    try:
        cost = float(grinding_cost or 0)
    except (TypeError, ValueError):
        raise ValueError("Grinding cost must be a number.")
    if cost < 0:
        raise ValueError("Grinding cost cannot be negative.")

    available = remaining_for_purchase(state, purchase_id)
    if maize > available:
        raise ValueError(f"Only {fmt_kg(available)} available from this purchase")
    if maize > state.inventory.maize_stock_kg:
        raise ValueError("Not enough maize in stock")

    grinding = new_grinding(
        purchase_id=purchase_id,
        maize_amount_kg=maize,
        flour_yield_kg=flour,
        grinding_cost=cost,
        notes=clean_text(notes),
        now=now,
    )
    store.dispatch(AddGrinding(grinding))
    return grinding


def recent_grindings(state: LedgerState, limit: int = 20) -> list[GrindingRecord]:
    return sorted(state.grindings, key=lambda g: g.grinding_date, reverse=True)[:limit]
