from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mill.ledger import AddCustomer, AddSale, LedgerStore
from mill.models import PAYMENT_METHODS, AppSettings, Customer, FlourSale, LedgerState, new_customer, new_sale
from mill.utils import clean_text, fmt_kg, positive_number

PAYMENT_LABELS = {
    "cash": "Cash",
    "mobile_money": "Mobile Money",
    "credit": "Credit",
}


@dataclass
class CustomerTotals:
    customer: Customer
    total_amount: float
    total_quantity_kg: float
    sales_count: int


def _normalize_payment_method(payment_method: Optional[str]) -> str:
    if not payment_method:
        return "cash"
    pm = str(payment_method).strip().lower()
    if pm in PAYMENT_METHODS:
        return pm
    raise ValueError("Invalid payment method. Use 'cash', 'mobile_money' or 'credit'.")


def get_customer(state: LedgerState, customer_id: str) -> Optional[Customer]:
    return next((c for c in state.customers if c.id == customer_id), None)


def add_customer(
    store: LedgerStore,
    *,
    name: str,
    contact: str,
    location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Customer:
    name, contact = clean_text(name), clean_text(contact)
    if not name or not contact:
        raise ValueError("Name and contact are required")

    customer = new_customer(name=name, contact=contact, location=clean_text(location) or None, now=now)
    store.dispatch(AddCustomer(customer))
    return customer


def record_sale(
    store: LedgerStore,
    *,
    customer_id: str,
    quantity_kg: float,
    price_per_kg: float,
    payment_method: str = "cash",
    notes: str = "",
    now: Optional[datetime] = None,
) -> FlourSale:
    if not customer_id or not quantity_kg or not price_per_kg:
        raise ValueError("Customer, quantity, and price are required")

    state = store.state
    customer = get_customer(state, customer_id)
    if customer is None:
        raise ValueError("Customer not found")

    qty = positive_number(quantity_kg, "Quantity (kg)")
    price = positive_number(price_per_kg, "Price per kg")
    method = _normalize_payment_method(payment_method)

    stock = state.inventory.flour_stock_kg
    if qty > stock:
        raise ValueError(f"Only {fmt_kg(stock)} flour available in stock")

    sale = new_sale(
        customer=customer,
        quantity_kg=qty,
        price_per_kg=price,
        payment_method=method,
        notes=clean_text(notes),
        now=now,
    )
    store.dispatch(AddSale(sale))
    return sale


def customer_totals(state: LedgerState) -> list[CustomerTotals]:
    """All-time totals per customer, in customer order."""
    out = []
    for c in state.customers:
        own = [s for s in state.sales if s.customer_id == c.id]
        out.append(
            CustomerTotals(
                customer=c,
                total_amount=sum(s.total_amount for s in own),
                total_quantity_kg=sum(s.quantity_kg for s in own),
                sales_count=len(own),
            )
        )
    return out


def recent_sales(state: LedgerState, limit: int = 20) -> list[FlourSale]:
    return sorted(state.sales, key=lambda s: s.sale_date, reverse=True)[:limit]


def build_receipt(sale: FlourSale, settings: AppSettings, currency: str = "KES") -> str:
    lines = [
        settings.business_name,
        "Sale Receipt",
        "",
        f"Customer: {sale.customer_name}",
        f"Date: {sale.sale_date:%Y-%m-%d}",
        f"Quantity: {fmt_kg(sale.quantity_kg)}",
        f"Price/kg: {currency} {sale.price_per_kg:g}",
        f"Payment: {PAYMENT_LABELS.get(sale.payment_method, sale.payment_method)}",
        "",
        f"Total: {currency} {sale.total_amount:.2f}",
        "",
        f"Receipt ID: #{sale.id[-6:]}",
    ]
    return "\n".join(lines)
