from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from mill.utils import new_id, safe_div, utc_now

PAYMENT_METHODS = ("cash", "mobile_money", "credit")
TRANSPORT_TYPES = ("maize", "flour")
TRANSPORT_STATUSES = ("scheduled", "in_transit", "delivered")
DELIVERY_CONDITIONS = ("excellent", "good", "fair", "damaged")


@dataclass
class Supplier:
    id: str
    name: str
    contact: str
    location: str
    created_at: datetime

    DATE_FIELDS = ("created_at",)


@dataclass
class MaizePurchase:
    id: str
    supplier_id: str
    supplier_name: str
    amount_kg: float
    price_per_kg: float
    total_cost: float
    purchase_date: datetime
    notes: str = ""

    DATE_FIELDS = ("purchase_date",)


@dataclass
class GrindingRecord:
    id: str
    purchase_id: str
    maize_amount_kg: float
    flour_yield_kg: float
    yield_percentage: float
    grinding_date: datetime
    grinding_cost: float = 0.0
    notes: str = ""

    DATE_FIELDS = ("grinding_date",)


@dataclass
class Customer:
    id: str
    name: str
    contact: str
    created_at: datetime
    location: Optional[str] = None

    DATE_FIELDS = ("created_at",)


@dataclass
class FlourSale:
    id: str
    customer_id: str
    customer_name: str
    quantity_kg: float
    price_per_kg: float
    total_amount: float
    sale_date: datetime
    payment_method: str = "cash"
    notes: str = ""

    DATE_FIELDS = ("sale_date",)


@dataclass
class Inventory:
    maize_stock_kg: float = 0.0
    flour_stock_kg: float = 0.0
    last_updated: datetime = field(default_factory=utc_now)

    DATE_FIELDS = ("last_updated",)


@dataclass
class AppSettings:
    low_stock_threshold: float = 50.0
    default_flour_price: float = 100.0
    business_name: str = "FarmFlour Mill"
    owner_name: str = "Farm Owner"
    notifications: bool = True

    DATE_FIELDS = ()


@dataclass
class Transport:
    id: str
    reference: str
    type: str
    status: str
    quantity: float
    origin: str
    destination: str
    scheduled_date: datetime
    created_at: datetime
    updated_at: datetime
    unit: str = "kg"
    driver_name: str = ""
    driver_phone: str = ""
    vehicle_number: str = ""
    estimated_arrival: Optional[datetime] = None
    actual_departure: Optional[datetime] = None

    DATE_FIELDS = ("scheduled_date", "created_at", "updated_at", "estimated_arrival", "actual_departure")


@dataclass
class Delivery:
    id: str
    transport_id: str
    received_by: str
    received_date: datetime
    actual_quantity: float
    condition: str
    created_at: datetime
    damage_claims: Optional[str] = None
    notes: Optional[str] = None

    DATE_FIELDS = ("received_date", "created_at")


@dataclass
class LedgerState:
    suppliers: list[Supplier] = field(default_factory=list)
    purchases: list[MaizePurchase] = field(default_factory=list)
    grindings: list[GrindingRecord] = field(default_factory=list)
    customers: list[Customer] = field(default_factory=list)
    sales: list[FlourSale] = field(default_factory=list)
    transports: list[Transport] = field(default_factory=list)
    deliveries: list[Delivery] = field(default_factory=list)
    inventory: Inventory = field(default_factory=Inventory)
    settings: AppSettings = field(default_factory=AppSettings)
    is_authenticated: bool = False


# Record lists of the state and the type of their items.
LIST_FIELDS = {
    "suppliers": Supplier,
    "purchases": MaizePurchase,
    "grindings": GrindingRecord,
    "customers": Customer,
    "sales": FlourSale,
    "transports": Transport,
    "deliveries": Delivery,
}


# -------------------------
# Record factories
# -------------------------

def new_supplier(*, name: str, contact: str, location: str = "", now: Optional[datetime] = None) -> Supplier:
    return Supplier(
        id=new_id(),
        name=name,
        contact=contact,
        location=location,
        created_at=now or utc_now(),
    )


def new_purchase(
    *,
    supplier: Supplier,
    amount_kg: float,
    price_per_kg: float,
    notes: str = "",
    now: Optional[datetime] = None,
) -> MaizePurchase:
    return MaizePurchase(
        id=new_id(),
        supplier_id=supplier.id,
        supplier_name=supplier.name,
        amount_kg=float(amount_kg),
        price_per_kg=float(price_per_kg),
        total_cost=float(amount_kg) * float(price_per_kg),
        purchase_date=now or utc_now(),
        notes=notes,
    )


def new_grinding(
    *,
    purchase_id: str,
    maize_amount_kg: float,
    flour_yield_kg: float,
    grinding_cost: float = 0.0,
    notes: str = "",
    now: Optional[datetime] = None,
) -> GrindingRecord:
    return GrindingRecord(
        id=new_id(),
        purchase_id=purchase_id,
        maize_amount_kg=float(maize_amount_kg),
        flour_yield_kg=float(flour_yield_kg),
        yield_percentage=safe_div(flour_yield_kg, maize_amount_kg) * 100.0,
        grinding_date=now or utc_now(),
        grinding_cost=float(grinding_cost),
        notes=notes,
    )


def new_customer(
    *, name: str, contact: str, location: Optional[str] = None, now: Optional[datetime] = None
) -> Customer:
    return Customer(
        id=new_id(),
        name=name,
        contact=contact,
        location=location,
        created_at=now or utc_now(),
    )


def new_sale(
    *,
    customer: Customer,
    quantity_kg: float,
    price_per_kg: float,
    payment_method: str = "cash",
    notes: str = "",
    now: Optional[datetime] = None,
) -> FlourSale:
    return FlourSale(
        id=new_id(),
        customer_id=customer.id,
        customer_name=customer.name,
        quantity_kg=float(quantity_kg),
        price_per_kg=float(price_per_kg),
        total_amount=float(quantity_kg) * float(price_per_kg),
        sale_date=now or utc_now(),
        payment_method=payment_method,
        notes=notes,
    )
