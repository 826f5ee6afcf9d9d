from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional, TypeVar

from mill.models import Customer, FlourSale, GrindingRecord, LedgerState, MaizePurchase, Supplier
from mill.utils import safe_div

PERIODS = ("daily", "weekly", "monthly")

T = TypeVar("T")


@dataclass
class FinancialSummary:
    total_purchase_cost: float
    total_grinding_cost: float
    total_revenue: float
    total_expenses: float
    net_profit: float
    profit_margin: float


@dataclass
class OperationalSummary:
    maize_purchased_kg: float
    maize_processed_kg: float
    flour_produced_kg: float
    flour_sold_kg: float
    average_yield: float


@dataclass
class CustomerRank:
    customer: Customer
    total_amount: float
    total_quantity_kg: float
    sales_count: int


@dataclass
class SupplierRank:
    supplier: Supplier
    total_cost: float
    total_quantity_kg: float
    purchase_count: int


@dataclass
class Report:
    period: str
    start: datetime
    end: datetime
    financial: FinancialSummary
    operational: OperationalSummary
    purchases_count: int
    grindings_count: int
    sales_count: int
    top_customers: list[CustomerRank] = field(default_factory=list)
    top_suppliers: list[SupplierRank] = field(default_factory=list)


@dataclass
class DashboardSummary:
    month_start: datetime
    purchase_cost: float
    grinding_cost: float
    revenue: float
    profit: float
    maize_stock_kg: float
    flour_stock_kg: float
    low_maize: bool
    low_flour: bool
    recent_sales: list[FlourSale]


def period_start(period: str, now: datetime) -> datetime:
    """
    Start of the reporting window containing `now`.

    daily: midnight today. weekly: midnight of the last Sunday (today when
    `now` is a Sunday). monthly: midnight on the 1st.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "daily":
        return midnight
    if period == "weekly":
        # weekday(): Monday=0 .. Sunday=6
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    if period == "monthly":
        return midnight.replace(day=1)
    raise ValueError(f"Unknown period: {period}")


def filter_period(records: Iterable[T], date_attr: str, start: datetime, end: Optional[datetime] = None) -> list[T]:
    out = []
    for r in records:
        d = getattr(r, date_attr)
        if d >= start and (end is None or d <= end):
            out.append(r)
    return out


def financial_summary(
    purchases: list[MaizePurchase],
    grindings: list[GrindingRecord],
    sales: list[FlourSale],
) -> FinancialSummary:
    purchase_cost = sum(p.total_cost for p in purchases)
    grinding_cost = sum(g.grinding_cost for g in grindings)
    revenue = sum(s.total_amount for s in sales)
    expenses = purchase_cost + grinding_cost
    net = revenue - expenses
    return FinancialSummary(
        total_purchase_cost=purchase_cost,
        total_grinding_cost=grinding_cost,
        total_revenue=revenue,
        total_expenses=expenses,
        net_profit=net,
        profit_margin=safe_div(net, revenue) * 100.0 if revenue > 0 else 0.0,
    )


def operational_summary(
    purchases: list[MaizePurchase],
    grindings: list[GrindingRecord],
    sales: list[FlourSale],
) -> OperationalSummary:
    processed = sum(g.maize_amount_kg for g in grindings)
    produced = sum(g.flour_yield_kg for g in grindings)
    return OperationalSummary(
        maize_purchased_kg=sum(p.amount_kg for p in purchases),
        maize_processed_kg=processed,
        flour_produced_kg=produced,
        flour_sold_kg=sum(s.quantity_kg for s in sales),
        average_yield=safe_div(produced, processed) * 100.0,
    )


def top_customers(customers: list[Customer], sales: list[FlourSale], limit: Optional[int] = None) -> list[CustomerRank]:
    """
    Customers ranked by sale amount, highest first. Customers without sales
    in `sales` are left out; equal totals keep customer list order.
    """
    ranks = []
    for c in customers:
        own = [s for s in sales if s.customer_id == c.id]
        total = sum(s.total_amount for s in own)
        if total > 0:
            ranks.append(CustomerRank(c, total, sum(s.quantity_kg for s in own), len(own)))
    # sorted() is stable
    ranks = sorted(ranks, key=lambda r: r.total_amount, reverse=True)
    return ranks[:limit] if limit is not None else ranks


def top_suppliers(suppliers: list[Supplier], purchases: list[MaizePurchase], limit: Optional[int] = None) -> list[SupplierRank]:
    ranks = []
    for s in suppliers:
        own = [p for p in purchases if p.supplier_id == s.id]
        total = sum(p.total_cost for p in own)
        if total > 0:
            ranks.append(SupplierRank(s, total, sum(p.amount_kg for p in own), len(own)))
    ranks = sorted(ranks, key=lambda r: r.total_cost, reverse=True)
    return ranks[:limit] if limit is not None else ranks


def build_report(state: LedgerState, period: str, now: datetime) -> Report:
    start = period_start(period, now)
    purchases = filter_period(state.purchases, "purchase_date", start)
    grindings = filter_period(state.grindings, "grinding_date", start)
    sales = filter_period(state.sales, "sale_date", start)

    return Report(
        period=period,
        start=start,
        end=now,
        financial=financial_summary(purchases, grindings, sales),
        operational=operational_summary(purchases, grindings, sales),
        purchases_count=len(purchases),
        grindings_count=len(grindings),
        sales_count=len(sales),
        top_customers=top_customers(state.customers, sales),
        top_suppliers=top_suppliers(state.suppliers, purchases),
    )


def dashboard_summary(state: LedgerState, now: datetime, recent: int = 5) -> DashboardSummary:
    start = period_start("monthly", now)
    fin = financial_summary(
        filter_period(state.purchases, "purchase_date", start),
        filter_period(state.grindings, "grinding_date", start),
        filter_period(state.sales, "sale_date", start),
    )
    inv = state.inventory
    threshold = state.settings.low_stock_threshold
    return DashboardSummary(
        month_start=start,
        purchase_cost=fin.total_purchase_cost,
        grinding_cost=fin.total_grinding_cost,
        revenue=fin.total_revenue,
        profit=fin.net_profit,
        maize_stock_kg=inv.maize_stock_kg,
        flour_stock_kg=inv.flour_stock_kg,
        low_maize=inv.maize_stock_kg < threshold,
        low_flour=inv.flour_stock_kg < threshold,
        recent_sales=sorted(state.sales, key=lambda s: s.sale_date, reverse=True)[:recent],
    )
