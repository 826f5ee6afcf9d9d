from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mill.ledger import AddCustomer, AddGrinding, AddPurchase, AddSale, AddSupplier, apply, initial_state
from mill.models import new_customer, new_grinding, new_purchase, new_sale, new_supplier
from mill.services.export import report_csv, report_filename
from mill.services.reports import (
    build_report,
    dashboard_summary,
    filter_period,
    financial_summary,
    operational_summary,
    period_start,
    top_customers,
    top_suppliers,
)


def _ledger(now):
    supplier = new_supplier(name="Kamau Farm", contact="0712", now=now)
    customer = new_customer(name="Baraka Bakery", contact="0756", now=now)
    purchase = new_purchase(supplier=supplier, amount_kg=100, price_per_kg=20, now=now)
    grinding = new_grinding(purchase_id=purchase.id, maize_amount_kg=100, flour_yield_kg=80, grinding_cost=50, now=now)
    sale = new_sale(customer=customer, quantity_kg=50, price_per_kg=120, now=now)

    state = initial_state()
    for action in (AddSupplier(supplier), AddCustomer(customer), AddPurchase(purchase), AddGrinding(grinding), AddSale(sale)):
        state = apply(state, action, now=now)
    return state


def test_financial_and_operational_totals(now):
    state = _ledger(now)
    fin = financial_summary(state.purchases, state.grindings, state.sales)

    assert fin.total_purchase_cost == 2000
    assert fin.total_grinding_cost == 50
    assert fin.total_revenue == 6000
    assert fin.total_expenses == 2050
    assert fin.net_profit == 3950
    assert fin.profit_margin == pytest.approx(3950 / 6000 * 100)

    ops = operational_summary(state.purchases, state.grindings, state.sales)
    assert ops.average_yield == pytest.approx(80.0)
    assert ops.maize_processed_kg == 100
    assert ops.flour_sold_kg == 50


def test_empty_period_has_zero_margin_and_yield():
    fin = financial_summary([], [], [])
    ops = operational_summary([], [], [])
    assert fin.profit_margin == 0
    assert ops.average_yield == 0


@pytest.mark.parametrize(
    "period, expected",
    [
        ("daily", datetime(2024, 5, 15, tzinfo=timezone.utc)),
        ("weekly", datetime(2024, 5, 12, tzinfo=timezone.utc)),  # Sunday
        ("monthly", datetime(2024, 5, 1, tzinfo=timezone.utc)),
    ],
)
def test_period_start(now, period, expected):
    assert period_start(period, now) == expected


def test_week_starts_today_on_sunday():
    sunday = datetime(2024, 5, 19, 18, 30, tzinfo=timezone.utc)
    assert period_start("weekly", sunday) == datetime(2024, 5, 19, tzinfo=timezone.utc)


def test_unknown_period(now):
    with pytest.raises(ValueError):
        period_start("yearly", now)


def test_filter_period_boundary(now):
    state = _ledger(now)
    assert filter_period(state.sales, "sale_date", now) == state.sales
    assert filter_period(state.sales, "sale_date", now + timedelta(seconds=1)) == []


def test_top_customers_descending_excluding_zero(now):
    a = new_customer(name="A", contact="1", now=now)
    b = new_customer(name="B", contact="2", now=now)
    c = new_customer(name="C", contact="3", now=now)
    d = new_customer(name="D", contact="4", now=now)
    sales = [
        new_sale(customer=a, quantity_kg=10, price_per_kg=100, now=now),
        new_sale(customer=b, quantity_kg=30, price_per_kg=100, now=now),
        new_sale(customer=d, quantity_kg=5, price_per_kg=200, now=now),
        new_sale(customer=a, quantity_kg=5, price_per_kg=100, now=now),
    ]

    ranks = top_customers([a, b, c, d], sales)

    assert [r.customer.name for r in ranks] == ["B", "A", "D"]
    assert [r.total_amount for r in ranks] == [3000, 1500, 1000]
    assert ranks[1].sales_count == 2
    assert top_customers([a, b, c, d], sales, limit=1)[0].customer.name == "B"


def test_ranking_ties_keep_list_order(now):
    s1 = new_supplier(name="First", contact="1", now=now)
    s2 = new_supplier(name="Second", contact="2", now=now)
    purchases = [
        new_purchase(supplier=s2, amount_kg=10, price_per_kg=10, now=now),
        new_purchase(supplier=s1, amount_kg=10, price_per_kg=10, now=now),
    ]
    assert [r.supplier.name for r in top_suppliers([s1, s2], purchases)] == ["First", "Second"]


def test_report_only_counts_period_sales_in_ranking(now):
    state = _ledger(now)
    old_customer = new_customer(name="Old Shop", contact="9", now=now - timedelta(days=60))
    old_sale = new_sale(customer=old_customer, quantity_kg=1, price_per_kg=100, now=now - timedelta(days=40))
    state = apply(apply(state, AddCustomer(old_customer), now=now), AddSale(old_sale), now=now)

    report = build_report(state, "monthly", now)

    assert report.sales_count == 1
    assert [r.customer.name for r in report.top_customers] == ["Baraka Bakery"]
    assert report.financial.net_profit == 3950


def test_dashboard_low_stock(now):
    state = _ledger(now)
    summary = dashboard_summary(state, now)

    # 100 maize bought and ground, 80 flour made, 50 sold
    assert summary.maize_stock_kg == 0
    assert summary.flour_stock_kg == 30
    assert summary.low_maize and summary.low_flour
    assert summary.profit == 3950
    assert len(summary.recent_sales) == 1


def test_export_layout(now):
    report = build_report(_ledger(now), "monthly", now)
    text = report_csv(report, business_name="FarmFlour")
    lines = text.splitlines()

    assert lines[0] == "FarmFlour Financial Report"
    assert lines[1] == "Period: monthly"
    assert "Revenue,KES 6000.00" in lines
    assert "Net Profit,KES 3950.00" in lines
    assert "Average Yield,80.0%" in lines
    assert "TOP CUSTOMERS" in lines
    assert "1,Baraka Bakery,50kg,KES 6000.00,1" in lines
    assert "1,Kamau Farm,100kg,KES 2000.00,1" in lines
    assert lines.index("FINANCIAL SUMMARY") < lines.index("OPERATIONAL SUMMARY") < lines.index("TOP CUSTOMERS")


def test_export_omits_empty_rankings(now):
    report = build_report(initial_state(), "daily", now)
    text = report_csv(report)
    assert "TOP CUSTOMERS" not in text
    assert "TOP SUPPLIERS" not in text


def test_export_quotes_names_with_commas(now):
    state = _ledger(now)
    state.customers[0].name = "Baraka, Thika"
    text = report_csv(build_report(state, "monthly", now))
    assert '1,"Baraka, Thika",50kg,KES 6000.00,1' in text.splitlines()


def test_report_filename(now):
    assert report_filename("weekly", now) == "farmflour-report-weekly-2024-05-15.csv"
