from __future__ import annotations

import csv
import io
from datetime import datetime

from mill.services.reports import Report
from mill.utils import fmt_kg

TOP_N = 5


def report_csv(report: Report, *, business_name: str = "FarmFlour", currency: str = "KES") -> str:
    """
    Sectioned, comma-delimited report meant for people and spreadsheets.
    Rankings are limited to the top five and omitted when empty.
    """
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    fin, ops = report.financial, report.operational

    w.writerow([f"{business_name} Financial Report"])
    w.writerow([f"Period: {report.period}"])
    w.writerow([f"Date Range: {report.start:%Y-%m-%d} - {report.end:%Y-%m-%d}"])
    w.writerow([])

    w.writerow(["FINANCIAL SUMMARY"])
    w.writerow(["Metric", "Amount"])
    w.writerow(["Revenue", f"{currency} {fin.total_revenue:.2f}"])
    w.writerow(["Total Expenses", f"{currency} {fin.total_expenses:.2f}"])
    w.writerow(["Net Profit", f"{currency} {fin.net_profit:.2f}"])
    w.writerow(["Profit Margin", f"{fin.profit_margin:.1f}%"])
    w.writerow([])

    w.writerow(["OPERATIONAL SUMMARY"])
    w.writerow(["Metric", "Amount"])
    w.writerow(["Maize Purchased", fmt_kg(ops.maize_purchased_kg)])
    w.writerow(["Maize Processed", fmt_kg(ops.maize_processed_kg)])
    w.writerow(["Flour Produced", fmt_kg(ops.flour_produced_kg)])
    w.writerow(["Flour Sold", fmt_kg(ops.flour_sold_kg)])
    w.writerow(["Average Yield", f"{ops.average_yield:.1f}%"])
    w.writerow([])

    if report.top_customers:
        w.writerow(["TOP CUSTOMERS"])
        w.writerow(["Rank", "Customer Name", "Total Sales", "Total Amount", "Sales Count"])
        for i, r in enumerate(report.top_customers[:TOP_N], start=1):
            w.writerow([i, r.customer.name, fmt_kg(r.total_quantity_kg), f"{currency} {r.total_amount:.2f}", r.sales_count])
        w.writerow([])

    if report.top_suppliers:
        w.writerow(["TOP SUPPLIERS"])
        w.writerow(["Rank", "Supplier Name", "Total Purchases", "Total Cost", "Purchase Count"])
        for i, r in enumerate(report.top_suppliers[:TOP_N], start=1):
            w.writerow([i, r.supplier.name, fmt_kg(r.total_quantity_kg), f"{currency} {r.total_cost:.2f}", r.purchase_count])

    return buf.getvalue()


def report_filename(period: str, now: datetime) -> str:
    return f"farmflour-report-{period}-{now:%Y-%m-%d}.csv"
