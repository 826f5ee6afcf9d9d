from __future__ import annotations

import streamlit as st
import pandas as pd

from mill.config import get_settings
from mill.ledger import derive_inventory
from mill.services.reports import dashboard_summary
from mill.session import require_auth
from mill.utils import utc_now

settings = get_settings()
store = require_auth()
state = store.state
summary = dashboard_summary(state, utc_now())
cur = settings.currency

st.title(f"🌾 {state.settings.business_name}")
st.caption(f"Welcome back, {state.settings.owner_name}")

if summary.low_maize or summary.low_flour:
    with st.container(border=True):
        st.subheader("Stock Alerts")
        if summary.low_maize:
            st.warning(f"Maize stock is low: {summary.maize_stock_kg:g}kg remaining", icon="⚠️")
        if summary.low_flour:
            st.warning(f"Flour stock is low: {summary.flour_stock_kg:g}kg remaining", icon="⚠️")

c1, c2, c3, c4 = st.columns(4)
c1.metric("Monthly Profit", f"{cur} {summary.profit:,.2f}")
c2.metric("Monthly Revenue", f"{cur} {summary.revenue:,.2f}")
c3.metric("Maize Stock", f"{summary.maize_stock_kg:,.1f} kg")
c4.metric("Flour Stock", f"{summary.flour_stock_kg:,.1f} kg")

c1, c2, c3 = st.columns(3)
c1.metric("Purchase Costs (month)", f"{cur} {summary.purchase_cost:,.2f}")
c2.metric("Grinding Costs (month)", f"{cur} {summary.grinding_cost:,.2f}")
c3.metric("Suppliers / Customers", f"{len(state.suppliers)} / {len(state.customers)}")

maize, flour = derive_inventory(state)
if abs(maize - summary.maize_stock_kg) > 1e-6 or abs(flour - summary.flour_stock_kg) > 1e-6:
    st.info(
        f"Recorded stock differs from the purchase/grinding/sales history "
        f"({maize:g}kg maize, {flour:g}kg flour). Manual stock corrections explain this."
    )

st.divider()
st.subheader("Recent Sales")
if summary.recent_sales:
    df = pd.DataFrame(
        [
            {
                "date": s.sale_date.strftime("%Y-%m-%d"),
                "customer": s.customer_name,
                "quantity_kg": s.quantity_kg,
                "total": round(s.total_amount, 2),
                "payment": s.payment_method,
            }
            for s in summary.recent_sales
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)
else:
    st.info("No sales yet. Record purchases, grind maize, then sell flour.", icon="ℹ️")
