from __future__ import annotations

import streamlit as st

from mill.config import configure_logging
from mill.session import get_store

configure_logging()
st.set_page_config(page_title="FarmFlour Manager", page_icon="🌾", layout="wide")

store = get_store()

if not store.state.is_authenticated:
    pages = [st.Page("login.py", title="Login", icon="🔐")]
else:
    pages = [
        st.Page("home.py", title="Dashboard", icon="🏠"),
        st.Page("pages/1_🌽_Purchases.py", title="Purchases", icon="🌽"),
        st.Page("pages/2_⚙️_Grinding.py", title="Grinding", icon="⚙️"),
        st.Page("pages/3_🛒_Sales.py", title="Sales", icon="🛒"),
        st.Page("pages/4_🚚_Transport.py", title="Transport", icon="🚚"),
        st.Page("pages/5_📦_Deliveries.py", title="Deliveries", icon="📦"),
        st.Page("pages/6_📊_Reports.py", title="Reports", icon="📊"),
        st.Page("pages/7_🛠️_Settings.py", title="Settings", icon="🛠️"),
    ]

st.navigation(pages).run()
