from __future__ import annotations

import streamlit as st

from mill.services.auth import demo_login, login
from mill.session import USER_KEY, get_store

store = get_store()

st.title("🌾 FarmFlour Manager")
st.caption("Maize to Flour Business Management")

with st.form("login"):
    email = st.text_input("Email", placeholder="you@example.com")
    password = st.text_input("Password", type="password")
    submitted = st.form_submit_button("Login", type="primary")

if submitted:
    try:
        st.session_state[USER_KEY] = login(store, email=email, password=password)
        st.rerun()
    except Exception as e:
        st.error(str(e))

if st.button("Try Demo"):
    st.session_state[USER_KEY] = demo_login(store)
    st.rerun()
