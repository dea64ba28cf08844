from __future__ import annotations

import streamlit as st

from core.config import configure_logging

configure_logging()

st.set_page_config(page_title="Pharmacy Desk", page_icon="💊", layout="wide")

pages = [
    st.Page("home.py", title="Dashboard", icon="🏠"),
    st.Page("pages/1_💊_Inventory.py", title="Inventory", icon="💊"),
    st.Page("pages/2_🛒_Point_of_Sale.py", title="Point of Sale", icon="🛒"),
    st.Page("pages/3_🚚_Suppliers.py", title="Suppliers", icon="🚚"),
    st.Page("pages/4_📝_Prescriptions.py", title="Prescriptions", icon="📝"),
    st.Page("pages/5_⚙️_Settings.py", title="Settings", icon="⚙️"),
]

st.navigation(pages).run()
