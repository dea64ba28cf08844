from __future__ import annotations

import streamlit as st
import pandas as pd

from core.config import get_settings
from core.services.dashboard import SHORTCUTS, refresh_dashboard, tick_clock
from core.services.metrics import expiring_medicines, low_stock_medicines
from core.session import get_state, last_change
from core.utils import fmt_money

st.set_page_config(page_title="Pharmacy Desk", page_icon="💊", layout="wide")

st.title("💊 Pharmacy Desk")
st.caption("Inventory, point-of-sale billing, suppliers and the prescription queue for a small pharmacy.")

settings = get_settings()
state = get_state()


@st.fragment(run_every="1s")
def _clock() -> None:
    tick_clock(state)
    st.markdown(f"🕒 **{state.current_datetime:%A %d %B %Y, %H:%M:%S}**")


_clock()

snap = state.dashboard()
c1, c2, c3 = st.columns(3)
c1.metric("Today's sales", fmt_money(snap.today_sales, settings.currency))
c2.metric("Low stock", snap.low_stock_count)
c3.metric(f"Expiring within {settings.expiry_window_days} days", snap.expiring_soon_count)

if st.button("Refresh dashboard (F5)"):
    refresh_dashboard(state)
    st.rerun()

tab_low, tab_exp = st.tabs(["Low stock", "Expiring soon"])

with tab_low:
    rows = low_stock_medicines(state.medicines)
    if rows:
        st.dataframe(pd.DataFrame([m.to_row() for m in rows]), use_container_width=True, hide_index=True)
    else:
        st.caption("Every medicine is above its reorder level.")

with tab_exp:
    rows = expiring_medicines(state.medicines, state.today(), settings.expiry_window_days)
    if rows:
        st.dataframe(pd.DataFrame([m.to_row() for m in rows]), use_container_width=True, hide_index=True)
    else:
        st.caption("Nothing expires inside the window.")

with st.sidebar:
    st.subheader("Shortcuts")
    for key, label in SHORTCUTS:
        st.write(f"**{key}**: {label}")

st.divider()
st.caption(state.footer_message)
change = last_change()
if change is not None:
    st.caption(f"Last change: `{change.action}` ({', '.join(sorted(change.fields))})")
