from __future__ import annotations

import logging

import streamlit as st

from core.config import get_settings
from core.events import CURRENT_DATETIME, ChangeEvent
from core.services.demo_data import build_state
from core.state import PharmacyState

logger = logging.getLogger(__name__)

STATE_KEY = "pharmacy_desk_state"
LAST_CHANGE_KEY = "pharmacy_desk_last_change"


def _remember_change(event: ChangeEvent) -> None:
    if event.fields == {CURRENT_DATETIME}:
        return
    logger.debug("%s -> %s", event.action, sorted(event.fields))
    st.session_state[LAST_CHANGE_KEY] = event


def get_state() -> PharmacyState:
    """One PharmacyState per browser session, built on first use."""
    if STATE_KEY not in st.session_state:
        state = build_state(get_settings())
        state.subscribe(_remember_change)
        st.session_state[STATE_KEY] = state
    return st.session_state[STATE_KEY]


def last_change() -> ChangeEvent | None:
    return st.session_state.get(LAST_CHANGE_KEY)


def drop_state() -> None:
    st.session_state.pop(STATE_KEY, None)
    st.session_state.pop(LAST_CHANGE_KEY, None)
