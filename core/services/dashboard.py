from __future__ import annotations

from core.events import ALL_DERIVED, CURRENT_DATETIME, ChangeEvent
from core.services.metrics import DashboardSnapshot
from core.state import PharmacyState


def refresh_dashboard(state: PharmacyState) -> DashboardSnapshot:
    with state.store.change("refresh_dashboard") as cs:
        cs.add(*ALL_DERIVED)
        state.set_footer("Dashboard refreshed.")
    return state.dashboard()


def tick_clock(state: PharmacyState) -> ChangeEvent:
    """Once-a-second clock refresh. Touches nothing but the displayed time."""
    return state.bus.publish("tick", [CURRENT_DATETIME])


SHORTCUTS = [
    ("Ctrl+N", "New item"),
    ("Ctrl+S", "Save item"),
    ("Ctrl+Delete", "Delete item"),
    ("Ctrl+F", "Focus form"),
    ("F5", "Refresh"),
]
