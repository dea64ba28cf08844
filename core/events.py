from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

# Collections
MEDICINES = "medicines"
FILTERED_MEDICINES = "filtered_medicines"
BILL_ITEMS = "bill_items"
SUPPLIERS = "suppliers"
PRESCRIPTIONS = "prescriptions"

# Derived values
TODAY_SALES = "today_sales"
LOW_STOCK_COUNT = "low_stock_count"
EXPIRING_SOON_COUNT = "expiring_soon_count"
BILL_SUBTOTAL = "bill_subtotal"
BILL_TAX = "bill_tax"
BILL_TOTAL = "bill_total"
CURRENT_DATETIME = "current_datetime"

# Form / selection fields
CURRENT_MEDICINE = "current_medicine"
SELECTED_MEDICINE = "selected_medicine"
INVENTORY_FILTER = "inventory_filter"
FOOTER_MESSAGE = "footer_message"
SALE_QUANTITY = "sale_quantity"
SALE_INPUTS = "sale_inputs"
SUPPLIER_INPUTS = "supplier_inputs"
PRESCRIPTION_INPUTS = "prescription_inputs"

DASHBOARD_FIELDS = frozenset({TODAY_SALES, LOW_STOCK_COUNT, EXPIRING_SOON_COUNT})
BILL_FIELDS = frozenset({BILL_SUBTOTAL, BILL_TAX, BILL_TOTAL})
ALL_DERIVED = DASHBOARD_FIELDS | BILL_FIELDS


@dataclass(frozen=True)
class ChangeEvent:
    """Names every field that went stale in one operation."""

    action: str
    fields: frozenset[str]

    def __contains__(self, name: str) -> bool:
        return name in self.fields


Subscriber = Callable[[ChangeEvent], None]


class ChangeBus:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, action: str, names: Iterable[str]) -> ChangeEvent:
        event = ChangeEvent(action=action, fields=frozenset(names))
        if not event.fields:
            return event
        # Copy so a subscriber may unsubscribe itself while being notified.
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Change subscriber failed on %s", action)
                raise
        return event


class ChangeSet:
    """Collects stale field names while an operation runs, then publishes once."""

    def __init__(self, bus: ChangeBus, action: str) -> None:
        self.bus = bus
        self.action = action
        self.names: set[str] = set()
        self.event: ChangeEvent | None = None

    def add(self, *names: str) -> None:
        self.names.update(names)

    def publish(self) -> ChangeEvent:
        self.event = self.bus.publish(self.action, self.names)
        return self.event
