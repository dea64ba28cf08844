from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from core.models import BillItem, Medicine

DEFAULT_TAX_RATE = Decimal("0.05")
DEFAULT_EXPIRY_WINDOW_DAYS = 30


@dataclass(frozen=True)
class BillTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True)
class DashboardSnapshot:
    today_sales: Decimal
    low_stock_count: int
    expiring_soon_count: int
    bill: BillTotals


def low_stock_medicines(medicines: Iterable[Medicine]) -> list[Medicine]:
    return [m for m in medicines if m.is_low_stock()]


def low_stock_count(medicines: Iterable[Medicine]) -> int:
    return len(low_stock_medicines(medicines))


def expiry_cutoff(today: date, window_days: int = DEFAULT_EXPIRY_WINDOW_DAYS) -> date:
    return today + timedelta(days=int(window_days))


def expiring_medicines(
    medicines: Iterable[Medicine],
    today: date,
    window_days: int = DEFAULT_EXPIRY_WINDOW_DAYS,
) -> list[Medicine]:
    """Already-expired lots count too: the test is expiry <= today + window."""
    cutoff = expiry_cutoff(today, window_days)
    return [m for m in medicines if m.expires_by(cutoff)]


def expiring_soon_count(
    medicines: Iterable[Medicine],
    today: date,
    window_days: int = DEFAULT_EXPIRY_WINDOW_DAYS,
) -> int:
    return len(expiring_medicines(medicines, today, window_days))


def bill_subtotal(items: Iterable[BillItem]) -> Decimal:
    return sum((i.line_total for i in items), Decimal("0"))


def bill_totals(items: Iterable[BillItem], tax_rate: Decimal = DEFAULT_TAX_RATE) -> BillTotals:
    subtotal = bill_subtotal(items)
    tax = subtotal * tax_rate
    return BillTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)


class SalesAccumulator:
    """
    Today's sales. Only a completed sale moves it.

    scope="day": the amount belongs to the calendar day of the last sale and
    reads as zero once the clock has moved past it.
    scope="session": one counter for the life of the process.
    """

    def __init__(self, scope: str = "day") -> None:
        if scope not in {"day", "session"}:
            raise ValueError("Sales scope must be 'day' or 'session'.")
        self.scope = scope
        self._amount = Decimal("0")
        self._day: Optional[date] = None

    def _rolled_over(self, today: date) -> bool:
        return self.scope == "day" and self._day is not None and self._day != today

    def value(self, today: date) -> Decimal:
        if self._rolled_over(today):
            return Decimal("0")
        return self._amount

    def add(self, amount: Decimal, today: date) -> Decimal:
        if self._rolled_over(today):
            self._amount = Decimal("0")
        self._amount += amount
        self._day = today
        return self._amount
