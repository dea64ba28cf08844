from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from core.config import Settings
from core.errors import PharmacyError
from core.events import FOOTER_MESSAGE, ChangeBus, Subscriber
from core.models import Medicine
from core.services.metrics import (
    DEFAULT_EXPIRY_WINDOW_DAYS,
    DEFAULT_TAX_RATE,
    BillTotals,
    DashboardSnapshot,
    SalesAccumulator,
    bill_totals,
    expiring_soon_count,
    low_stock_count,
)
from core.store import Store

logger = logging.getLogger(__name__)

DEFAULT_FOOTER = "Use keyboard shortcuts for fast operation."


@dataclass
class SaleForm:
    customer_name: str = ""
    medicine: Optional[Medicine] = None
    quantity: int = 1


@dataclass
class SupplierForm:
    name: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class PrescriptionForm:
    patient_name: str = ""
    doctor_name: str = ""
    medicine: Optional[Medicine] = None


class PharmacyState:
    """
    Everything one pharmacy desk session holds: the collections, the forms
    being edited, and the running sales total. Services take this object
    and change it; nothing here touches a UI toolkit.
    """

    def __init__(
        self,
        *,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        expiry_window_days: int = DEFAULT_EXPIRY_WINDOW_DAYS,
        sales_scope: str = "day",
        currency: str = "USD",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.tax_rate = Decimal(tax_rate)
        self.expiry_window_days = int(expiry_window_days)
        self.currency = currency
        self.clock = clock or datetime.now

        self.bus = ChangeBus()
        self.store = Store(self.bus)
        self.sales = SalesAccumulator(sales_scope)

        self.current_medicine: Medicine = Medicine.blank(self.today())
        self.selected_medicine: Optional[Medicine] = None
        self.inventory_filter: str = ""
        self.footer_message: str = DEFAULT_FOOTER

        self.sale_form = SaleForm()
        self.supplier_form = SupplierForm()
        self.prescription_form = PrescriptionForm()

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Optional[Callable[[], datetime]] = None) -> "PharmacyState":
        return cls(
            tax_rate=settings.tax_rate,
            expiry_window_days=settings.expiry_window_days,
            sales_scope=settings.sales_scope,
            currency=settings.currency,
            clock=clock,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.bus.subscribe(callback)

    def now(self) -> datetime:
        return self.clock()

    def today(self) -> date:
        return self.clock().date()

    # Collections, as the pages see them.

    @property
    def medicines(self):
        return self.store.medicines

    @property
    def filtered_medicines(self):
        return self.store.filtered_medicines

    @property
    def bill_items(self):
        return self.store.bill_items

    @property
    def suppliers(self):
        return self.store.suppliers

    @property
    def prescriptions(self):
        return self.store.prescriptions

    # Derived values. Recomputed on every read.

    @property
    def current_datetime(self) -> datetime:
        return self.now()

    @property
    def today_sales(self) -> Decimal:
        return self.sales.value(self.today())

    @property
    def low_stock_count(self) -> int:
        return low_stock_count(self.store.medicines)

    @property
    def expiring_soon_count(self) -> int:
        return expiring_soon_count(self.store.medicines, self.today(), self.expiry_window_days)

    @property
    def bill(self) -> BillTotals:
        return bill_totals(self.store.bill_items, self.tax_rate)

    @property
    def bill_subtotal(self) -> Decimal:
        return self.bill.subtotal

    @property
    def bill_tax(self) -> Decimal:
        return self.bill.tax

    @property
    def bill_total(self) -> Decimal:
        return self.bill.total

    def dashboard(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            today_sales=self.today_sales,
            low_stock_count=self.low_stock_count,
            expiring_soon_count=self.expiring_soon_count,
            bill=self.bill,
        )

    # Status line and rejections.

    def set_footer(self, message: str) -> None:
        self.footer_message = message
        self.store.touch(FOOTER_MESSAGE)

    def reject(self, action: str, err: PharmacyError) -> PharmacyError:
        """Show the rejection in the status line and hand the error back to raise."""
        logger.info("%s rejected: %s", action, err)
        with self.store.change(action):
            self.set_footer(str(err))
        return err
