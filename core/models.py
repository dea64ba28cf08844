from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

AUTO_BATCH = "AUTO"
DEFAULT_SHELF_LIFE_MONTHS = 12


def _default_expiry(today: Optional[date] = None) -> date:
    return (today or date.today()) + relativedelta(months=DEFAULT_SHELF_LIFE_MONTHS)


@dataclass(eq=False)
class Medicine:
    """
    One inventory lot. Compared by identity: the stored instance is what
    observers and selections hold on to, so it must survive edits.
    """

    name: str = ""
    category: str = ""
    batch_number: str = AUTO_BATCH
    expiry_date: date = field(default_factory=_default_expiry)
    stock_quantity: int = 0
    reorder_level: int = 0
    unit_price: Decimal = Decimal("0")

    @classmethod
    def blank(cls, today: Optional[date] = None) -> "Medicine":
        return cls(expiry_date=_default_expiry(today))

    def duplicate(self) -> "Medicine":
        return Medicine(**{f.name: getattr(self, f.name) for f in fields(self)})

    def copy_from(self, other: "Medicine") -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    def same_batch(self, batch_number: str) -> bool:
        return self.batch_number.strip().casefold() == str(batch_number).strip().casefold()

    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.reorder_level

    def expires_by(self, cutoff: date) -> bool:
        return self.expiry_date <= cutoff

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "batch_number": self.batch_number,
            "expiry_date": self.expiry_date.isoformat(),
            "stock_quantity": self.stock_quantity,
            "reorder_level": self.reorder_level,
            "unit_price": float(self.unit_price),
        }


@dataclass(frozen=True)
class BillItem:
    # Name and price are captured when the line is added; later edits to
    # the medicine do not reach back into the bill.
    medicine_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_row(self) -> dict:
        return {
            "medicine": self.medicine_name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "line_total": float(self.line_total),
        }


@dataclass(frozen=True)
class Supplier:
    name: str
    phone: str = ""
    email: str = ""

    def to_row(self) -> dict:
        return {"name": self.name, "phone": self.phone, "email": self.email}


@dataclass(frozen=True)
class Prescription:
    patient_name: str
    doctor_name: str
    medicine_name: str
    created_on: datetime

    def to_row(self) -> dict:
        return {
            "patient": self.patient_name,
            "doctor": self.doctor_name,
            "medicine": self.medicine_name,
            "created_on": self.created_on.replace(microsecond=0).isoformat(sep=" "),
        }


@dataclass(frozen=True)
class Receipt:
    customer_name: str
    items: tuple[BillItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    completed_at: datetime
