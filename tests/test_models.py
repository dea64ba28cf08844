from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from core.models import AUTO_BATCH, BillItem, Medicine


def _med(**kw):
    base = dict(
        name="Paracetamol 500mg",
        category="Analgesic",
        batch_number="B-1001",
        expiry_date=date(2027, 8, 17),
        stock_quantity=120,
        reorder_level=25,
        unit_price=Decimal("3.50"),
    )
    base.update(kw)
    return Medicine(**base)


def test_blank_medicine_defaults():
    m = Medicine.blank(date(2026, 10, 17))
    assert m.name == ""
    assert m.batch_number == AUTO_BATCH
    assert m.expiry_date == date(2027, 10, 17)
    assert m.stock_quantity == 0


def test_blank_expiry_clamps_month_end():
    assert Medicine.blank(date(2027, 2, 28)).expiry_date == date(2028, 2, 28)
    assert Medicine.blank(date(2028, 2, 29)).expiry_date == date(2029, 2, 28)


def test_duplicate_is_independent():
    m = _med()
    d = m.duplicate()
    assert d is not m
    assert d.to_row() == m.to_row()

    d.stock_quantity = 5
    d.name = "Changed"
    assert m.stock_quantity == 120
    assert m.name == "Paracetamol 500mg"


def test_copy_from_keeps_identity():
    m = _med()
    edited = m.duplicate()
    edited.unit_price = Decimal("4.00")
    edited.reorder_level = 30

    ref = m
    m.copy_from(edited)
    assert ref is m
    assert m.unit_price == Decimal("4.00")
    assert m.reorder_level == 30


def test_medicines_compare_by_identity():
    a = _med()
    assert a != a.duplicate()
    assert a == a


@pytest.mark.parametrize("other", ["b-1001", " B-1001 ", "B-1001"])
def test_same_batch_ignores_case_and_padding(other):
    assert _med().same_batch(other)


def test_line_total_is_computed_on_read():
    item = BillItem(medicine_name="Cetirizine", quantity=3, unit_price=Decimal("4.10"))
    assert item.line_total == Decimal("12.30")
    with pytest.raises(FrozenInstanceError):
        item.quantity = 4
