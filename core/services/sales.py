from __future__ import annotations

import logging
from typing import Optional

from core.errors import EmptyBillError, SelectionError, StockError, ValidationError
from core.events import (
    BILL_FIELDS,
    LOW_STOCK_COUNT,
    MEDICINES,
    SALE_INPUTS,
    SALE_QUANTITY,
    TODAY_SALES,
)
from core.models import BillItem, Medicine, Receipt
from core.state import PharmacyState
from core.utils import fmt_money, to_whole

logger = logging.getLogger(__name__)


def _normalize_customer(customer: Optional[str]) -> str:
    if customer is None:
        return ""
    return str(customer).strip()


def _normalize_quantity(quantity) -> int:
    try:
        return to_whole(quantity)
    except ValueError:
        raise ValidationError("Quantity must be a whole number.")


def set_sale_inputs(
    state: PharmacyState,
    *,
    medicine: Optional[Medicine] = None,
    quantity: Optional[int] = None,
    customer_name: Optional[str] = None,
) -> None:
    if quantity is not None:
        try:
            quantity = _normalize_quantity(quantity)
        except ValidationError as e:
            raise state.reject("set_sale_inputs", e)

    with state.store.change("set_sale_inputs") as cs:
        form = state.sale_form
        if medicine is not None:
            form.medicine = medicine
        if quantity is not None:
            form.quantity = quantity
        if customer_name is not None:
            form.customer_name = customer_name
        cs.add(SALE_INPUTS)


def add_to_bill(
    state: PharmacyState,
    medicine: Optional[Medicine] = None,
    quantity: Optional[int] = None,
) -> BillItem:
    """
    Put `quantity` of `medicine` on the open bill and take it off the shelf.
    Falls back to the sale form for anything not passed in.
    """
    form = state.sale_form
    medicine = form.medicine if medicine is None else medicine

    try:
        qty = _normalize_quantity(form.quantity if quantity is None else quantity)
        if medicine is None:
            raise SelectionError("Pick a medicine to sell.")
        if medicine not in state.medicines:
            raise SelectionError("That medicine is no longer in inventory.")
        if qty <= 0:
            raise ValidationError("Quantity must be greater than zero.")
        if medicine.stock_quantity < qty:
            raise StockError(f"Insufficient stock: {medicine.name} has {medicine.stock_quantity} left.")
    except (SelectionError, ValidationError, StockError) as e:
        raise state.reject("add_to_bill", e)

    item = BillItem(medicine_name=medicine.name, quantity=qty, unit_price=medicine.unit_price)

    with state.store.change("add_to_bill") as cs:
        state.bill_items.append(item)
        medicine.stock_quantity -= qty
        form.quantity = 1
        cs.add(MEDICINES, LOW_STOCK_COUNT, SALE_QUANTITY, *BILL_FIELDS)
        state.set_footer(f"Added {qty} x {medicine.name} to the bill.")

    logger.info("Billed %s x %s, %s left in stock", qty, medicine.name, medicine.stock_quantity)
    return item


def complete_sale(state: PharmacyState, customer_name: Optional[str] = None) -> Receipt:
    if not len(state.bill_items):
        raise state.reject("complete_sale", EmptyBillError("Nothing to bill."))

    customer = _normalize_customer(state.sale_form.customer_name if customer_name is None else customer_name)
    totals = state.bill
    receipt = Receipt(
        customer_name=customer,
        items=state.bill_items.snapshot(),
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        completed_at=state.now(),
    )

    with state.store.change("complete_sale") as cs:
        state.sales.add(totals.total, state.today())
        state.bill_items.clear()
        cs.add(TODAY_SALES, *BILL_FIELDS)
        state.set_footer(f"Sale completed for {customer or 'walk-in'}. Total {fmt_money(totals.total, state.currency)}")

    logger.info("Sale completed for %s: %s items, total %s", customer or "walk-in", len(receipt.items), totals.total)
    return receipt


def clear_bill(state: PharmacyState) -> int:
    """Drop the open bill. Stock taken by add_to_bill is not put back."""
    n = len(state.bill_items)
    with state.store.change("clear_bill") as cs:
        state.bill_items.clear()
        cs.add(*BILL_FIELDS)
        state.set_footer("Current bill cleared.")
    logger.info("Cleared bill with %s items", n)
    return n
