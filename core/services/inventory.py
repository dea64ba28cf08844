from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from core.errors import SelectionError, ValidationError
from core.events import (
    CURRENT_MEDICINE,
    DASHBOARD_FIELDS,
    INVENTORY_FILTER,
    MEDICINES,
    PRESCRIPTION_INPUTS,
    SALE_INPUTS,
    SELECTED_MEDICINE,
)
from core.models import Medicine
from core.state import PharmacyState
from core.utils import is_blank, to_money, to_whole

logger = logging.getLogger(__name__)


def _clean_draft(draft: Medicine) -> Medicine:
    """
    Validate the draft and return a detached copy with every field converted
    to the type the metrics rely on. Raises ValidationError, changes nothing.
    """
    if is_blank(draft.name):
        raise ValidationError("Please enter a medicine name.")
    if is_blank(draft.batch_number):
        raise ValidationError("Please enter a batch number.")

    try:
        stock = to_whole(draft.stock_quantity)
    except ValueError:
        raise ValidationError("Stock quantity must be a whole number.")
    try:
        reorder = to_whole(draft.reorder_level)
    except ValueError:
        raise ValidationError("Reorder level must be a whole number.")
    try:
        price = to_money(draft.unit_price)
    except ValueError:
        raise ValidationError("Unit price must be a number.")
    if not price.is_finite():
        raise ValidationError("Unit price must be a number.")

    expiry = draft.expiry_date
    if isinstance(expiry, datetime):
        expiry = expiry.date()
    if not isinstance(expiry, date):
        raise ValidationError("Expiry date must be a date.")

    if stock < 0:
        raise ValidationError("Stock quantity cannot be negative.")
    if reorder < 0:
        raise ValidationError("Reorder level cannot be negative.")
    if price < 0:
        raise ValidationError("Unit price cannot be negative.")

    return Medicine(
        name=str(draft.name).strip(),
        category=str(draft.category or "").strip(),
        batch_number=str(draft.batch_number).strip(),
        expiry_date=expiry,
        stock_quantity=stock,
        reorder_level=reorder,
        unit_price=price,
    )


def matches_filter(medicine: Medicine, term: str) -> bool:
    t = term.strip().casefold()
    if not t:
        return True
    return t in medicine.name.casefold() or t in medicine.category.casefold()


def apply_inventory_filter(state: PharmacyState) -> list[Medicine]:
    """
    Rebuild filtered_medicines from medicines and the current filter text.
    This is the only writer of filtered_medicines.
    """
    term = state.inventory_filter
    rows = [m for m in state.medicines if matches_filter(m, term)]
    with state.store.change("filter_inventory"):
        state.filtered_medicines.replace_all(rows)
    return rows


def set_inventory_filter(state: PharmacyState, text: Optional[str]) -> list[Medicine]:
    with state.store.change("filter_inventory") as cs:
        state.inventory_filter = text or ""
        cs.add(INVENTORY_FILTER)
        rows = apply_inventory_filter(state)
    return rows


def new_medicine(state: PharmacyState) -> Medicine:
    with state.store.change("new_medicine") as cs:
        state.current_medicine = Medicine.blank(state.today())
        state.selected_medicine = None
        cs.add(CURRENT_MEDICINE, SELECTED_MEDICINE)
        state.set_footer("Ready to add a new medicine.")
    return state.current_medicine


def select_medicine(state: PharmacyState, medicine: Optional[Medicine]) -> Optional[Medicine]:
    """
    Point the inventory form at a stored medicine. The form gets a detached
    duplicate, so typing into it leaves the stored lot untouched until save.
    """
    if medicine is not None and medicine not in state.medicines:
        raise state.reject("select_medicine", SelectionError("That medicine is no longer in inventory."))

    with state.store.change("select_medicine") as cs:
        state.selected_medicine = medicine
        cs.add(SELECTED_MEDICINE)
        if medicine is not None:
            state.current_medicine = medicine.duplicate()
            cs.add(CURRENT_MEDICINE)
            state.set_footer(f"Editing {medicine.name}")
    return state.selected_medicine


def save_medicine(state: PharmacyState, draft: Optional[Medicine] = None) -> Medicine:
    """
    Upsert by batch number (case-insensitive). A match is overwritten in place,
    keeping its identity; otherwise a copy of the draft is appended.
    """
    draft = state.current_medicine if draft is None else draft
    try:
        clean = _clean_draft(draft)
    except ValidationError as e:
        raise state.reject("save_medicine", e)

    with state.store.change("save_medicine") as cs:
        existing = state.store.find_by_batch(clean.batch_number)
        if existing is None:
            stored = clean
            state.medicines.append(stored)
            state.set_footer(f"Added {clean.name}")
            logger.info("Added medicine %s (batch %s)", stored.name, stored.batch_number)
        else:
            existing.copy_from(clean)
            stored = existing
            cs.add(MEDICINES)
            state.set_footer(f"Updated {clean.name}")
            logger.info("Updated medicine %s (batch %s)", stored.name, stored.batch_number)

        apply_inventory_filter(state)
        cs.add(*DASHBOARD_FIELDS)
    return stored


def delete_medicine(state: PharmacyState, selected: Optional[Medicine] = None) -> Medicine:
    """
    Delete the selected inventory row. Passing `selected` only confirms which
    row the caller means; anything other than the current selection is refused.
    """
    target = state.selected_medicine
    if target is None:
        raise state.reject("delete_medicine", SelectionError("Select an inventory row first."))
    if selected is not None and selected is not target:
        raise state.reject("delete_medicine", SelectionError("Only the selected inventory row can be deleted."))
    if target not in state.medicines:
        raise state.reject("delete_medicine", SelectionError("That medicine is no longer in inventory."))

    with state.store.change("delete_medicine") as cs:
        state.medicines.remove(target)

        # Forms must not keep pointing at a lot that is gone.
        if state.sale_form.medicine is target:
            state.sale_form.medicine = None
            cs.add(SALE_INPUTS)
        if state.prescription_form.medicine is target:
            state.prescription_form.medicine = None
            cs.add(PRESCRIPTION_INPUTS)

        new_medicine(state)
        apply_inventory_filter(state)
        cs.add(*DASHBOARD_FIELDS)
        state.set_footer(f"Deleted {target.name}")
    logger.info("Deleted medicine %s (batch %s)", target.name, target.batch_number)
    return target
