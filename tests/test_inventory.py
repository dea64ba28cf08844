from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from core.errors import SelectionError, ValidationError
from core.events import (
    CURRENT_MEDICINE,
    FILTERED_MEDICINES,
    FOOTER_MESSAGE,
    LOW_STOCK_COUNT,
    MEDICINES,
    SELECTED_MEDICINE,
)
from core.models import AUTO_BATCH, Medicine
from core.services.inventory import (
    delete_medicine,
    new_medicine,
    save_medicine,
    select_medicine,
    set_inventory_filter,
)
from core.services.sales import add_to_bill


def _draft(**kw):
    base = dict(
        name="Ibuprofen 400mg",
        category="Analgesic",
        batch_number="B-3300",
        expiry_date=date(2027, 6, 1),
        stock_quantity=50,
        reorder_level=10,
        unit_price=Decimal("5.25"),
    )
    base.update(kw)
    return Medicine(**base)


def test_seeded_inventory(state):
    assert [m.batch_number for m in state.medicines] == ["B-1001", "B-2044", "B-8840", "B-6622"]
    assert list(state.filtered_medicines) == list(state.medicines)
    assert len(state.suppliers) == 2


def test_save_new_medicine_appends_a_copy(state, events):
    draft = _draft()
    stored = save_medicine(state, draft)

    assert stored is not draft
    assert stored in state.medicines
    assert state.medicines[-1] is stored
    assert state.footer_message == "Added Ibuprofen 400mg"

    draft.stock_quantity = 1
    assert stored.stock_quantity == 50

    assert {MEDICINES, FILTERED_MEDICINES, LOW_STOCK_COUNT, FOOTER_MESSAGE} <= events[-1].fields


def test_save_twice_with_same_batch_is_an_upsert(state):
    save_medicine(state, _draft(stock_quantity=50))
    save_medicine(state, _draft(batch_number="b-3300", stock_quantity=75, unit_price=Decimal("6.00")))

    matches = [m for m in state.medicines if m.same_batch("B-3300")]
    assert len(matches) == 1
    assert matches[0].stock_quantity == 75
    assert matches[0].unit_price == Decimal("6.00")
    assert matches[0].batch_number == "b-3300"
    assert len(state.medicines) == 5
    assert state.footer_message == "Updated Ibuprofen 400mg"


def test_update_keeps_stored_identity(state, find):
    para = find("Paracetamol")
    select_medicine(state, para)
    state.current_medicine.stock_quantity = 5

    stored = save_medicine(state)
    assert stored is para
    assert para.stock_quantity == 5
    assert state.low_stock_count == 2


def test_save_rejects_blank_name_without_changes(state, events):
    before = [m.to_row() for m in state.medicines]
    with pytest.raises(ValidationError, match="medicine name"):
        save_medicine(state, _draft(name="   "))

    assert [m.to_row() for m in state.medicines] == before
    assert state.footer_message == "Please enter a medicine name."
    assert events[-1].fields == {FOOTER_MESSAGE}


@pytest.mark.parametrize(
    "bad",
    [
        dict(batch_number=""),
        dict(stock_quantity=-1),
        dict(reorder_level=-3),
        dict(unit_price=Decimal("-0.01")),
    ],
)
def test_save_rejects_invalid_fields(state, bad):
    with pytest.raises(ValidationError):
        save_medicine(state, _draft(**bad))
    assert len(state.medicines) == 4


def test_selecting_gives_a_detached_working_copy(state, find, events):
    amox = find("Amoxicillin")
    select_medicine(state, amox)

    assert state.selected_medicine is amox
    assert state.current_medicine is not amox
    assert state.current_medicine.to_row() == amox.to_row()
    assert state.footer_message == "Editing Amoxicillin 250mg"
    assert {SELECTED_MEDICINE, CURRENT_MEDICINE} <= events[-1].fields

    state.current_medicine.name = "Renamed"
    state.current_medicine.stock_quantity = 0
    assert amox.name == "Amoxicillin 250mg"
    assert amox.stock_quantity == 60


def test_select_unknown_medicine_is_rejected(state):
    with pytest.raises(SelectionError):
        select_medicine(state, _draft())
    assert state.selected_medicine is None


def test_new_medicine_resets_working_copy(state, find):
    select_medicine(state, find("Cetirizine"))
    m = new_medicine(state)

    assert state.selected_medicine is None
    assert m is state.current_medicine
    assert m.name == ""
    assert m.batch_number == AUTO_BATCH
    assert m.expiry_date == date(2027, 10, 17)
    assert state.footer_message == "Ready to add a new medicine."


def test_delete_without_selection_is_a_noop(state):
    before = list(state.medicines)
    with pytest.raises(SelectionError, match="Select an inventory row first"):
        delete_medicine(state)
    assert list(state.medicines) == before


def test_delete_selected_medicine(state, find):
    omep = find("Omeprazole")
    assert state.low_stock_count == 1
    select_medicine(state, omep)

    removed = delete_medicine(state)
    assert removed is omep
    assert omep not in state.medicines
    assert omep not in state.filtered_medicines
    assert state.selected_medicine is None
    assert state.current_medicine.batch_number == AUTO_BATCH
    assert state.low_stock_count == 0
    assert state.footer_message == "Deleted Omeprazole"


def test_delete_clears_forms_pointing_at_it(state, find):
    cet = find("Cetirizine")
    state.sale_form.medicine = cet
    state.prescription_form.medicine = cet
    select_medicine(state, cet)

    delete_medicine(state)
    assert state.sale_form.medicine is None
    assert state.prescription_form.medicine is None


def test_delete_twice_is_rejected(state, find):
    cet = find("Cetirizine")
    select_medicine(state, cet)
    delete_medicine(state, cet)
    with pytest.raises(SelectionError):
        delete_medicine(state, cet)
    assert len(state.medicines) == 3


def test_filter_amox_finds_only_amoxicillin(state, events):
    rows = set_inventory_filter(state, "amox")
    assert [m.name for m in rows] == ["Amoxicillin 250mg"]
    assert [m.name for m in state.filtered_medicines] == ["Amoxicillin 250mg"]
    assert FILTERED_MEDICINES in events[-1]


def test_filter_matches_category_case_insensitive(state):
    rows = set_inventory_filter(state, "  GASTRO ")
    assert [m.name for m in rows] == ["Omeprazole"]


def test_empty_filter_shows_everything(state):
    set_inventory_filter(state, "amox")
    rows = set_inventory_filter(state, "")
    assert rows == list(state.medicines)


def test_filter_is_reapplied_after_save(state):
    set_inventory_filter(state, "analgesic")
    assert len(state.filtered_medicines) == 1

    save_medicine(state, _draft())
    assert [m.name for m in state.filtered_medicines] == ["Paracetamol 500mg", "Ibuprofen 400mg"]


def test_filter_with_no_matches(state):
    assert set_inventory_filter(state, "zzz") == []
    assert len(state.filtered_medicines) == 0
    assert len(state.medicines) == 4


def test_delete_of_unselected_medicine_changes_nothing(state, find, events):
    para = find("Paracetamol")
    cet = find("Cetirizine")
    select_medicine(state, para)
    before = list(state.medicines)
    draft = state.current_medicine

    with pytest.raises(SelectionError, match="Only the selected"):
        delete_medicine(state, cet)

    assert list(state.medicines) == before
    assert cet in state.medicines
    assert state.selected_medicine is para
    assert state.current_medicine is draft
    assert events[-1].fields == {FOOTER_MESSAGE}


def test_delete_confirming_the_selection(state, find):
    para = find("Paracetamol")
    select_medicine(state, para)
    assert delete_medicine(state, para) is para
    assert para not in state.medicines


def test_save_converts_loose_field_types(state):
    stored = save_medicine(
        state,
        _draft(stock_quantity="5", reorder_level=10.0, unit_price=2.5, name="  Ibuprofen 400mg "),
    )
    assert stored.stock_quantity == 5
    assert stored.reorder_level == 10
    assert stored.unit_price == Decimal("2.5")
    assert isinstance(stored.unit_price, Decimal)
    assert stored.name == "Ibuprofen 400mg"

    assert state.low_stock_count == 2
    add_to_bill(state, stored, 2)
    assert state.bill_total == Decimal("5.25")


def test_update_converts_loose_field_types(state, find):
    para = find("Paracetamol")
    select_medicine(state, para)
    state.current_medicine.unit_price = 4.0
    state.current_medicine.stock_quantity = "7"
    save_medicine(state)

    assert para.unit_price == Decimal("4.0")
    assert para.stock_quantity == 7
    assert state.low_stock_count == 2


@pytest.mark.parametrize(
    "bad",
    [
        dict(stock_quantity="lots"),
        dict(stock_quantity=2.7),
        dict(reorder_level="1.5"),
        dict(unit_price="cheap"),
        dict(unit_price=float("nan")),
        dict(expiry_date="2027-01-01"),
    ],
)
def test_save_rejects_unconvertible_fields(state, bad):
    before = [m.to_row() for m in state.medicines]
    with pytest.raises(ValidationError):
        save_medicine(state, _draft(**bad))
    assert [m.to_row() for m in state.medicines] == before
    assert state.low_stock_count == 1
