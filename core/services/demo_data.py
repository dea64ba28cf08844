from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from core.config import Settings
from core.events import ALL_DERIVED
from core.models import Medicine, Supplier
from core.services.inventory import apply_inventory_filter, new_medicine
from core.state import PharmacyState, PrescriptionForm, SaleForm, SupplierForm

logger = logging.getLogger(__name__)

# name, category, batch, months to expiry, stock, reorder level, unit price
DEFAULT_MEDICINES = [
    ("Paracetamol 500mg", "Analgesic", "B-1001", 10, 120, 25, "3.50"),
    ("Amoxicillin 250mg", "Antibiotic", "B-2044", 6, 60, 20, "8.20"),
    ("Cetirizine", "Allergy", "B-8840", 4, 40, 15, "4.10"),
    ("Omeprazole", "Gastro", "B-6622", 2, 18, 20, "6.90"),
]

DEFAULT_SUPPLIERS = [
    ("HealthPlus Distributors", "+1-555-1200", "sales@healthplus.com"),
    ("MediCore Supply", "+1-555-9088", "orders@medicore.com"),
]


def wipe_all(state: PharmacyState) -> None:
    # Keep the state object (subscribers stay attached), drop its contents.
    with state.store.change("wipe_all") as cs:
        state.store.clear_all()
        state.sale_form = SaleForm()
        state.supplier_form = SupplierForm()
        state.prescription_form = PrescriptionForm()
        state.inventory_filter = ""
        new_medicine(state)
        cs.add(*ALL_DERIVED)


def load_demo_data(state: PharmacyState) -> None:
    today = state.today()
    with state.store.change("load_demo_data") as cs:
        for name, category, batch, months, stock, reorder, price in DEFAULT_MEDICINES:
            if state.store.find_by_batch(batch) is not None:
                continue
            state.medicines.append(
                Medicine(
                    name=name,
                    category=category,
                    batch_number=batch,
                    expiry_date=today + relativedelta(months=months),
                    stock_quantity=stock,
                    reorder_level=reorder,
                    unit_price=Decimal(price),
                )
            )

        known = {s.name for s in state.suppliers}
        for name, phone, email in DEFAULT_SUPPLIERS:
            if name not in known:
                state.suppliers.append(Supplier(name=name, phone=phone, email=email))

        apply_inventory_filter(state)
        cs.add(*ALL_DERIVED)

    logger.info("Loaded demo data: %s medicines, %s suppliers", len(state.medicines), len(state.suppliers))


def reset_demo_data(state: PharmacyState) -> None:
    with state.store.change("reset_demo_data"):
        wipe_all(state)
        load_demo_data(state)
        state.set_footer("Demo data restored.")


def build_state(settings: Settings, *, clock: Optional[Callable[[], datetime]] = None) -> PharmacyState:
    state = PharmacyState.from_settings(settings, clock=clock)
    if settings.seed_demo_data:
        load_demo_data(state)
    else:
        apply_inventory_filter(state)
    return state
