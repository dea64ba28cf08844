from __future__ import annotations

import logging
from typing import Optional

from core.errors import ValidationError
from core.events import SUPPLIER_INPUTS
from core.models import Supplier
from core.state import PharmacyState, SupplierForm
from core.utils import is_blank

logger = logging.getLogger(__name__)


def _clean(v: Optional[str]) -> str:
    return "" if v is None else str(v).strip()


def add_supplier(
    state: PharmacyState,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> Supplier:
    form = state.supplier_form
    name = form.name if name is None else name
    phone = form.phone if phone is None else phone
    email = form.email if email is None else email

    if is_blank(name):
        raise state.reject("add_supplier", ValidationError("Supplier name required."))

    supplier = Supplier(name=_clean(name), phone=_clean(phone), email=_clean(email))

    with state.store.change("add_supplier") as cs:
        state.suppliers.append(supplier)
        state.supplier_form = SupplierForm()
        cs.add(SUPPLIER_INPUTS)
        state.set_footer("Supplier added.")

    logger.info("Added supplier %s", supplier.name)
    return supplier
