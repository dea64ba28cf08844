from __future__ import annotations

import logging
from typing import Optional

from core.errors import SelectionError, ValidationError
from core.events import PRESCRIPTION_INPUTS
from core.models import Medicine, Prescription
from core.state import PharmacyState, PrescriptionForm
from core.utils import is_blank

logger = logging.getLogger(__name__)


def add_prescription(
    state: PharmacyState,
    patient_name: Optional[str] = None,
    doctor_name: Optional[str] = None,
    medicine: Optional[Medicine] = None,
) -> Prescription:
    """
    Queue a prescription. The medicine's name is copied in at this moment;
    renaming the lot later does not rewrite the queue.
    """
    form = state.prescription_form
    patient_name = form.patient_name if patient_name is None else patient_name
    doctor_name = form.doctor_name if doctor_name is None else doctor_name
    medicine = form.medicine if medicine is None else medicine

    try:
        if medicine is None:
            raise SelectionError("Prescription requires patient and medicine.")
        if is_blank(patient_name):
            raise ValidationError("Prescription requires patient and medicine.")
    except (SelectionError, ValidationError) as e:
        raise state.reject("add_prescription", e)

    rx = Prescription(
        patient_name=str(patient_name).strip(),
        doctor_name=("" if doctor_name is None else str(doctor_name).strip()),
        medicine_name=medicine.name,
        created_on=state.now(),
    )

    with state.store.change("add_prescription") as cs:
        state.prescriptions.append(rx)
        state.prescription_form = PrescriptionForm()
        cs.add(PRESCRIPTION_INPUTS)
        state.set_footer("Prescription queued.")

    logger.info("Queued prescription for %s: %s", rx.patient_name, rx.medicine_name)
    return rx
