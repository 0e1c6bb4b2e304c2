"""
Inpatient charges preview.

Room charges accrue in 24-hour blocks counted from the admission
timestamp up to the current time.  Any started block is billed in
full and a stay is always billed at least one day.  The other charge
categories are placeholders kept at zero until procedures, pharmacy
and lab billing feed into the preview.

The window always ends at "now", also for admissions that are already
discharged.  The preview is meant for active stays; discharged stays
keep accruing here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from ipd.models import Admission
from ipd.services.tariffs import TariffConfigProvider, resolve_tariff_per_day

logger = logging.getLogger(__name__)

BILLING_CYCLE = timedelta(days=1)
_CYCLE_MS = BILLING_CYCLE // timedelta(milliseconds=1)
ZERO = Decimal('0')


@dataclass
class ChargesPreview:
    room_charges: Decimal = ZERO
    procedure_charges: Decimal = ZERO
    medicine_charges: Decimal = ZERO
    lab_charges: Decimal = ZERO
    other_charges: Decimal = ZERO
    details: dict = field(default_factory=dict)

    @property
    def total_amount(self) -> Decimal:
        return (self.room_charges + self.procedure_charges + self.medicine_charges
                + self.lab_charges + self.other_charges)

    def as_dict(self) -> dict:
        return {
            'roomCharges': self.room_charges,
            'procedureCharges': self.procedure_charges,
            'medicineCharges': self.medicine_charges,
            'labCharges': self.lab_charges,
            'otherCharges': self.other_charges,
            'totalAmount': self.total_amount,
            'details': dict(self.details),
        }


def not_found_yields_zero_preview() -> ChargesPreview:
    """Preview returned for an unknown admission.

    The preview endpoint never fails on a missing admission; the
    front-end polls it and shows zeros instead of an error.
    """
    return ChargesPreview()


def days_charged(start: datetime, end: datetime) -> int:
    """Number of started 24-hour blocks between ``start`` and ``end``, at least 1."""
    elapsed_ms = (end - start) // timedelta(milliseconds=1)
    return max(1, -(-elapsed_ms // _CYCLE_MS))


def compute_charges_preview(admission_id, *, now: Optional[datetime] = None,
                            config_provider: Optional[TariffConfigProvider] = None) -> ChargesPreview:
    try:
        pk = int(admission_id)
    except (TypeError, ValueError):
        pk = None
    admission = Admission.objects.select_related('ward').filter(pk=pk).first() if pk is not None else None
    if admission is None:
        logger.debug('charges preview for unknown admission %s', admission_id)
        return not_found_yields_zero_preview()

    end = now or timezone.now()
    days = days_charged(admission.admission_date, end)
    tariff = resolve_tariff_per_day(admission.ward_id, admission.ward.type, config_provider=config_provider)

    return ChargesPreview(
        room_charges=tariff * days,
        details={
            'wardType': admission.ward.type,
            'tariffPerDay': tariff,
            'daysCharged': days,
        },
    )
