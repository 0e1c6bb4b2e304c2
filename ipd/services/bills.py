"""
Inpatient bills.

A bill persists the five charge categories of an admission.  Room
charges left out of a new bill are taken from the charges preview, so
a bill raised without figures matches what the ward has accrued so
far.  The total is the sum of the categories and is recomputed on
every update that touches one of them.
"""
import logging
import math

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound

from ipd.exceptions import BadRequest
from ipd.models import Admission, InpatientBill
from ipd.services.admissions import get_admission_or_404, isoformat_or_none, user_brief
from ipd.services.audit import log_action
from ipd.services.charges import compute_charges_preview

logger = logging.getLogger(__name__)

_CHARGES = {
    'roomCharges': 'room_charges',
    'procedureCharges': 'procedure_charges',
    'medicineCharges': 'medicine_charges',
    'labCharges': 'lab_charges',
    'otherCharges': 'other_charges',
}

_UPDATABLE = dict(_CHARGES, status='status', paymentMode='payment_mode', paidAmount='paid_amount', notes='notes')


def format_bill(b: InpatientBill, *, with_admission=True) -> dict:
    data = {
        'id': b.id,
        'admissionId': b.admission_id,
        'patientId': b.patient_id,
        **{key: getattr(b, field) for key, field in _CHARGES.items()},
        'totalAmount': b.total_amount,
        'status': b.status,
        'paymentMode': b.payment_mode or None,
        'paidAmount': b.paid_amount,
        'notes': b.notes,
        'createdByUser': user_brief(b.created_by),
        'createdAt': isoformat_or_none(b.created_at),
        'updatedAt': isoformat_or_none(b.updated_at),
    }
    if with_admission:
        a = b.admission
        data['admission'] = {
            'id': a.id,
            'admissionDate': isoformat_or_none(a.admission_date),
            'status': a.status,
            'patient': {'id': a.patient.id, 'name': a.patient.name, 'age': a.patient.age,
                        'gender': a.patient.gender, 'phone': a.patient.phone},
            'ward': {'id': a.ward.id, 'name': a.ward.name, 'type': a.ward.type},
            'bed': {'id': a.bed.id, 'bedNumber': a.bed.bed_number},
        }
    return data


def _bills():
    return InpatientBill.objects.select_related(
        'admission__patient', 'admission__ward', 'admission__bed', 'created_by')


def get_bill_or_404(bill_id) -> InpatientBill:
    b = _bills().filter(pk=bill_id).first()
    if not b:
        raise NotFound('Inpatient bill not found')
    return b


def _audit_amounts(b: InpatientBill) -> dict:
    return {
        'admissionId': b.admission_id,
        'totalAmount': str(b.total_amount),
        'paidAmount': None if b.paid_amount is None else str(b.paid_amount),
        'status': b.status,
    }


def _check_paid(b: InpatientBill):
    if b.paid_amount is not None and b.paid_amount > b.total_amount:
        raise BadRequest('Paid amount cannot exceed the bill total')


def create_bill(current_user, *, admissionId, notes='', **charges) -> InpatientBill:
    admission = Admission.objects.filter(pk=admissionId).first()
    if not admission:
        raise NotFound('Admission not found')

    bill = InpatientBill(admission=admission, patient_id=admission.patient_id, notes=notes or '',
                         status=InpatientBill.STATUS_PENDING, created_by=current_user)
    for key, field in _CHARGES.items():
        if charges.get(key) is not None:
            setattr(bill, field, charges[key])
    if charges.get('roomCharges') is None:
        bill.room_charges = compute_charges_preview(admission.id).room_charges
    bill.recompute_total()
    bill.save()

    log_action(user=current_user, action='CREATE_INPATIENT_BILL', table_name='inpatient_bills',
               record_id=bill.id, new_value=_audit_amounts(bill))
    logger.info('inpatient bill %s created for admission %s, total %s', bill.id, admission.id, bill.total_amount)
    return get_bill_or_404(bill.id)


def list_bills(*, admissionId=None, patientId=None, status=None, page=1, limit=None) -> dict:
    limit = limit or settings.IPD_DEFAULT_PAGE_SIZE
    qs = _bills()
    if admissionId:
        qs = qs.filter(admission_id=admissionId)
    if patientId:
        qs = qs.filter(patient_id=patientId)
    if status:
        qs = qs.filter(status=status)
    total = qs.count()
    start = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    return {
        'inpatientBills': [format_bill(b) for b in qs.order_by('-created_at', '-id')[start:start + limit]],
        'pagination': {
            'currentPage': page,
            'totalPages': total_pages,
            'totalItems': total,
            'itemsPerPage': limit,
            'hasNextPage': page < total_pages,
            'hasPrevPage': page > 1,
        },
    }


def admission_bills(admission_id) -> list[dict]:
    get_admission_or_404(admission_id)
    qs = _bills().filter(admission_id=admission_id).order_by('-created_at', '-id')
    return [format_bill(b, with_admission=False) for b in qs]


def update_bill(current_user, bill_id, data: dict) -> InpatientBill:
    with transaction.atomic():
        bill = InpatientBill.objects.select_for_update().filter(pk=bill_id).first()
        if not bill:
            raise NotFound('Inpatient bill not found')
        old = _audit_amounts(bill)
        for key, field in _UPDATABLE.items():
            if key in data:
                value = data[key]
                setattr(bill, field, '' if field == 'payment_mode' and value is None else value)
        if any(key in data for key in _CHARGES):
            bill.recompute_total()
        _check_paid(bill)
        bill.save()

    log_action(user=current_user, action='UPDATE_INPATIENT_BILL', table_name='inpatient_bills',
               record_id=bill.id, old_value=old, new_value=_audit_amounts(bill))
    return get_bill_or_404(bill.id)
