import logging
import math

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.db.models.functions import Greatest
from django.utils import timezone
from rest_framework.exceptions import NotFound

from ipd.exceptions import BadRequest, ConflictError
from ipd.models import Admission, Bed, Patient, Ward
from ipd.services.audit import log_action
from ipd.services.charges import compute_charges_preview

logger = logging.getLogger(__name__)


def isoformat_or_none(dt):
    return dt.isoformat() if dt else None


def user_brief(user):
    if user is None:
        return None
    return {'id': user.id, 'fullName': user.full_name or user.username, 'role': user.role}


def format_admission(a: Admission) -> dict:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'wardId': a.ward_id,
        'bedId': a.bed_id,
        'admissionDate': isoformat_or_none(a.admission_date),
        'admissionType': a.admission_type,
        'admissionReason': a.admission_reason,
        'notes': a.notes,
        'status': a.status,
        'dischargeDate': isoformat_or_none(a.discharge_date),
        'dischargeNotes': a.discharge_notes,
        'patient': {
            'id': a.patient.id, 'name': a.patient.name, 'age': a.patient.age,
            'gender': a.patient.gender, 'phone': a.patient.phone,
        },
        'ward': {'id': a.ward.id, 'name': a.ward.name, 'type': a.ward.type},
        'bed': {'id': a.bed.id, 'bedNumber': a.bed.bed_number, 'bedType': a.bed.bed_type},
        'admittedByUser': user_brief(a.admitted_by),
        'dischargedByUser': user_brief(a.discharged_by),
        'createdAt': isoformat_or_none(a.created_at),
        'updatedAt': isoformat_or_none(a.updated_at),
    }


def _admissions():
    return Admission.objects.select_related('patient', 'ward', 'bed', 'admitted_by', 'discharged_by')


def get_admission_or_404(admission_id) -> Admission:
    a = _admissions().filter(pk=admission_id).first()
    if not a:
        raise NotFound('Admission not found')
    return a


def _check_bed(bed: Bed, ward_id):
    if bed.is_occupied:
        raise BadRequest('Bed is already occupied')
    if bed.ward_id != ward_id:
        raise BadRequest('Bed does not belong to the specified ward')


def _release_bed(bed_id, ward_id):
    Bed.objects.filter(pk=bed_id).update(is_occupied=False)
    Ward.objects.filter(pk=ward_id).update(current_occupancy=Greatest(F('current_occupancy') - 1, 0))


def _occupy_bed(bed_id, ward_id):
    Bed.objects.filter(pk=bed_id).update(is_occupied=True)
    Ward.objects.filter(pk=ward_id).update(current_occupancy=F('current_occupancy') + 1)


def create_admission(current_user, *, patientId, wardId, bedId, admissionDate, admissionType,
                     admissionReason, notes='') -> Admission:
    patient = Patient.objects.filter(pk=patientId).first()
    if not patient:
        raise NotFound('Patient not found')
    existing = Admission.objects.filter(patient=patient, status=Admission.STATUS_ADMITTED).first()
    if existing:
        raise BadRequest('Patient is already admitted', data={'existingAdmissionId': existing.id})
    ward = Ward.objects.filter(pk=wardId).first()
    if not ward:
        raise NotFound('Ward not found')
    bed = Bed.objects.filter(pk=bedId).first()
    if not bed:
        raise NotFound('Bed not found')
    _check_bed(bed, ward.id)

    with transaction.atomic():
        # Bed state re-read under a row lock.
        bed = Bed.objects.select_for_update().get(pk=bed.pk)
        _check_bed(bed, ward.id)
        admission = Admission.objects.create(
            patient=patient,
            ward=ward,
            bed=bed,
            admission_date=admissionDate,
            admission_type=admissionType,
            admission_reason=admissionReason,
            notes=notes or '',
            status=Admission.STATUS_ADMITTED,
            admitted_by=current_user,
        )
        _occupy_bed(bed.id, ward.id)
        Patient.objects.filter(pk=patient.pk).update(patient_type=Patient.TYPE_INPATIENT)

    log_action(user=current_user, action='CREATE_ADMISSION', table_name='admissions', record_id=admission.id,
               new_value={'patientId': patient.id, 'wardId': ward.id, 'bedId': bed.id,
                          'admissionType': admissionType, 'status': admission.status})
    logger.info('admission %s created for patient %s in ward %s bed %s', admission.id, patient.id, ward.id, bed.id)
    return get_admission_or_404(admission.id)


def list_admissions(*, search=None, patientId=None, wardId=None, status=None, admissionType=None,
                    page=1, limit=None) -> dict:
    limit = limit or settings.IPD_DEFAULT_PAGE_SIZE
    qs = _admissions()
    if search:
        qs = qs.filter(Q(patient__name__icontains=search) | Q(admission_reason__icontains=search)
                       | Q(notes__icontains=search))
    if patientId:
        qs = qs.filter(patient_id=patientId)
    if wardId:
        qs = qs.filter(ward_id=wardId)
    if status:
        qs = qs.filter(status=status)
    if admissionType:
        qs = qs.filter(admission_type=admissionType)

    total = qs.count()
    start = (page - 1) * limit
    rows = qs.order_by('-created_at', '-id')[start:start + limit]
    total_pages = math.ceil(total / limit)
    return {
        'admissions': [format_admission(a) for a in rows],
        'pagination': {
            'currentPage': page,
            'totalPages': total_pages,
            'totalItems': total,
            'itemsPerPage': limit,
            'hasNextPage': page < total_pages,
            'hasPrevPage': page > 1,
        },
    }


def current_admissions(*, wardId=None) -> list[dict]:
    qs = _admissions().filter(status=Admission.STATUS_ADMITTED)
    if wardId:
        qs = qs.filter(ward_id=wardId)
    return [format_admission(a) for a in qs.order_by('-admission_date')]


_UPDATABLE = {
    'admissionType': 'admission_type',
    'admissionReason': 'admission_reason',
    'notes': 'notes',
    'dischargeNotes': 'discharge_notes',
}


def update_admission(current_user, admission_id, data: dict) -> Admission:
    """Partially update an admission.

    Moving an active admission to another bed frees the old bed and
    occupies the new one; the new bed must be free and belong to the
    target ward.  The status is not changed here; see
    :func:`discharge_admission`.
    """
    admission = get_admission_or_404(admission_id)
    old = {'wardId': admission.ward_id, 'bedId': admission.bed_id, 'status': admission.status}

    ward_id = data.get('wardId', admission.ward_id)
    bed_id = data.get('bedId', admission.bed_id)
    moving = ward_id != admission.ward_id or bed_id != admission.bed_id

    with transaction.atomic():
        if moving:
            if not Ward.objects.filter(pk=ward_id).exists():
                raise NotFound('Ward not found')
            bed = Bed.objects.select_for_update().filter(pk=bed_id).first()
            if not bed:
                raise NotFound('Bed not found')
            if admission.status == Admission.STATUS_ADMITTED:
                _check_bed(bed, ward_id)
                _release_bed(admission.bed_id, admission.ward_id)
                _occupy_bed(bed.id, ward_id)
            elif bed.ward_id != ward_id:
                raise BadRequest('Bed does not belong to the specified ward')
            admission.ward_id = ward_id
            admission.bed_id = bed_id

        for key, field in _UPDATABLE.items():
            if key in data:
                setattr(admission, field, data[key])
        admission.save()

    new = {'wardId': admission.ward_id, 'bedId': admission.bed_id, 'status': admission.status}
    log_action(user=current_user, action='UPDATE_ADMISSION', table_name='admissions', record_id=admission.id,
               old_value=old, new_value=new)
    return get_admission_or_404(admission.id)


def discharge_admission(current_user, admission_id, *, dischargeNotes='', now=None) -> Admission:
    admission = get_admission_or_404(admission_id)
    if admission.status != Admission.STATUS_ADMITTED:
        raise BadRequest('Patient is not currently admitted')

    discharged_at = now or timezone.now()
    if discharged_at < admission.admission_date:
        raise BadRequest('Discharge date cannot be earlier than admission date')

    if settings.IPD_DISCHARGE_REQUIRES_NO_DUES:
        charges = compute_charges_preview(admission.id, now=discharged_at)
        if charges.total_amount > 0:
            logger.info('discharge of admission %s blocked, dues %s', admission.id, charges.total_amount)
            raise ConflictError('Discharge blocked: No-dues check failed. Pending charges exist.',
                                data={'charges': charges.as_dict()})

    with transaction.atomic():
        updated = Admission.objects.filter(pk=admission.pk, status=Admission.STATUS_ADMITTED).update(
            status=Admission.STATUS_DISCHARGED,
            discharge_date=discharged_at,
            discharged_by=current_user,
            discharge_notes=dischargeNotes or '',
            updated_at=discharged_at,
        )
        if not updated:
            raise BadRequest('Patient is not currently admitted')
        _release_bed(admission.bed_id, admission.ward_id)
        Patient.objects.filter(pk=admission.patient_id).update(patient_type=Patient.TYPE_OUTPATIENT)

    log_action(user=current_user, action='DISCHARGE_PATIENT', table_name='admissions', record_id=admission.id,
               old_value={'status': Admission.STATUS_ADMITTED, 'dischargeDate': None},
               new_value={'status': Admission.STATUS_DISCHARGED, 'dischargeDate': isoformat_or_none(discharged_at),
                          'dischargedBy': getattr(current_user, 'id', None)})
    logger.info('admission %s discharged', admission.id)
    return get_admission_or_404(admission.id)
