"""
Bed management.

Beds normally come and go with their ward's capacity; the functions
here add, edit and retire single beds.  Adding or deleting a bed moves
the ward capacity with it so the two stay equal.  Occupancy is owned
by admissions and cannot be edited here.
"""
import logging
import math

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Prefetch
from django.db.models.functions import Greatest
from rest_framework.exceptions import NotFound

from ipd.exceptions import BadRequest
from ipd.models import Admission, Bed, Ward
from ipd.services.audit import log_action
from ipd.services.wards import bed_type_for_ward, format_bed

logger = logging.getLogger(__name__)


def _current_admission(b: Bed):
    current = b.current_admissions[0] if b.current_admissions else None
    if current is None:
        return None
    p = current.patient
    return {
        'id': current.id,
        'admissionDate': current.admission_date.isoformat(),
        'patient': {'id': p.id, 'name': p.name, 'age': p.age, 'gender': p.gender},
    }


def format_bed_detail(b: Bed) -> dict:
    data = format_bed(b)
    data['ward'] = {
        'id': b.ward.id, 'name': b.ward.name, 'type': b.ward.type,
        'capacity': b.ward.capacity, 'currentOccupancy': b.ward.current_occupancy,
    }
    data['currentAdmission'] = _current_admission(b)
    return data


def _beds():
    return Bed.objects.select_related('ward').prefetch_related(Prefetch(
        'admissions',
        queryset=Admission.objects.filter(status=Admission.STATUS_ADMITTED).select_related('patient'),
        to_attr='current_admissions',
    ))


def get_bed_or_404(bed_id) -> Bed:
    b = _beds().filter(pk=bed_id).first()
    if not b:
        raise NotFound('Bed not found')
    return b


def list_beds(*, wardId=None, bedType=None, isOccupied=None, isActive=None, page=1, limit=None) -> dict:
    limit = limit or settings.IPD_DEFAULT_PAGE_SIZE
    qs = _beds()
    if wardId:
        qs = qs.filter(ward_id=wardId)
    if bedType:
        qs = qs.filter(bed_type=bedType)
    if isOccupied is not None:
        qs = qs.filter(is_occupied=isOccupied)
    if isActive is not None:
        qs = qs.filter(is_active=isActive)
    total = qs.count()
    start = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    return {
        'beds': [format_bed_detail(b) for b in qs.order_by('ward__name', 'id')[start:start + limit]],
        'pagination': {
            'currentPage': page,
            'totalPages': total_pages,
            'totalItems': total,
            'itemsPerPage': limit,
            'hasNextPage': page < total_pages,
            'hasPrevPage': page > 1,
        },
    }


def available_beds(*, wardId=None, bedType=None) -> list[dict]:
    qs = Bed.objects.select_related('ward').filter(is_occupied=False, is_active=True, ward__is_active=True)
    if wardId:
        qs = qs.filter(ward_id=wardId)
    if bedType:
        qs = qs.filter(bed_type=bedType)
    beds = []
    for b in qs.order_by('ward__name', 'id'):
        row = format_bed(b)
        row['ward'] = {'id': b.ward.id, 'name': b.ward.name, 'type': b.ward.type}
        beds.append(row)
    return beds


def _snapshot(b: Bed) -> dict:
    return {'wardId': b.ward_id, 'bedNumber': b.bed_number, 'bedType': b.bed_type,
            'isOccupied': b.is_occupied, 'isActive': b.is_active}


def create_bed(current_user, *, wardId, bedNumber, bedType=None) -> Bed:
    ward = Ward.objects.filter(pk=wardId).first()
    if not ward:
        raise NotFound('Ward not found')
    if Bed.objects.filter(ward=ward, bed_number=bedNumber).exists():
        raise BadRequest('Bed with this number already exists in this ward')
    with transaction.atomic():
        bed = Bed.objects.create(ward=ward, bed_number=bedNumber, bed_type=bedType or bed_type_for_ward(ward.type))
        Ward.objects.filter(pk=ward.pk).update(capacity=F('capacity') + 1)
    log_action(user=current_user, action='CREATE_BED', table_name='beds', record_id=bed.id,
               new_value=_snapshot(bed))
    logger.info('bed %s (%s) added to ward %s', bed.id, bedNumber, ward.id)
    return get_bed_or_404(bed.id)


def update_bed(current_user, bed_id, data: dict) -> Bed:
    bed = get_bed_or_404(bed_id)
    old = _snapshot(bed)
    number = data.get('bedNumber')
    if number and number != bed.bed_number and \
            Bed.objects.filter(ward_id=bed.ward_id, bed_number=number).exclude(pk=bed.pk).exists():
        raise BadRequest('Bed with this number already exists in this ward')
    if data.get('isActive') is False and bed.is_occupied:
        raise BadRequest('Cannot deactivate an occupied bed')

    if number:
        bed.bed_number = number
    if 'bedType' in data:
        bed.bed_type = data['bedType']
    if 'isActive' in data:
        bed.is_active = data['isActive']
    bed.save()

    log_action(user=current_user, action='UPDATE_BED', table_name='beds', record_id=bed.id,
               old_value=old, new_value=_snapshot(bed))
    return get_bed_or_404(bed.id)


def delete_bed(current_user, bed_id):
    bed = get_bed_or_404(bed_id)
    if bed.is_occupied:
        raise BadRequest('Cannot delete occupied bed')
    active = Admission.objects.filter(bed=bed, status=Admission.STATUS_ADMITTED).count()
    if active:
        raise BadRequest('Cannot delete bed with active admissions', data={'activeAdmissions': active})
    if Admission.objects.filter(bed=bed).exists():
        raise BadRequest('Cannot delete bed with admission history; deactivate it instead')

    old = _snapshot(bed)
    with transaction.atomic():
        bed.delete()
        Ward.objects.filter(pk=old['wardId']).update(capacity=Greatest(F('capacity') - 1, 0))
    log_action(user=current_user, action='DELETE_BED', table_name='beds', record_id=bed_id, old_value=old)
    logger.info('bed %s removed from ward %s', bed_id, old['wardId'])


def bed_stats() -> dict:
    total = Bed.objects.count()
    occupied = Bed.objects.filter(is_occupied=True).count()
    by_type = Bed.objects.values('bed_type').annotate(count=Count('id')).order_by('bed_type')
    by_ward = (Bed.objects.values('ward_id', 'ward__name')
               .annotate(count=Count('id')).order_by('ward__name'))
    rate = (occupied / total) * 100 if total else 0
    return {
        'totalBeds': total,
        'bedsByType': [{'bedType': r['bed_type'], 'count': r['count']} for r in by_type],
        'occupiedBeds': occupied,
        'availableBeds': Bed.objects.filter(is_occupied=False, is_active=True).count(),
        'bedsByWard': [{'wardId': r['ward_id'], 'wardName': r['ward__name'], 'count': r['count']}
                       for r in by_ward],
        'occupancyRate': round(rate, 2),
    }
