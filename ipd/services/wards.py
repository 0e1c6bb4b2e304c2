"""
Ward and bed management.

A ward owns ``capacity`` beds numbered ``1..capacity``; beds are
created with the ward and added or removed when the capacity changes.
Occupied beds are never removed.
"""
import logging
import math

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from rest_framework.exceptions import NotFound

from ipd.exceptions import BadRequest
from ipd.models import Admission, Bed, Ward
from ipd.services.audit import log_action

logger = logging.getLogger(__name__)

WARD_TO_BED_TYPE = {
    'ICU': Bed.TYPE_ICU,
    'CARDIAC': Bed.TYPE_ICU,
    'PRIVATE': Bed.TYPE_PRIVATE,
}


def bed_type_for_ward(ward_type: str) -> str:
    return WARD_TO_BED_TYPE.get(ward_type, Bed.TYPE_GENERAL)


def format_bed(b: Bed) -> dict:
    return {
        'id': b.id,
        'wardId': b.ward_id,
        'bedNumber': b.bed_number,
        'bedType': b.bed_type,
        'isOccupied': b.is_occupied,
        'isActive': b.is_active,
    }


def format_ward(w: Ward, *, with_beds=False) -> dict:
    data = {
        'id': w.id,
        'name': w.name,
        'type': w.type,
        'capacity': w.capacity,
        'currentOccupancy': w.current_occupancy,
        'dailyRate': w.daily_rate,
        'floor': w.floor,
        'description': w.description,
        'isActive': w.is_active,
    }
    counts = getattr(w, 'bed_count', None)
    if counts is not None:
        data['_count'] = {'beds': w.bed_count, 'activeAdmissions': w.active_admissions}
    if with_beds:
        data['beds'] = [format_bed(b) for b in w.beds.order_by('id')]
    return data


def _wards():
    return Ward.objects.annotate(
        bed_count=Count('beds', distinct=True),
        active_admissions=Count('admissions', filter=Q(admissions__status=Admission.STATUS_ADMITTED),
                                distinct=True),
    )


def get_ward_or_404(ward_id) -> Ward:
    w = _wards().filter(pk=ward_id).first()
    if not w:
        raise NotFound('Ward not found')
    return w


def _make_beds(ward: Ward, first: int, last: int):
    bed_type = bed_type_for_ward(ward.type)
    Bed.objects.bulk_create([
        Bed(ward=ward, bed_number=str(n), bed_type=bed_type) for n in range(first, last + 1)
    ])


def list_wards(*, search=None, type=None, isActive=None, page=1, limit=None) -> dict:
    limit = limit or settings.IPD_DEFAULT_PAGE_SIZE
    qs = _wards()
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search)
                       | Q(floor__icontains=search))
    if type:
        qs = qs.filter(type=type)
    if isActive is not None:
        qs = qs.filter(is_active=isActive)
    total = qs.count()
    start = (page - 1) * limit
    total_pages = math.ceil(total / limit)
    return {
        'wards': [format_ward(w) for w in qs.order_by('name')[start:start + limit]],
        'pagination': {
            'currentPage': page,
            'totalPages': total_pages,
            'totalItems': total,
            'itemsPerPage': limit,
            'hasNextPage': page < total_pages,
            'hasPrevPage': page > 1,
        },
    }


def create_ward(current_user, *, name, type, capacity, description='', floor='', dailyRate=None) -> Ward:
    if Ward.objects.filter(name=name).exists():
        raise BadRequest('Ward with this name already exists')
    with transaction.atomic():
        ward = Ward.objects.create(name=name, type=type, capacity=capacity, description=description or '',
                                   floor=floor or '', daily_rate=dailyRate)
        _make_beds(ward, 1, capacity)
    log_action(user=current_user, action='CREATE_WARD', table_name='wards', record_id=ward.id,
               new_value={'name': name, 'type': type, 'capacity': capacity})
    logger.info('ward %s (%s) created with %s beds', ward.id, name, capacity)
    return get_ward_or_404(ward.id)


_WARD_FIELDS = {
    'name': 'name',
    'type': 'type',
    'capacity': 'capacity',
    'description': 'description',
    'floor': 'floor',
    'isActive': 'is_active',
    'dailyRate': 'daily_rate',
}


def update_ward(current_user, ward_id, data: dict) -> Ward:
    ward = get_ward_or_404(ward_id)
    name = data.get('name')
    if name and name != ward.name and Ward.objects.filter(name=name).exclude(pk=ward.pk).exists():
        raise BadRequest('Ward with this name already exists')
    old = {'name': ward.name, 'type': ward.type, 'capacity': ward.capacity}

    with transaction.atomic():
        for key, field in _WARD_FIELDS.items():
            if key in data:
                setattr(ward, field, data[key])
        ward.save()

        bed_count = ward.beds.count()
        if ward.capacity > bed_count:
            top = max((int(n) for n in ward.beds.values_list('bed_number', flat=True) if n.isdigit()), default=0)
            _make_beds(ward, top + 1, top + ward.capacity - bed_count)
        elif ward.capacity < bed_count:
            spare = list(ward.beds.filter(is_occupied=False, admissions__isnull=True)
                         .order_by('-id').values_list('id', flat=True)[:bed_count - ward.capacity])
            Bed.objects.filter(pk__in=spare, is_occupied=False).delete()
            if len(spare) < bed_count - ward.capacity:
                logger.warning('ward %s: only %s of %s excess beds could be removed',
                               ward.id, len(spare), bed_count - ward.capacity)

    log_action(user=current_user, action='UPDATE_WARD', table_name='wards', record_id=ward.id,
               old_value=old, new_value={'name': ward.name, 'type': ward.type, 'capacity': ward.capacity})
    return get_ward_or_404(ward.id)


def delete_ward(current_user, ward_id, *, force=False):
    ward = get_ward_or_404(ward_id)
    active = Admission.objects.filter(ward=ward, status=Admission.STATUS_ADMITTED).count()
    all_admissions = Admission.objects.filter(ward=ward).count()
    bed_count = ward.beds.count()
    if active and not force:
        raise BadRequest(
            f'Cannot delete ward with {active} active admission(s). Use force=true to delete all related records.',
            data={'activeAdmissions': active, 'allAdmissions': all_admissions,
                  'occupiedBeds': ward.beds.filter(is_occupied=True).count(), 'totalBeds': bed_count},
        )
    try:
        with transaction.atomic():
            Admission.objects.filter(ward=ward).delete()
            Bed.objects.filter(ward=ward).delete()
            ward.delete()
    except IntegrityError:
        logger.exception('ward %s could not be deleted', ward_id)
        raise BadRequest('Cannot delete ward: it has related records that cannot be automatically removed')

    log_action(user=current_user, action='DELETE_WARD', table_name='wards', record_id=ward_id,
               old_value={'name': ward.name, 'type': ward.type, 'capacity': ward.capacity,
                          'bedsDeleted': bed_count, 'activeAdmissions': active})
    logger.info('ward %s deleted (force=%s, admissions removed=%s)', ward_id, force, all_admissions)


def ward_stats() -> dict:
    totals = Ward.objects.aggregate(capacity=Sum('capacity'), occupancy=Sum('current_occupancy'))
    capacity = totals['capacity'] or 0
    occupancy = totals['occupancy'] or 0
    by_type = (Ward.objects.values('type').annotate(count=Count('id')).order_by('type'))
    rate = (occupancy / capacity) * 100 if capacity else 0
    return {
        'totalWards': Ward.objects.count(),
        'wardsByType': [{'type': r['type'], 'count': r['count']} for r in by_type],
        'activeWards': Ward.objects.filter(is_active=True).count(),
        'totalCapacity': capacity,
        'totalOccupancy': occupancy,
        'availableBeds': Bed.objects.filter(is_occupied=False, is_active=True).count(),
        'occupancyRate': round(rate, 2),
    }

