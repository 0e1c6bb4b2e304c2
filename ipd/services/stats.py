"""
Admission statistics.

The six reads behind the statistics payload are independent and are
joined with ``asyncio.gather`` before the average stay is computed.
If any one of them fails the whole aggregation fails; there are no
partial results.

The reads are wrapped with ``thread_sensitive=True`` so they share the
caller's database connection and transaction.  Django connections are
per thread, so this keeps the reads on one consistent view of the
data, at the cost of running them one after another rather than in
parallel.  The gather provides the join-all-or-fail-all contract; it
is not a throughput optimisation.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from asgiref.sync import async_to_sync, sync_to_async
from django.db.models import Count
from django.utils import timezone

from ipd.models import Admission

DAY_MS = 86_400_000
TWO_PLACES = Decimal('0.01')


def today_window(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Local midnight to the following midnight for ``now``."""
    local = timezone.localtime(now or timezone.now())
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def average_stay_days(stays) -> float:
    """Mean of ``(admission_date, discharge_date)`` pairs in days, 2 decimals.

    Returns 0 for an empty input.
    """
    total_ms = 0
    count = 0
    for admitted, discharged in stays:
        total_ms += (discharged - admitted) // timedelta(milliseconds=1)
        count += 1
    if not count:
        return 0
    avg = Decimal(total_ms) / count / DAY_MS
    return float(avg.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _total():
    return Admission.objects.count()


def _current():
    return Admission.objects.filter(status=Admission.STATUS_ADMITTED).count()


def _discharged_between(start, end):
    return Admission.objects.filter(
        status=Admission.STATUS_DISCHARGED,
        discharge_date__gte=start,
        discharge_date__lt=end,
    ).count()


def _by_type():
    rows = (Admission.objects.values('admission_type')
            .annotate(count=Count('id')).order_by('admission_type'))
    return [{'admissionType': r['admission_type'], 'count': r['count']} for r in rows]


def _by_ward():
    rows = (Admission.objects.filter(status=Admission.STATUS_ADMITTED)
            .values('ward_id', 'ward__name')
            .annotate(count=Count('id')).order_by('ward__name'))
    return [{'wardId': r['ward_id'], 'wardName': r['ward__name'], 'count': r['count']} for r in rows]


def _discharged_stays():
    return list(Admission.objects.filter(
        status=Admission.STATUS_DISCHARGED,
        discharge_date__isnull=False,
    ).values_list('admission_date', 'discharge_date'))


async def _gather(now):
    start, end = today_window(now)

    def run(fn, *args):
        return sync_to_async(fn, thread_sensitive=True)(*args)

    return await asyncio.gather(
        run(_total),
        run(_current),
        run(_discharged_between, start, end),
        run(_by_type),
        run(_by_ward),
        run(_discharged_stays),
    )


def admission_stats(*, now: Optional[datetime] = None) -> dict:
    total, current, discharged_today, by_type, by_ward, stays = async_to_sync(_gather)(now)
    return {
        'totalAdmissions': total,
        'currentAdmissions': current,
        'dischargedToday': discharged_today,
        'admissionsByType': by_type,
        'admissionsByWard': by_ward,
        'averageStayDuration': average_stay_days(stays),
    }
