"""
Admission endpoints.

Admitting, listing, updating and discharging inpatients, plus the two
read-only computations built on top of admissions: the charges
preview for one stay and the hospital-wide admission statistics.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ipd.permissions import CanManageAdmissions, CanViewAdmissionCare, CanViewAdmissions, ReadOnly
from ipd.serializers.admission import (
    AdmissionCreateSerializer,
    AdmissionSearchSerializer,
    AdmissionUpdateSerializer,
    CurrentAdmissionsQuerySerializer,
    DischargeSerializer,
)
from ipd.services import admissions as svc
from ipd.services.charges import compute_charges_preview
from ipd.services.stats import admission_stats as compute_admission_stats

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewAdmissions) | CanManageAdmissions])
def admissions(request):
    if request.method == 'POST':
        s = AdmissionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        admission = svc.create_admission(request.user, **s.validated_data)
        return Response({
            'success': True,
            'message': 'Patient admitted successfully',
            'data': {'admission': svc.format_admission(admission)},
        }, status=status.HTTP_201_CREATED)

    q = AdmissionSearchSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'success': True, 'data': svc.list_admissions(**q.validated_data)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewAdmissionCare])
def current_admissions(request):
    q = CurrentAdmissionsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'success': True, 'data': {'admissions': svc.current_admissions(**q.validated_data)}})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewAdmissionCare) | CanManageAdmissions])
def admission_detail(request, admission_id: int):
    if request.method == 'PUT':
        s = AdmissionUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        admission = svc.update_admission(request.user, admission_id, s.validated_data)
        return Response({
            'success': True,
            'message': 'Admission updated successfully',
            'data': {'admission': svc.format_admission(admission)},
        })

    admission = svc.get_admission_or_404(admission_id)
    return Response({'success': True, 'data': {'admission': svc.format_admission(admission)}})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanManageAdmissions])
def discharge(request, admission_id: int):
    s = DischargeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission = svc.discharge_admission(request.user, admission_id, **s.validated_data)
    return Response({
        'success': True,
        'message': 'Patient discharged successfully',
        'data': {'admission': svc.format_admission(admission)},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewAdmissionCare])
def charges_preview(request, admission_id: str):
    """Room charges accrued so far for one admission.

    An unknown admission yields an all-zero preview, not a 404.
    """
    try:
        preview = compute_charges_preview(admission_id)
    except Exception:
        logger.exception('Charges preview failed for admission %s', admission_id)
        return Response({'success': False, 'message': 'Failed to compute charges'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'success': True, 'data': {'charges': preview.as_dict()}})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewAdmissions])
def admission_stats(request):
    try:
        data = compute_admission_stats()
    except Exception:
        logger.exception('Admission statistics failed')
        return Response({'success': False, 'message': 'Internal server error'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'success': True, 'data': data})
