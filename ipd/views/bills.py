"""
Inpatient bill endpoints.

Receptionists and ward managers raise and settle bills; clinical staff
can read them.  Nurses only see bills of a given admission or a single
bill, not the hospital-wide list.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ipd.permissions import CanManageBills, CanViewBillList, CanViewBills, ReadOnly
from ipd.serializers.bill import (
    InpatientBillCreateSerializer,
    InpatientBillSearchSerializer,
    InpatientBillUpdateSerializer,
)
from ipd.services import bills as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewBillList) | CanManageBills])
def inpatient_bills(request):
    if request.method == 'POST':
        s = InpatientBillCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        bill = svc.create_bill(request.user, **s.validated_data)
        return Response({
            'success': True,
            'message': 'Inpatient bill created successfully',
            'data': {'inpatientBill': svc.format_bill(bill)},
        }, status=status.HTTP_201_CREATED)

    q = InpatientBillSearchSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'success': True, 'data': svc.list_bills(**q.validated_data)})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewBills) | CanManageBills])
def inpatient_bill_detail(request, bill_id: int):
    if request.method == 'PUT':
        s = InpatientBillUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        bill = svc.update_bill(request.user, bill_id, s.validated_data)
        return Response({
            'success': True,
            'message': 'Inpatient bill updated successfully',
            'data': {'inpatientBill': svc.format_bill(bill)},
        })

    bill = svc.get_bill_or_404(bill_id)
    return Response({'success': True, 'data': {'inpatientBill': svc.format_bill(bill)}})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewBills])
def admission_bills(request, admission_id: int):
    return Response({'success': True, 'data': {'inpatientBills': svc.admission_bills(admission_id)}})
