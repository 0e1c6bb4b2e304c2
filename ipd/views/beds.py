from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ipd.permissions import CanManageWards, CanViewBeds, CanViewWards, ReadOnly
from ipd.serializers.ward import (
    AvailableBedsQuerySerializer,
    BedCreateSerializer,
    BedSearchSerializer,
    BedUpdateSerializer,
)
from ipd.services import beds as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewBeds) | CanManageWards])
def beds(request):
    if request.method == 'POST':
        s = BedCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        bed = svc.create_bed(request.user, **s.validated_data)
        return Response({
            'success': True,
            'message': 'Bed created successfully',
            'data': {'bed': svc.format_bed_detail(bed)},
        }, status=status.HTTP_201_CREATED)

    q = BedSearchSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    params = dict(q.validated_data)
    for flag in ('isOccupied', 'isActive'):
        if flag in params:
            params[flag] = params[flag] == 'true'
    return Response({'success': True, 'data': svc.list_beds(**params)})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewBeds) | CanManageWards])
def bed_detail(request, bed_id: int):
    if request.method == 'PUT':
        s = BedUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        bed = svc.update_bed(request.user, bed_id, s.validated_data)
        return Response({
            'success': True,
            'message': 'Bed updated successfully',
            'data': {'bed': svc.format_bed_detail(bed)},
        })

    if request.method == 'DELETE':
        svc.delete_bed(request.user, bed_id)
        return Response({'success': True, 'message': 'Bed deleted successfully'})

    bed = svc.get_bed_or_404(bed_id)
    return Response({'success': True, 'data': {'bed': svc.format_bed_detail(bed)}})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewWards])
def bed_stats(request):
    return Response({'success': True, 'data': svc.bed_stats()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewBeds])
def available_beds(request):
    q = AvailableBedsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'success': True, 'data': {'beds': svc.available_beds(**q.validated_data)}})
