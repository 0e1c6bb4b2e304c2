from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ipd.permissions import CanManageWards, CanViewWards, ReadOnly
from ipd.serializers.ward import (
    WardCreateSerializer,
    WardDeleteQuerySerializer,
    WardSearchSerializer,
    WardUpdateSerializer,
)
from ipd.services import wards as svc


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewWards) | CanManageWards])
def wards(request):
    if request.method == 'POST':
        s = WardCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        ward = svc.create_ward(request.user, **s.validated_data)
        return Response({
            'success': True,
            'message': f'Ward created successfully with {ward.bed_count} beds',
            'data': {'ward': svc.format_ward(ward, with_beds=True)},
        }, status=status.HTTP_201_CREATED)

    q = WardSearchSerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    params = dict(q.validated_data)
    if 'isActive' in params:
        params['isActive'] = params['isActive'] == 'true'
    return Response({'success': True, 'data': svc.list_wards(**params)})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, (ReadOnly & CanViewWards) | CanManageWards])
def ward_detail(request, ward_id: int):
    if request.method == 'PUT':
        s = WardUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        ward = svc.update_ward(request.user, ward_id, s.validated_data)
        return Response({
            'success': True,
            'message': 'Ward updated successfully',
            'data': {'ward': svc.format_ward(ward, with_beds=True)},
        })

    if request.method == 'DELETE':
        q = WardDeleteQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        svc.delete_ward(request.user, ward_id, force=q.validated_data['force'])
        return Response({'success': True, 'message': 'Ward deleted successfully'})

    ward = svc.get_ward_or_404(ward_id)
    return Response({'success': True, 'data': {'ward': svc.format_ward(ward, with_beds=True)}})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewWards])
def ward_stats(request):
    return Response({'success': True, 'data': svc.ward_stats()})
