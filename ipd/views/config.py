"""
Hospital configuration endpoints.

Any signed-in user may read the configuration; only administrators
may change it.  The ward tariffs used for inpatient charges live in
``modulesEnabled.ipdSettings.wardTariffs``.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ipd.permissions import IsAdminRole, ReadOnly
from ipd.serializers.config import HospitalConfigSerializer
from ipd.services.config import get_hospital_config, update_hospital_config


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, ReadOnly | IsAdminRole])
def hospital_config(request):
    if request.method == 'PUT':
        s = HospitalConfigSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        config = update_hospital_config(request.user, s.validated_data)
        return Response({'success': True, 'message': 'Hospital configuration saved', 'data': {'config': config}})
    return Response({'success': True, 'data': {'config': get_hospital_config()}})
