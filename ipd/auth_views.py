"""
Authentication views.

Username/password login issuing a JWT pair, and token refresh.  Every
other endpoint expects ``Authorization: Bearer <access>``.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from ipd.serializers.auth import LoginSerializer
from ipd.services.audit import log_action

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        log_action(user=None, action='LOGIN_FAILED', table_name='users',
                   new_value={'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        logger.warning('failed login for %s', username)
        return Response({'success': False, 'message': 'Invalid username or password'},
                        status=status.HTTP_401_UNAUTHORIZED)

    log_action(user=user, action='LOGIN', table_name='users', record_id=user.id,
               new_value={'ip': request.META.get('REMOTE_ADDR')})
    refresh = RefreshToken.for_user(user)
    return Response({
        'success': True,
        'data': {
            'accessToken': str(refresh.access_token),
            'refreshToken': str(refresh),
            'user': {
                'id': user.id,
                'username': user.username,
                'fullName': user.full_name or user.username,
                'role': user.role,
            },
        },
    })


class RefreshView(TokenRefreshView):
    """Exchange a refresh token for a new access token."""

    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        return Response({'success': True, 'data': {
            'accessToken': resp.data['access'],
            'refreshToken': resp.data.get('refresh'),
        }}, status=resp.status_code)
