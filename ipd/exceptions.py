"""
API error types and the project-wide DRF exception handler.

Every error leaves the API in the ``{"success": false, "message": ...}``
envelope.  Unexpected exceptions are logged with their traceback and
answered with a generic message; internal details are never returned.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Request conflicts with the current state of the resource.'
    default_code = 'conflict'

    def __init__(self, detail=None, code=None, data=None):
        super().__init__(detail, code)
        self.data = data


class BadRequest(APIException):
    """A business-rule violation reported with a plain message (HTTP 400)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'

    def __init__(self, detail=None, code=None, data=None):
        super().__init__(detail, code)
        self.data = data


def _message_from(data) -> str:
    if isinstance(data, dict):
        detail = data.get('detail')
        if detail is not None:
            return str(detail)
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.exception('Unhandled error on %s %s', getattr(request, 'method', '?'), getattr(request, 'path', '?'))
        return Response(
            {'success': False, 'message': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        body = {'success': False, 'message': 'Validation error', 'errors': resp.data}
    else:
        body = {'success': False, 'message': _message_from(resp.data)}
        extra = getattr(exc, 'data', None)
        if extra is not None:
            body['data'] = extra
    if resp.status_code >= 500:
        logger.error('API error %s: %s', resp.status_code, body['message'])
    return Response(body, status=resp.status_code, headers={
        k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After', 'Allow')
    })
