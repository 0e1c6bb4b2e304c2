import logging
import time

logger = logging.getLogger('ipd.requests')


class RequestLogMiddleware:
    """Log one line per API request with status and duration."""
    SKIP_PREFIXES = ('/static/', '/metrics', '/healthz')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if path.startswith(self.SKIP_PREFIXES):
            return self.get_response(request)

        start = time.monotonic()
        response = self.get_response(request)
        duration_ms = int((time.monotonic() - start) * 1000)

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, '%s %s -> %s (%dms)', request.method, path, response.status_code, duration_ms)
        return response
