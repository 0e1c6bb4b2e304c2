"""
ASGI config for the hms project.

The API is plain HTTP; the statistics endpoint fans its reads out with
asgiref, which works the same under WSGI and ASGI servers.
"""
import os

from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hms.settings")

application = get_asgi_application()
