"""
WSGI config for the marketplace backend.

The application is served over ASGI so WebSockets work; WSGI is kept for
deployments that only need the REST API (real-time delivery then requires
a separate ASGI worker).

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
