"""
WSGI config for the helpdesk project.

Serves the REST API and admin only. Socket.IO needs the ASGI entrypoint in
``config/asgi.py``; ticket mutations made over HTTP still broadcast through
the in-process hub, which only reaches sockets connected to that process.

"""

import os

from django.core.wsgi import get_wsgi_application

# If DJANGO_SETTINGS_MODULE is unset, select a sensible default based on BUILD_ENV
if "DJANGO_SETTINGS_MODULE" not in os.environ:
    build_env = os.environ.get("BUILD_ENV", "production").lower()
    default_settings = (
        "config.settings.local"
        if build_env == "local"
        else "config.settings.production"
    )
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", default_settings)

application = get_wsgi_application()
