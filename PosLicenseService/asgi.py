"""
ASGI config for PosLicenseService.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "PosLicenseService.settings.prod")

application = get_asgi_application()
