"""
WSGI config for PosLicenseService.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "PosLicenseService.settings.prod")

application = get_wsgi_application()
