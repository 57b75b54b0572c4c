"""
WSGI config for vidtube project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vidtube.settings')
application = get_wsgi_application()
