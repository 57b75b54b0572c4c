"""
Tube App Configuration
"""
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class TubeConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tube'
    verbose_name = 'VidTube'

    def ready(self):
        from django.conf import settings

        if not settings.GCS_BUCKET:
            logger.warning("GCS_BUCKET is not set; media uploads will fail")
