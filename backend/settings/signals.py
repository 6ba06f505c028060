"""
Signal handlers for the settings app.
Automatically refreshes the configuration cache when GlobalSettings are modified.
"""

from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import GlobalSettings
import logging

logger = logging.getLogger(__name__)


@receiver(post_save, sender=GlobalSettings)
def reload_app_settings(sender, instance, **kwargs):
    """
    Reload the AppSettings cache so tax and fee changes apply to the next
    order without a restart.
    """
    from .config import app_settings

    app_settings.reload()
    logger.info(f"Configuration cache updated: {app_settings}")
