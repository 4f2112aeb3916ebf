"""
Celery tasks for classifieds.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def expire_classifieds():
    """Expire approved classifieds past their expiry date. Runs hourly."""
    from .services import ClassifiedModerationService

    expired = ClassifiedModerationService().expire_classifieds()
    return {'expired': expired}
