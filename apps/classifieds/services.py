"""
Classified moderation and expiry.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.core.audit import record_audit
from apps.core.dominican import ERROR_MESSAGES
from apps.core.exceptions import InvalidTransitionError, NotFoundError
from apps.core.metrics import increment_moderation_decision
from .models import Classified
from .state_machine import ClassifiedState, ClassifiedStateMachine

logger = logging.getLogger(__name__)


def get_classified(classified_id) -> Classified:
    try:
        return Classified.objects.select_related('category', 'province', 'user').get(pk=classified_id)
    except Classified.DoesNotExist:
        raise NotFoundError(ERROR_MESSAGES['classified_not_found'])


class ClassifiedModerationService:
    """Moderator decisions on user-submitted classifieds."""

    def get_pending(self, limit: int = 50):
        limit = max(1, min(int(limit), 100))
        return list(
            Classified.objects.filter(status=ClassifiedState.PENDING.value)
            .select_related('category', 'province', 'user')
            .order_by('created_at')[:limit]
        )

    def approve(self, classified_id, moderator) -> Classified:
        with transaction.atomic():
            classified = get_classified(classified_id)
            ClassifiedStateMachine(classified).transition_to(
                ClassifiedState.APPROVED, actor=moderator
            )
            record_audit(
                moderator, 'approve', 'classified', classified.id,
                changes={'status': classified.status, 'expires_at': classified.expires_at.isoformat()},
            )

        increment_moderation_decision('classified', 'approved')
        logger.info(f"Classified {classified.id} approved by {moderator.username}")
        return classified

    def reject(self, classified_id, moderator, reason: str = '') -> Classified:
        with transaction.atomic():
            classified = get_classified(classified_id)
            ClassifiedStateMachine(classified).transition_to(
                ClassifiedState.REJECTED, actor=moderator, reason=reason or ''
            )
            record_audit(
                moderator, 'reject', 'classified', classified.id,
                changes={'status': classified.status},
                details=reason or '',
            )

        increment_moderation_decision('classified', 'rejected')
        logger.info(f"Classified {classified.id} rejected by {moderator.username}")
        return classified

    def expire_classifieds(self, now=None) -> int:
        """Move approved classifieds past their ``expires_at`` to expired."""
        now = now or timezone.now()
        due_ids = list(
            Classified.objects.filter(
                status=ClassifiedState.APPROVED.value,
                expires_at__isnull=False,
                expires_at__lte=now,
            ).values_list('pk', flat=True)
        )

        expired = 0
        for classified_id in due_ids:
            try:
                with transaction.atomic():
                    classified = Classified.objects.get(pk=classified_id)
                    ClassifiedStateMachine(classified).transition_to(
                        ClassifiedState.EXPIRED, reason='expired'
                    )
                    record_audit(None, 'expire', 'classified', classified.id)
                expired += 1
                increment_moderation_decision('classified', 'expired')
            except (InvalidTransitionError, Classified.DoesNotExist) as e:
                logger.warning(f"Expiry skipped for classified {classified_id}: {e}")

        if expired:
            logger.info(f"Expired {expired} classified(s)")
        return expired
