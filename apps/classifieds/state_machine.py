"""
Classified moderation state machine.

States:
    pending → approved → expired
        ↓        ↓
    rejected ←───┘

    rejected → pending (resubmitted)
    expired → pending (renewed)
"""

from datetime import timedelta
from enum import Enum

from django.conf import settings
from django.utils import timezone

from apps.core.state_machine import StateMachine, TransitionContext


class ClassifiedState(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    EXPIRED = 'expired'


VALID_TRANSITIONS = {
    ClassifiedState.PENDING: {ClassifiedState.APPROVED, ClassifiedState.REJECTED},
    ClassifiedState.APPROVED: {ClassifiedState.EXPIRED, ClassifiedState.REJECTED},
    ClassifiedState.REJECTED: {ClassifiedState.PENDING},
    ClassifiedState.EXPIRED: {ClassifiedState.PENDING},
}


class ClassifiedStateMachine(StateMachine):
    """State machine over Classified.status."""

    name = 'classified'
    states = ClassifiedState
    transitions = VALID_TRANSITIONS

    def apply_state_fields(self, context: TransitionContext):
        classified = self.instance
        now = timezone.now()
        target = context.to_state

        if target in (ClassifiedState.APPROVED, ClassifiedState.REJECTED):
            classified.moderated_at = now
            if context.actor is not None and getattr(context.actor, 'pk', None):
                classified.moderated_by = context.actor

        if target == ClassifiedState.APPROVED:
            classified.rejection_reason = ''
            if classified.expires_at is None or classified.expires_at <= now:
                ttl = getattr(settings, 'CLASSIFIED_TTL_DAYS', 30)
                classified.expires_at = now + timedelta(days=ttl)
        elif target == ClassifiedState.REJECTED:
            classified.rejection_reason = context.reason or ''
