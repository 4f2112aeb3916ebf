"""
Business review moderation state machine.

States:
    pending → approved ⇄ rejected
        ↓                  ↑
        └──────────────────┘
"""

from enum import Enum

from django.utils import timezone

from apps.core.state_machine import StateMachine, TransitionContext


class ReviewState(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


VALID_TRANSITIONS = {
    ReviewState.PENDING: {ReviewState.APPROVED, ReviewState.REJECTED},
    ReviewState.APPROVED: {ReviewState.REJECTED},
    ReviewState.REJECTED: {ReviewState.APPROVED},
}


class ReviewStateMachine(StateMachine):
    """State machine over Review.status."""

    name = 'review'
    states = ReviewState
    transitions = VALID_TRANSITIONS

    def apply_state_fields(self, context: TransitionContext):
        review = self.instance
        review.moderated_at = timezone.now()
        if context.actor is not None and getattr(context.actor, 'pk', None):
            review.moderated_by = context.actor
        # A moderator decision settles any open report
        review.reported = False
