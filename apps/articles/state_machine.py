"""
Editorial Workflow State Machine.

States:
    draft → pending_review → approved → published → archived
                 ↓    ↓
        needs_changes  rejected

    needs_changes → pending_review | draft
    rejected → draft
    approved → draft (pulled back before publication)
    archived → draft

Usage:
    machine = EditorialStateMachine(article)
    machine.transition_to('pending_review', actor=request.user)
"""

import logging
from enum import Enum
from typing import Dict, Set

from django.utils import timezone

from apps.core.state_machine import StateMachine, TransitionContext

logger = logging.getLogger(__name__)


class EditorialState(Enum):
    """Valid states for an article in the newsroom."""
    DRAFT = 'draft'
    PENDING_REVIEW = 'pending_review'
    APPROVED = 'approved'
    NEEDS_CHANGES = 'needs_changes'
    REJECTED = 'rejected'
    PUBLISHED = 'published'
    ARCHIVED = 'archived'

    @property
    def is_editable(self) -> bool:
        """Authors may change content in these states."""
        return self in (
            EditorialState.DRAFT,
            EditorialState.NEEDS_CHANGES,
            EditorialState.REJECTED,
        )


VALID_TRANSITIONS: Dict[EditorialState, Set[EditorialState]] = {
    EditorialState.DRAFT: {EditorialState.PENDING_REVIEW},
    EditorialState.PENDING_REVIEW: {
        EditorialState.APPROVED,
        EditorialState.REJECTED,
        EditorialState.NEEDS_CHANGES,
        EditorialState.DRAFT,
    },
    EditorialState.NEEDS_CHANGES: {EditorialState.PENDING_REVIEW, EditorialState.DRAFT},
    EditorialState.REJECTED: {EditorialState.DRAFT},
    EditorialState.APPROVED: {EditorialState.PUBLISHED, EditorialState.DRAFT},
    EditorialState.PUBLISHED: {EditorialState.ARCHIVED},
    EditorialState.ARCHIVED: {EditorialState.DRAFT},
}


class EditorialStateMachine(StateMachine):
    """State machine over Article.status."""

    name = 'article'
    states = EditorialState
    transitions = VALID_TRANSITIONS

    def apply_state_fields(self, context: TransitionContext):
        article = self.instance
        now = timezone.now()
        target = context.to_state

        if target == EditorialState.PENDING_REVIEW:
            article.submitted_at = now
        elif target == EditorialState.APPROVED:
            article.approved_at = now
            if context.actor is not None and getattr(context.actor, 'pk', None):
                article.approved_by = context.actor
        elif target == EditorialState.PUBLISHED:
            article.published = True
            if article.published_at is None:
                article.published_at = now

        if context.from_state == EditorialState.PUBLISHED:
            article.published = False
        if target == EditorialState.DRAFT:
            article.approved_at = None
            article.approved_by = None
