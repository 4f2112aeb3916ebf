"""
Business review services: submission, reader feedback, moderation and
rating aggregation.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F
from django.utils import timezone

from apps.core.audit import record_audit
from apps.core.dominican import ERROR_MESSAGES
from apps.core.exceptions import ConflictError, DuplicateError, NotFoundError, ValidationError
from apps.core.metrics import increment_moderation_decision
from .models import Business, Review
from .state_machine import ReviewState, ReviewStateMachine

logger = logging.getLogger(__name__)


def get_business(slug) -> Business:
    try:
        return Business.objects.get(slug=slug, is_active=True)
    except Business.DoesNotExist:
        raise NotFoundError(ERROR_MESSAGES['business_not_found'])


def get_review(review_id, **filters) -> Review:
    try:
        return Review.objects.select_related('business').get(pk=review_id, **filters)
    except Review.DoesNotExist:
        raise NotFoundError(ERROR_MESSAGES['review_not_found'])


def recompute_business_rating(business: Business) -> Business:
    """Set ``rating`` and ``review_count`` from the approved reviews."""
    stats = business.reviews.filter(status=ReviewState.APPROVED.value).aggregate(
        average=Avg('rating'),
        count=Count('id'),
    )
    average = stats['average']
    business.rating = (
        Decimal(str(average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if average is not None else Decimal('0.00')
    )
    business.review_count = stats['count'] or 0
    business.save(update_fields=['rating', 'review_count', 'updated_at'])
    return business


class ReviewService:
    """Reviews as submitted and rated by readers."""

    def submit_review(self, business_slug, user, rating, title: str = '', comment: str = '') -> Review:
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise ValidationError(ERROR_MESSAGES['invalid_rating'], field='rating')
        if not 1 <= rating <= 5:
            raise ValidationError(ERROR_MESSAGES['invalid_rating'], field='rating')

        business = get_business(business_slug)

        if Review.objects.filter(business=business, user=user).exists():
            raise DuplicateError(ERROR_MESSAGES['duplicate_review'])

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    business=business,
                    user=user,
                    user_name=user.get_full_name() or user.username,
                    user_email=user.email or '',
                    rating=rating,
                    title=title or '',
                    comment=comment or '',
                )
        except IntegrityError:
            # Concurrent submission won the unique constraint
            raise DuplicateError(ERROR_MESSAGES['duplicate_review'])

        logger.info(f"Review {review.id} submitted for business {business.slug} by {user.username}")
        return review

    def get_approved_reviews(self, business_slug):
        business = get_business(business_slug)
        return business.reviews.filter(status=ReviewState.APPROVED.value).order_by('-created_at')

    def mark_helpful(self, review_id) -> int:
        review = get_review(review_id, status=ReviewState.APPROVED.value)
        Review.objects.filter(pk=review.pk).update(helpful_count=F('helpful_count') + 1)
        review.refresh_from_db(fields=['helpful_count'])
        return review.helpful_count

    def report(self, review_id, user=None, reason: str = '') -> Review:
        """Flag a public review for moderation."""
        with transaction.atomic():
            review = Review.objects.select_for_update().filter(
                pk=review_id, status=ReviewState.APPROVED.value
            ).first()
            if review is None:
                raise NotFoundError(ERROR_MESSAGES['review_not_found'])

            reports = review.metadata.setdefault('reports', [])
            reports.append({
                'user_id': str(user.pk) if getattr(user, 'is_authenticated', False) else None,
                'reason': (reason or '')[:500],
            })
            review.reported = True
            review.save(update_fields=['reported', 'metadata', 'updated_at'])

        logger.info(f"Review {review.id} reported")
        return review


class ReviewModerationService:
    """Moderator decisions on reviews; keeps business ratings in sync."""

    def get_pending(self, limit: int = 50, reported: bool = False):
        limit = max(1, min(int(limit), 100))
        queryset = Review.objects.select_related('business', 'user')
        if reported:
            queryset = queryset.filter(reported=True)
        else:
            queryset = queryset.filter(status=ReviewState.PENDING.value)
        return list(queryset.order_by('created_at')[:limit])

    def _decide(self, review_id, moderator, target: ReviewState, reason: str = '') -> Review:
        with transaction.atomic():
            review = get_review(review_id)
            ReviewStateMachine(review).transition_to(target, actor=moderator, reason=reason or '')
            business = Business.objects.select_for_update().get(pk=review.business_id)
            recompute_business_rating(business)
            review.business = business
            record_audit(
                moderator,
                'approve' if target == ReviewState.APPROVED else 'reject',
                'review',
                review.id,
                changes={
                    'status': review.status,
                    'business_rating': str(business.rating),
                    'review_count': business.review_count,
                },
                details=reason or '',
            )

        increment_moderation_decision('review', target.value)
        logger.info(f"Review {review.id} {target.value} by {moderator.username}")
        return review

    def approve(self, review_id, moderator) -> Review:
        return self._decide(review_id, moderator, ReviewState.APPROVED)

    def reject(self, review_id, moderator, reason: str = '') -> Review:
        return self._decide(review_id, moderator, ReviewState.REJECTED, reason)

    def keep(self, review_id, moderator, reason: str = '') -> Review:
        """Dismiss the open reports on a review and leave it as it is."""
        with transaction.atomic():
            try:
                review = Review.objects.select_for_update().get(pk=review_id)
            except Review.DoesNotExist:
                raise NotFoundError(ERROR_MESSAGES['review_not_found'])

            if not review.reported:
                raise ConflictError("La reseña no tiene reportes pendientes")

            dismissed = len(review.metadata.get('reports', []))
            review.reported = False
            review.moderated_at = timezone.now()
            review.moderated_by = moderator
            review.save(update_fields=['reported', 'moderated_at', 'moderated_by', 'updated_at'])
            record_audit(
                moderator,
                'moderate',
                'review',
                review.id,
                changes={'reported': False, 'dismissed_reports': dismissed, 'status': review.status},
                details=reason or '',
            )

        increment_moderation_decision('review', 'kept')
        logger.info(f"Review {review.id} kept by {moderator.username}; reports dismissed")
        return review
