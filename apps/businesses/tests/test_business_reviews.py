"""
Tests for the business directory and its reviews: submission, reader
feedback, moderation and rating aggregation.
"""

import uuid
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db.models import F
from rest_framework import status
from rest_framework.test import APIClient

from apps.businesses.models import Business, BusinessCategory, Review
from apps.businesses.services import (
    ReviewModerationService,
    ReviewService,
    recompute_business_rating,
)
from apps.businesses.state_machine import ReviewStateMachine
from apps.core.exceptions import (
    ConflictError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from apps.core.models import AuditLog

User = get_user_model()


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def category(db):
    return BusinessCategory.objects.create(name='Restaurantes')


@pytest.fixture
def business(category):
    return Business.objects.create(name='Comedor Doña Mercedes', category=category)


@pytest.fixture
def reader(db):
    return User.objects.create_user(
        username='lector', email='lector@example.com', password='testpass123',
        first_name='Rosa', last_name='Peña',
    )


@pytest.fixture
def moderator(db):
    user = User.objects.create_user(username='moderador', password='testpass123')
    user.profile.role = 'moderator'
    user.profile.save()
    return user


def make_review(business, rating, status='approved', **fields):
    user = User.objects.create_user(username=f'u{uuid.uuid4().hex[:8]}', password='x')
    return Review.objects.create(
        business=business,
        user=user,
        user_name=user.username,
        rating=rating,
        status=status,
        **fields,
    )


def authed(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ============================================================================
# Submission
# ============================================================================

@pytest.mark.django_db
class TestSubmitReview:

    def test_creates_pending_review(self, business, reader):
        review = ReviewService().submit_review(business.slug, reader, 5, 'Excelente', 'El mejor sancocho')

        assert review.status == 'pending'
        assert review.user_name == 'Rosa Peña'
        assert review.user_email == 'lector@example.com'
        business.refresh_from_db()
        assert business.review_count == 0

    @pytest.mark.parametrize('rating', [0, 6, 'cinco', None])
    def test_invalid_rating(self, business, reader, rating):
        with pytest.raises(ValidationError) as exc_info:
            ReviewService().submit_review(business.slug, reader, rating)

        assert exc_info.value.field == 'rating'
        assert exc_info.value.message == 'La calificación debe estar entre 1 y 5'

    def test_one_review_per_user(self, business, reader):
        service = ReviewService()
        service.submit_review(business.slug, reader, 4)

        with pytest.raises(DuplicateError) as exc_info:
            service.submit_review(business.slug, reader, 2)
        assert exc_info.value.status_code == 409

    def test_database_enforces_uniqueness(self, business, reader):
        Review.objects.create(business=business, user=reader, user_name='a', rating=3)

        with pytest.raises(IntegrityError):
            Review.objects.create(business=business, user=reader, user_name='b', rating=4)

    def test_anonymous_rows_not_unique(self, business):
        Review.objects.create(business=business, user=None, user_name='Anónimo', rating=3)
        Review.objects.create(business=business, user=None, user_name='Anónimo', rating=4)

        assert business.reviews.count() == 2

    def test_rating_check_constraint(self, business):
        with pytest.raises(IntegrityError):
            Review.objects.create(business=business, user_name='x', rating=9)

    def test_inactive_business(self, business, reader):
        Business.objects.filter(pk=business.pk).update(is_active=False)

        with pytest.raises(NotFoundError):
            ReviewService().submit_review(business.slug, reader, 5)


# ============================================================================
# Rating aggregation & moderation
# ============================================================================

@pytest.mark.django_db
class TestModeration:

    def test_recompute_rounds_half_up(self, business):
        make_review(business, 5)
        make_review(business, 4)
        make_review(business, 4)
        make_review(business, 1, status='pending')

        recompute_business_rating(business)

        assert business.rating == Decimal('4.33')
        assert business.review_count == 3

    def test_recompute_without_reviews(self, business):
        Business.objects.filter(pk=business.pk).update(rating=Decimal('4.00'), review_count=2)
        business.refresh_from_db()

        recompute_business_rating(business)

        assert business.rating == Decimal('0.00')
        assert business.review_count == 0

    def test_approve_updates_rating(self, business, moderator):
        make_review(business, 5)
        pending = make_review(business, 2, status='pending')

        review = ReviewModerationService().approve(pending.id, moderator)

        assert review.status == 'approved'
        assert review.moderated_by == moderator
        business.refresh_from_db()
        assert business.rating == Decimal('3.50')
        assert business.review_count == 2
        entry = AuditLog.objects.get(action='approve', entity_type='review')
        assert entry.changes['business_rating'] == '3.50'

    def test_reject_published_review_lowers_count(self, business, moderator):
        make_review(business, 5)
        drop = make_review(business, 1)
        recompute_business_rating(business)

        ReviewModerationService().reject(drop.id, moderator, 'Lenguaje ofensivo')

        business.refresh_from_db()
        assert business.rating == Decimal('5.00')
        assert business.review_count == 1

    def test_rejecting_twice_conflicts(self, business, moderator):
        review = make_review(business, 3, status='pending')
        service = ReviewModerationService()
        service.reject(review.id, moderator)

        with pytest.raises(InvalidTransitionError):
            service.reject(review.id, moderator)

    def test_decision_clears_report(self, business, moderator):
        review = make_review(business, 1, reported=True)

        ReviewModerationService().reject(review.id, moderator, 'Spam')

        review.refresh_from_db()
        assert review.reported is False
        assert review.status == 'rejected'

    def test_moderation_keeps_concurrent_votes(self, business, moderator):
        review = make_review(business, 4, status='pending')
        stale = Review.objects.get(pk=review.pk)
        Review.objects.filter(pk=review.pk).update(helpful_count=F('helpful_count') + 7)

        ReviewStateMachine(stale).transition_to('approved', actor=moderator)

        review.refresh_from_db()
        assert review.helpful_count == 7
        assert review.status == 'approved'
        assert review.moderated_by == moderator

    def test_keep_dismisses_report(self, business, moderator):
        make_review(business, 5)
        review = make_review(
            business, 3, reported=True,
            metadata={'reports': [{'user_id': None, 'reason': 'Falso'}]},
        )
        recompute_business_rating(business)

        kept = ReviewModerationService().keep(review.id, moderator, 'Opinión legítima')

        assert kept.reported is False
        assert kept.status == 'approved'
        assert kept.moderated_by == moderator
        business.refresh_from_db()
        assert business.review_count == 2
        entry = AuditLog.objects.get(action='moderate', entity_type='review')
        assert entry.changes['dismissed_reports'] == 1
        assert entry.details == 'Opinión legítima'
        assert ReviewModerationService().get_pending(reported=True) == []

    def test_keep_without_reports_conflicts(self, business, moderator):
        review = make_review(business, 4)

        with pytest.raises(ConflictError):
            ReviewModerationService().keep(review.id, moderator)

    def test_keep_unknown_review(self, moderator):
        with pytest.raises(NotFoundError):
            ReviewModerationService().keep(uuid.uuid4(), moderator)

    def test_pending_queue(self, business):
        make_review(business, 4)
        pending = make_review(business, 3, status='pending')
        reported = make_review(business, 1, reported=True)
        service = ReviewModerationService()

        assert [r.id for r in service.get_pending()] == [pending.id]
        assert [r.id for r in service.get_pending(reported=True)] == [reported.id]


# ============================================================================
# Reader feedback
# ============================================================================

@pytest.mark.django_db
class TestReaderFeedback:

    def test_mark_helpful(self, business):
        review = make_review(business, 5)
        service = ReviewService()

        service.mark_helpful(review.id)
        assert service.mark_helpful(review.id) == 2

    def test_helpful_on_pending_is_404(self, business):
        review = make_review(business, 5, status='pending')

        with pytest.raises(NotFoundError):
            ReviewService().mark_helpful(review.id)

    def test_report_appends(self, business, reader):
        review = make_review(business, 1)
        service = ReviewService()

        service.report(review.id, reader, 'Falso')
        result = service.report(review.id, None, 'Repetido')

        assert result.reported is True
        assert result.metadata['reports'] == [
            {'user_id': str(reader.pk), 'reason': 'Falso'},
            {'user_id': None, 'reason': 'Repetido'},
        ]


# ============================================================================
# API
# ============================================================================

@pytest.mark.django_db
class TestBusinessAPI:

    def test_directory(self, api_client, business, category):
        Business.objects.create(name='Cerrado', category=category, is_active=False)

        response = api_client.get('/api/businesses/')

        assert response.status_code == status.HTTP_200_OK
        assert [b['name'] for b in response.data['results']] == ['Comedor Doña Mercedes']

    def test_min_rating_filter(self, api_client, business, category):
        Business.objects.filter(pk=business.pk).update(rating=Decimal('4.50'))
        Business.objects.create(name='Regular', category=category, rating=Decimal('2.00'))

        response = api_client.get('/api/businesses/', {'min_rating': '4'})
        assert [b['name'] for b in response.data['results']] == ['Comedor Doña Mercedes']

        bad = api_client.get('/api/businesses/', {'min_rating': 'alto'})
        assert bad.status_code == status.HTTP_400_BAD_REQUEST

    def test_public_reviews_hide_email_and_pending(self, api_client, business):
        make_review(business, 5, user_email='oculto@example.com')
        make_review(business, 2, status='pending')

        response = api_client.get(f'/api/businesses/{business.slug}/reviews/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert 'user_email' not in response.data['results'][0]

    def test_submit_requires_login(self, api_client, business):
        response = api_client.post(f'/api/businesses/{business.slug}/reviews/', {'rating': 5}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_submit(self, business, reader):
        response = authed(reader).post(
            f'/api/businesses/{business.slug}/reviews/',
            {'rating': 4, 'title': 'Rico', 'comment': 'Buen servicio'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Reseña enviada. Será publicada después de ser revisada.'
        assert Review.objects.get(user=reader).status == 'pending'

    def test_submit_duplicate(self, business, reader):
        client = authed(reader)
        client.post(f'/api/businesses/{business.slug}/reviews/', {'rating': 4}, format='json')
        response = client.post(f'/api/businesses/{business.slug}/reviews/', {'rating': 5}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['message'] == 'Ya has publicado una reseña para este negocio'

    def test_submit_bad_rating(self, business, reader):
        response = authed(reader).post(
            f'/api/businesses/{business.slug}/reviews/', {'rating': 7}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['details']['rating'] == ['La calificación debe estar entre 1 y 5']

    def test_helpful_and_report_endpoints(self, api_client, business):
        review = make_review(business, 4)

        helpful = api_client.post(f'/api/businesses/reviews/{review.id}/helpful/')
        assert helpful.data['data'] == {'helpful_count': 1}

        report = api_client.post(
            f'/api/businesses/reviews/{review.id}/report/', {'reason': 'Spam'}, format='json'
        )
        assert report.status_code == status.HTTP_200_OK
        review.refresh_from_db()
        assert review.reported is True

    def test_moderation_endpoints(self, business, moderator, reader):
        pending = make_review(business, 5, status='pending')
        other = make_review(business, 1, status='pending')
        client = authed(moderator)

        assert authed(reader).get('/api/admin/reviews/pending/').status_code == 403

        queue = client.get('/api/admin/reviews/pending/')
        assert len(queue.data['data']) == 2
        assert 'user_email' in queue.data['data'][0]

        approved = client.post(f'/api/admin/reviews/{pending.id}/approve/')
        assert approved.status_code == status.HTTP_200_OK
        assert approved.data['data']['status'] == 'approved'

        rejected = client.post(f'/api/admin/reviews/{other.id}/reject/', {'reason': 'Spam'}, format='json')
        assert rejected.data['data']['status'] == 'rejected'

        business.refresh_from_db()
        assert business.rating == Decimal('5.00')
        assert business.review_count == 1

    def test_reported_queue(self, business, moderator):
        make_review(business, 1, reported=True)

        response = authed(moderator).get('/api/admin/reviews/pending/', {'reported': 'true'})

        assert len(response.data['data']) == 1
        assert response.data['data'][0]['reported'] is True

    def test_keep_endpoint(self, business, moderator, reader):
        review = make_review(business, 4, reported=True)

        assert authed(reader).post(f'/api/admin/reviews/{review.id}/keep/').status_code == 403

        response = authed(moderator).post(
            f'/api/admin/reviews/{review.id}/keep/', {'reason': 'Sin fundamento'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['reported'] is False
        assert response.data['data']['status'] == 'approved'

        again = authed(moderator).post(f'/api/admin/reviews/{review.id}/keep/')
        assert again.status_code == status.HTTP_409_CONFLICT
