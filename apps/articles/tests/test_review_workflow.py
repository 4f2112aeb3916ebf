"""
Tests for the editorial review workflow: submission, editor decisions,
publication, scheduled publishing and notifications.
"""

import pytest
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.utils import timezone

from apps.articles.models import Article, ArticleReview
from apps.articles.services import ArticleReviewService
from apps.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from apps.core.models import AuditLog

User = get_user_model()


# ============================================================================
# Fixtures
# ============================================================================

def make_user(username, role='user', **extra):
    user = User.objects.create_user(
        username=username,
        email=f'{username}@safrareport.com',
        password='testpass123',
        **extra,
    )
    user.profile.role = role
    user.profile.save()
    return user


@pytest.fixture
def service():
    return ArticleReviewService()


@pytest.fixture
def author(db):
    return make_user('autora', role='author')


@pytest.fixture
def editor(db):
    return make_user('editor', role='editor')


@pytest.fixture
def article(author):
    return Article.objects.create(
        title='Lluvias afectan el Cibao',
        excerpt='Resumen',
        content='Contenido completo',
        author=author,
    )


@pytest.fixture
def pending_article(service, article, author):
    service.submit_for_review(article.id, author)
    article.refresh_from_db()
    return article


@pytest.fixture
def approved_article(service, pending_article, editor):
    service.review_article(pending_article.id, editor, 'approve')
    pending_article.refresh_from_db()
    return pending_article


# ============================================================================
# Submission
# ============================================================================

@pytest.mark.django_db
class TestSubmitForReview:

    def test_author_submits_draft(self, service, article, author):
        result = service.submit_for_review(article.id, author)

        assert result.status == 'pending_review'
        assert result.submitted_at is not None
        assert AuditLog.objects.filter(action='submit', entity_id=str(article.id), actor=author).exists()

    def test_editor_may_submit_anyones_article(self, service, article, editor):
        result = service.submit_for_review(article.id, editor)
        assert result.status == 'pending_review'

    def test_other_author_forbidden(self, service, article):
        other = make_user('otro', role='author')

        with pytest.raises(PermissionDeniedError):
            service.submit_for_review(article.id, other)

        article.refresh_from_db()
        assert article.status == 'draft'

    def test_unknown_article(self, service, author):
        import uuid

        with pytest.raises(NotFoundError):
            service.submit_for_review(uuid.uuid4(), author)

    def test_double_submit_conflicts(self, service, pending_article, author):
        with pytest.raises(InvalidTransitionError):
            service.submit_for_review(pending_article.id, author)

    def test_resubmit_after_changes(self, service, pending_article, author, editor):
        service.review_article(pending_article.id, editor, 'needs_changes', 'Falta fuente')
        result = service.submit_for_review(pending_article.id, author)

        assert result.status == 'pending_review'

    def test_rejected_must_return_to_draft(self, service, pending_article, author, editor):
        service.review_article(pending_article.id, editor, 'reject')

        with pytest.raises(InvalidTransitionError):
            service.submit_for_review(pending_article.id, author)


# ============================================================================
# Review decisions
# ============================================================================

@pytest.mark.django_db
class TestReviewArticle:

    @pytest.mark.parametrize('decision,status,audit_action', [
        ('approve', 'approved', 'approve'),
        ('reject', 'rejected', 'reject'),
        ('needs_changes', 'needs_changes', 'request_changes'),
    ])
    def test_decisions(self, service, pending_article, editor, decision, status, audit_action):
        review = service.review_article(pending_article.id, editor, decision, 'Comentario')

        pending_article.refresh_from_db()
        assert pending_article.status == status
        assert review.decision == decision
        assert review.reviewer == editor
        assert review.comments == 'Comentario'
        assert AuditLog.objects.filter(action=audit_action, entity_id=str(pending_article.id)).exists()

    def test_approve_stamps_approver(self, service, pending_article, editor):
        service.review_article(pending_article.id, editor, 'approve')

        pending_article.refresh_from_db()
        assert pending_article.approved_by == editor
        assert pending_article.approved_at is not None

    def test_invalid_decision(self, service, pending_article, editor):
        with pytest.raises(ValidationError) as exc_info:
            service.review_article(pending_article.id, editor, 'maybe')

        assert exc_info.value.field == 'decision'
        assert ArticleReview.objects.count() == 0

    def test_only_pending_articles(self, service, article, editor):
        with pytest.raises(InvalidTransitionError):
            service.review_article(article.id, editor, 'approve')

        assert ArticleReview.objects.count() == 0

    def test_second_review_conflicts(self, service, pending_article, editor):
        service.review_article(pending_article.id, editor, 'approve')

        with pytest.raises(InvalidTransitionError):
            service.review_article(pending_article.id, editor, 'reject')
        assert ArticleReview.objects.count() == 1

    def test_review_history_newest_first(self, service, pending_article, author, editor):
        service.review_article(pending_article.id, editor, 'needs_changes', 'Primera')
        service.submit_for_review(pending_article.id, author)
        service.review_article(pending_article.id, editor, 'approve', 'Segunda')

        history = list(service.get_article_reviews(pending_article.id))

        assert [r.comments for r in history] == ['Segunda', 'Primera']

    def test_state_history_recorded(self, service, pending_article, editor):
        service.review_article(pending_article.id, editor, 'needs_changes', 'Revisar cifras')

        pending_article.refresh_from_db()
        last = pending_article.metadata['state_history'][-1]
        assert last['to'] == 'needs_changes'
        assert last['reason'] == 'Revisar cifras'
        assert last['decision'] == 'needs_changes'


# ============================================================================
# Pending queue & stats
# ============================================================================

@pytest.mark.django_db
class TestPendingReviews:

    def test_ordered_by_submission_desc(self, service, author):
        now = timezone.now()
        for hours, title in ((3, 'Viejo'), (1, 'Reciente'), (2, 'Medio')):
            Article.objects.create(
                title=title,
                author=author,
                status='pending_review',
                submitted_at=now - timedelta(hours=hours),
            )
        Article.objects.create(title='Borrador', author=author)

        titles = [a.title for a in service.get_pending_reviews()]

        assert titles == ['Reciente', 'Medio', 'Viejo']

    def test_limit_is_clamped(self, service, author):
        for i in range(3):
            Article.objects.create(title=f'Nota {i}', author=author, status='pending_review',
                                   submitted_at=timezone.now())

        assert len(service.get_pending_reviews(limit=2)) == 2
        assert len(service.get_pending_reviews(limit=0)) == 1
        assert len(service.get_pending_reviews(limit=500)) == 3

    def test_default_limit_from_settings(self, service, author, settings):
        settings.EDITORIAL_PENDING_LIMIT = 2
        for i in range(3):
            Article.objects.create(title=f'Nota {i}', author=author, status='pending_review',
                                   submitted_at=timezone.now())

        assert len(service.get_pending_reviews()) == 2

    def test_workflow_stats_zero_filled(self, service, pending_article):
        stats = service.get_workflow_stats()

        assert stats['pending_review'] == 1
        assert stats['published'] == 0
        assert stats['archived'] == 0
        assert stats['total'] == 1


# ============================================================================
# Publication
# ============================================================================

@pytest.mark.django_db
class TestPublishArticle:

    def test_publish_approved(self, service, approved_article, editor):
        result = service.publish_article(approved_article.id, editor)

        assert result.status == 'published'
        assert result.published is True
        assert result.published_at is not None
        assert result.is_public
        assert AuditLog.objects.filter(action='publish', actor=editor).exists()

    def test_publish_requires_approval(self, service, pending_article, editor):
        with pytest.raises(InvalidTransitionError) as exc_info:
            service.publish_article(pending_article.id, editor)

        assert exc_info.value.message == 'Artículo no encontrado o no aprobado'
        pending_article.refresh_from_db()
        assert pending_article.published is False

    def test_publish_missing_article(self, service, editor):
        import uuid

        with pytest.raises(NotFoundError):
            service.publish_article(uuid.uuid4(), editor)

    def test_keeps_existing_published_at(self, service, approved_article, editor):
        earlier = timezone.now() - timedelta(days=2)
        Article.objects.filter(pk=approved_article.pk).update(published_at=earlier)

        result = service.publish_article(approved_article.id, editor)

        assert result.published_at == earlier


@pytest.mark.django_db
class TestScheduledPublishing:

    def test_publishes_due_articles(self, service, approved_article):
        due = timezone.now() - timedelta(minutes=5)
        Article.objects.filter(pk=approved_article.pk).update(scheduled_for=due)

        assert service.publish_scheduled_articles() == 1

        approved_article.refresh_from_db()
        assert approved_article.status == 'published'
        assert approved_article.published is True
        assert approved_article.published_at == due
        entry = AuditLog.objects.get(action='publish', entity_id=str(approved_article.id))
        assert entry.actor is None
        assert entry.details == 'scheduled'

    def test_ignores_future_and_unapproved(self, service, approved_article, author):
        Article.objects.filter(pk=approved_article.pk).update(
            scheduled_for=timezone.now() + timedelta(hours=1)
        )
        Article.objects.create(
            title='Pendiente programado',
            author=author,
            status='pending_review',
            scheduled_for=timezone.now() - timedelta(hours=1),
        )

        assert service.publish_scheduled_articles() == 0

    def test_task_wrapper(self, approved_article):
        from apps.articles.tasks import publish_scheduled_articles

        Article.objects.filter(pk=approved_article.pk).update(
            scheduled_for=timezone.now() - timedelta(seconds=1)
        )

        assert publish_scheduled_articles() == {'published': 1}


# ============================================================================
# Notifications
# ============================================================================

@pytest.mark.django_db
class TestNotifications:

    def test_submit_notifies_editors_after_commit(
        self, service, article, author, editor, settings, django_capture_on_commit_callbacks
    ):
        settings.SAFRA_NOTIFY_BY_EMAIL = True
        make_user('columnista', role='author')

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            service.submit_for_review(article.id, author)

        assert len(callbacks) == 1
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ['editor@safrareport.com']
        assert message.subject == '[SafraReport] Nuevo artículo para revisión: Lluvias afectan el Cibao'
        assert f'/admin/articles/article/{article.id}/change/' in message.body

    def test_review_notifies_author_with_comments(
        self, service, pending_article, editor, settings, django_capture_on_commit_callbacks
    ):
        settings.SAFRA_NOTIFY_BY_EMAIL = True

        with django_capture_on_commit_callbacks(execute=True):
            service.review_article(pending_article.id, editor, 'needs_changes', 'Agregar fotos')

        assert mail.outbox[-1].to == ['autora@safrareport.com']
        assert mail.outbox[-1].subject == '[SafraReport] Tu artículo ha sido enviado para cambios'
        assert 'Agregar fotos' in mail.outbox[-1].body

    def test_failed_transition_sends_nothing(
        self, service, article, editor, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(InvalidTransitionError):
                service.publish_article(article.id, editor)

        assert callbacks == []
        assert mail.outbox == []

    def test_email_disabled_only_logs(
        self, service, article, author, editor, settings, django_capture_on_commit_callbacks
    ):
        settings.SAFRA_NOTIFY_BY_EMAIL = False

        with django_capture_on_commit_callbacks(execute=True):
            service.submit_for_review(article.id, author)

        assert mail.outbox == []

    def test_queue_failure_does_not_break_workflow(
        self, service, article, author, editor, django_capture_on_commit_callbacks
    ):
        with patch(
            'apps.articles.tasks.send_editorial_notification.apply_async',
            side_effect=ConnectionError('broker down'),
        ):
            with django_capture_on_commit_callbacks(execute=True):
                result = service.submit_for_review(article.id, author)

        assert result.status == 'pending_review'
