"""
Editorial services: review workflow, editorial comments and version control.
"""

import logging
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Max, Min, Q
from django.utils import timezone

from apps.core.audit import record_audit
from apps.core.dominican import ERROR_MESSAGES
from apps.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from apps.core.metrics import (
    increment_editorial_comment,
    increment_scheduled_publications,
    increment_versions_saved,
)
from apps.core.middleware import celery_request_id_headers
from apps.core.permissions import get_user_role, has_any_role, is_admin
from .models import Article, ArticleReview, ArticleVersion, EditorialComment
from .state_machine import EditorialState, EditorialStateMachine

logger = logging.getLogger(__name__)

EDITOR_ROLES = ('editor', 'admin')

DECISION_TO_STATE = {
    ArticleReview.Decision.APPROVE: EditorialState.APPROVED,
    ArticleReview.Decision.REJECT: EditorialState.REJECTED,
    ArticleReview.Decision.NEEDS_CHANGES: EditorialState.NEEDS_CHANGES,
}

DECISION_TO_AUDIT_ACTION = {
    ArticleReview.Decision.APPROVE: 'approve',
    ArticleReview.Decision.REJECT: 'reject',
    ArticleReview.Decision.NEEDS_CHANGES: 'request_changes',
}

DECISION_MESSAGES = {
    ArticleReview.Decision.APPROVE: 'aprobado',
    ArticleReview.Decision.REJECT: 'rechazado',
    ArticleReview.Decision.NEEDS_CHANGES: 'enviado para cambios',
}


def get_article(article_id, lock: bool = False) -> Article:
    """Fetch an article or raise NotFoundError."""
    queryset = Article.objects.select_for_update() if lock else Article.objects.all()
    try:
        return queryset.get(pk=article_id)
    except Article.DoesNotExist:
        raise NotFoundError(ERROR_MESSAGES['article_not_found'])


def notify_users(user_ids: List[Any], event: str, subject: str, message: str, article: Article):
    """
    Queue an editorial notification once the current transaction commits.

    Notifications never roll back a workflow change.
    """
    from .tasks import send_editorial_notification

    recipient_ids = [str(pk) for pk in user_ids if pk is not None]
    if not recipient_ids:
        return

    headers = celery_request_id_headers()

    def dispatch():
        try:
            send_editorial_notification.apply_async(
                args=[recipient_ids, event, subject, message, str(article.id)],
                headers=headers,
            )
        except Exception as e:
            logger.error(f"Could not queue {event} notification for article {article.id}: {e}")

    transaction.on_commit(dispatch)


class ArticleReviewService:
    """
    Editorial review workflow.

    Every status change goes through EditorialStateMachine so invalid
    moves raise InvalidTransitionError (HTTP 409).
    """

    def submit_for_review(self, article_id, user) -> Article:
        """Send a draft (or reworked) article to the editors' queue."""
        with transaction.atomic():
            article = get_article(article_id)

            if article.author_id != user.id and not has_any_role(user, EDITOR_ROLES):
                raise PermissionDeniedError(ERROR_MESSAGES['forbidden'])

            EditorialStateMachine(article).transition_to(
                EditorialState.PENDING_REVIEW, actor=user
            )
            record_audit(user, 'submit', 'article', article.id, changes={'status': article.status})

            editor_ids = list(
                Article._meta.get_field('author').related_model.objects.filter(
                    Q(profile__role='editor') | Q(is_superuser=True),
                    is_active=True,
                ).exclude(pk=user.pk).values_list('pk', flat=True)
            )
            notify_users(
                editor_ids,
                event='submitted',
                subject=f"Nuevo artículo para revisión: {article.title}",
                message=f'El artículo "{article.title}" ha sido enviado para revisión.',
                article=article,
            )

        logger.info(f"Article {article.id} submitted for review by {user.username}")
        return article

    def review_article(self, article_id, reviewer, decision: str, comments: str = '') -> ArticleReview:
        """Record an editor's decision and move the article accordingly."""
        try:
            decision = ArticleReview.Decision(decision)
        except ValueError:
            raise ValidationError(
                "Decisión inválida. Use approve, reject o needs_changes",
                field='decision',
            )

        with transaction.atomic():
            article = get_article(article_id)

            if article.status != EditorialState.PENDING_REVIEW.value:
                raise InvalidTransitionError(
                    from_state=article.status,
                    to_state=DECISION_TO_STATE[decision].value,
                    message="Solo se pueden revisar artículos pendientes de revisión",
                )

            EditorialStateMachine(article).transition_to(
                DECISION_TO_STATE[decision],
                actor=reviewer,
                reason=comments,
                metadata={'decision': decision.value},
            )

            review = ArticleReview.objects.create(
                article=article,
                reviewer=reviewer,
                decision=decision,
                comments=comments or '',
            )

            record_audit(
                reviewer,
                DECISION_TO_AUDIT_ACTION[decision],
                'article',
                article.id,
                changes={'status': article.status, 'decision': decision.value},
                details=comments or '',
            )

            verdict = DECISION_MESSAGES[decision]
            notify_users(
                [article.author_id],
                event=f'review_{decision.value}',
                subject=f"Tu artículo ha sido {verdict}",
                message=(
                    f'Tu artículo "{article.title}" ha sido {verdict}.'
                    + (f"\n\nComentarios del editor:\n{comments}" if comments else '')
                ),
                article=article,
            )

        logger.info(f"Article {article.id} reviewed by {reviewer.username}: {decision.value}")
        return review

    def get_pending_reviews(self, limit: Optional[int] = None):
        """Articles waiting for review, most recently submitted first."""
        if limit is None:
            limit = getattr(settings, 'EDITORIAL_PENDING_LIMIT', 20)
        limit = max(1, min(int(limit), 100))

        return list(
            Article.objects.filter(status=EditorialState.PENDING_REVIEW.value)
            .select_related('author', 'category')
            .order_by('-submitted_at')[:limit]
        )

    def get_article_reviews(self, article_id):
        """Review history of an article, newest first."""
        article = get_article(article_id)
        return article.reviews.select_related('reviewer').order_by('-reviewed_at')

    def publish_article(self, article_id, user) -> Article:
        """Publish an approved article."""
        with transaction.atomic():
            article = get_article(article_id)

            if article.status != EditorialState.APPROVED.value:
                raise InvalidTransitionError(
                    from_state=article.status,
                    to_state=EditorialState.PUBLISHED.value,
                    message=ERROR_MESSAGES['article_not_approved'],
                )

            EditorialStateMachine(article).transition_to(EditorialState.PUBLISHED, actor=user)
            record_audit(
                user, 'publish', 'article', article.id,
                changes={'published_at': article.published_at.isoformat()},
            )
            notify_users(
                [article.author_id],
                event='published',
                subject="Tu artículo ha sido publicado",
                message=f'Tu artículo "{article.title}" ya está publicado.',
                article=article,
            )

        logger.info(f"Article {article.id} published by {user.username}")
        return article

    def publish_scheduled_articles(self, now=None) -> int:
        """Publish approved articles whose scheduled time has passed."""
        now = now or timezone.now()
        due_ids = list(
            Article.objects.filter(
                status=EditorialState.APPROVED.value,
                scheduled_for__isnull=False,
                scheduled_for__lte=now,
            ).values_list('pk', flat=True)
        )

        published = 0
        for article_id in due_ids:
            try:
                with transaction.atomic():
                    article = get_article(article_id)
                    EditorialStateMachine(article).transition_to(
                        EditorialState.PUBLISHED, reason='scheduled'
                    )
                    if article.scheduled_for:
                        article.published_at = article.scheduled_for
                        article.save(update_fields=['published_at', 'updated_at'])
                    record_audit(None, 'publish', 'article', article.id, details='scheduled')
                published += 1
            except (InvalidTransitionError, NotFoundError) as e:
                # Moved or deleted since the query ran
                logger.warning(f"Scheduled publish skipped for {article_id}: {e}")

        increment_scheduled_publications(published)
        if published:
            logger.info(f"Published {published} scheduled article(s)")
        return published

    def get_workflow_stats(self) -> Dict[str, int]:
        """Article counts per status, every status present."""
        stats = {state.value: 0 for state in EditorialState}
        rows = Article.objects.values('status').annotate(count=Count('id'))
        for row in rows:
            stats[row['status']] = row['count']
        stats['total'] = sum(stats[state.value] for state in EditorialState)
        return stats

    # ------------------------------------------------------------------
    # Editorial comments
    # ------------------------------------------------------------------

    def _validate_comment_text(self, text) -> str:
        text = (text or '').strip()
        max_length = getattr(settings, 'EDITORIAL_COMMENT_MAX_LENGTH', 1000)
        if not text:
            raise ValidationError(ERROR_MESSAGES['comment_empty'], field='text')
        if len(text) > max_length:
            raise ValidationError(
                ERROR_MESSAGES['comment_too_long'].format(max_length=max_length),
                field='text',
            )
        return text

    def _get_comment_for_change(self, comment_id, user) -> EditorialComment:
        try:
            comment = EditorialComment.objects.select_related('author').get(pk=comment_id)
        except EditorialComment.DoesNotExist:
            raise NotFoundError(ERROR_MESSAGES['comment_not_found'])

        if comment.author_id != user.id and not is_admin(user):
            raise PermissionDeniedError(ERROR_MESSAGES['comment_forbidden'])
        return comment

    def add_comment(self, article_id, user, text) -> EditorialComment:
        text = self._validate_comment_text(text)
        article = get_article(article_id)
        comment = EditorialComment.objects.create(article=article, author=user, text=text)
        increment_editorial_comment('create')
        logger.info(f"Comment {comment.id} added to article {article.id} by {user.username}")
        return comment

    def get_comments(self, article_id):
        article = get_article(article_id)
        return article.editorial_comments.select_related('author').order_by('-created_at')

    def update_comment(self, comment_id, user, text=None, resolved=None) -> EditorialComment:
        comment = self._get_comment_for_change(comment_id, user)
        update_fields = ['updated_at']

        if text is not None:
            comment.text = self._validate_comment_text(text)
            update_fields.append('text')
        if resolved is not None:
            comment.resolved = bool(resolved)
            update_fields.append('resolved')

        comment.save(update_fields=update_fields)
        increment_editorial_comment('update')
        return comment

    def set_comment_resolved(self, comment_id, user, resolved: bool = True) -> EditorialComment:
        comment = self._get_comment_for_change(comment_id, user)
        comment.resolved = bool(resolved)
        comment.save(update_fields=['resolved', 'updated_at'])
        increment_editorial_comment('resolve' if resolved else 'reopen')
        return comment

    def delete_comment(self, comment_id, user) -> None:
        comment = self._get_comment_for_change(comment_id, user)
        if comment.author_id != user.id:
            record_audit(
                user, 'delete', 'editorial_comment', comment.id,
                changes={'article_id': str(comment.article_id), 'text': comment.text},
            )
        comment.delete()
        increment_editorial_comment('delete')

    def get_comment_stats(self, article_id) -> Dict[str, int]:
        article = get_article(article_id)
        counts = article.editorial_comments.aggregate(
            total=Count('id'),
            resolved=Count('id', filter=Q(resolved=True)),
        )
        total = counts['total'] or 0
        resolved = counts['resolved'] or 0
        return {'total': total, 'resolved': resolved, 'unresolved': total - resolved}


class VersionControl:
    """
    Article version history.

    Version numbers are allocated while holding a row lock on the
    article, so concurrent saves get distinct consecutive numbers.
    """

    def _check_can_edit(self, article, user):
        """Authors may change only their own articles; editors and admins any."""
        if article.author_id != getattr(user, 'pk', None) and not has_any_role(user, EDITOR_ROLES):
            raise PermissionDeniedError(ERROR_MESSAGES['forbidden'])

    def _default_summary(self, version: int) -> str:
        today = timezone.localdate()
        return f"Versión {version} - {today.day}/{today.month}/{today.year}"

    def save_version(
        self,
        article_id,
        user,
        title: str,
        excerpt: str = '',
        content: str = '',
        changes_summary: Optional[str] = None,
        origin: str = 'api',
    ) -> ArticleVersion:
        with transaction.atomic():
            article = get_article(article_id, lock=True)
            # Admin-site saves are gated by Django model permissions
            if origin != 'admin':
                self._check_can_edit(article, user)
            last = article.versions.aggregate(last=Max('version'))['last'] or 0
            number = last + 1

            version = ArticleVersion.objects.create(
                article=article,
                version=number,
                title=title,
                excerpt=excerpt or '',
                content=content or '',
                changed_by=user if getattr(user, 'is_authenticated', False) else None,
                changes_summary=changes_summary or self._default_summary(number),
            )

        increment_versions_saved(origin)
        logger.info(f"Saved version {number} of article {article.id}")
        return version

    def get_versions(self, article_id):
        article = get_article(article_id)
        return article.versions.select_related('changed_by').order_by('-version')

    def get_version(self, article_id, version: int) -> ArticleVersion:
        article = get_article(article_id)
        try:
            return article.versions.select_related('changed_by').get(version=version)
        except ArticleVersion.DoesNotExist:
            raise NotFoundError(ERROR_MESSAGES['version_not_found'])

    def restore_version(self, article_id, version: int, user) -> ArticleVersion:
        """
        Copy a stored version back onto the article and record the
        restore as a new version.

        Authors may restore only their own articles, and only while they
        are editable; editors and admins may restore in any state.
        """
        with transaction.atomic():
            article = get_article(article_id, lock=True)
            self._check_can_edit(article, user)
            state = EditorialState(article.status)
            if not state.is_editable and get_user_role(user) not in EDITOR_ROLES:
                raise ConflictError(
                    f"No se puede restaurar un artículo en estado {state.value}",
                    details={'status': state.value},
                )

            source = self.get_version(article.id, version)
            previous = {'title': article.title, 'excerpt': article.excerpt}

            article.title = source.title
            article.excerpt = source.excerpt
            article.content = source.content
            article.save(update_fields=['title', 'excerpt', 'content', 'updated_at'])

            restored = self.save_version(
                article.id,
                user,
                title=source.title,
                excerpt=source.excerpt,
                content=source.content,
                changes_summary=f"Restaurado a versión {version}",
                origin='restore',
            )
            record_audit(
                user, 'restore', 'article', article.id,
                changes={'restored_version': version, 'new_version': restored.version, 'previous': previous},
            )

        logger.info(f"Article {article.id} restored to version {version} by {user.username}")
        return restored

    def compare_versions(self, article_id, v1: int, v2: int) -> Dict[str, Any]:
        first = self.get_version(article_id, v1)
        second = self.get_version(article_id, v2)
        return {
            'version1': first,
            'version2': second,
            'changes': {
                'title': first.title != second.title,
                'excerpt': first.excerpt != second.excerpt,
                'content': first.content != second.content,
            },
        }

    def get_version_stats(self, article_id) -> Dict[str, Any]:
        article = get_article(article_id)
        stats = article.versions.aggregate(
            total_versions=Count('id'),
            first_version=Min('created_at'),
            last_version=Max('created_at'),
        )
        return {
            'total_versions': stats['total_versions'] or 0,
            'first_version': stats['first_version'],
            'last_version': stats['last_version'],
        }

    def cleanup_old_versions(self, article_id, keep_last: int = 10) -> int:
        """Delete every version older than the newest ``keep_last``."""
        if keep_last < 1:
            raise ValidationError("keep debe ser al menos 1", field='keep')

        with transaction.atomic():
            article = get_article(article_id, lock=True)
            stale_ids = list(
                article.versions.order_by('-version').values_list('pk', flat=True)[keep_last:]
            )
            deleted = 0
            if stale_ids:
                deleted, _ = ArticleVersion.objects.filter(pk__in=stale_ids).delete()

        if deleted:
            logger.info(f"Deleted {deleted} old version(s) of article {article.id}")
        return deleted
