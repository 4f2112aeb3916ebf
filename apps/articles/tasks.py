"""
Celery tasks for the editorial workflow.
"""

import logging
import smtplib

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from apps.core.metrics import increment_notification

logger = logging.getLogger(__name__)


@shared_task
def publish_scheduled_articles():
    """Publish approved articles whose scheduled time has passed. Runs every minute."""
    from .services import ArticleReviewService

    published = ArticleReviewService().publish_scheduled_articles()
    return {'published': published}


@shared_task
def cleanup_article_versions(keep_last: int = None):
    """
    Trim the version history of every article to the newest ``keep_last``
    snapshots (ARTICLE_VERSIONS_KEEP_LAST by default).

    Schedule daily via celery-beat.
    """
    from django.db.models import Count

    from .models import Article
    from .services import VersionControl

    keep = keep_last or getattr(settings, 'ARTICLE_VERSIONS_KEEP_LAST', 10)
    control = VersionControl()

    article_ids = (
        Article.objects.annotate(version_count=Count('versions'))
        .filter(version_count__gt=keep)
        .values_list('pk', flat=True)
    )

    deleted_count = 0
    articles_count = 0
    for article_id in article_ids:
        deleted_count += control.cleanup_old_versions(article_id, keep_last=keep)
        articles_count += 1

    logger.info(f"Cleaned up {deleted_count} old versions across {articles_count} articles (keep={keep})")
    return {'deleted_count': deleted_count, 'articles': articles_count, 'keep_last': keep}


@shared_task(bind=True, max_retries=3)
def send_editorial_notification(self, user_ids, event: str, subject: str, message: str, article_id: str = None):
    """
    Email an editorial notification to the given users.

    Disabled unless SAFRA_NOTIFY_BY_EMAIL is set; the event is still
    logged and counted so the workflow can be traced.
    """
    User = get_user_model()
    recipients = list(
        User.objects.filter(pk__in=user_ids, is_active=True)
        .exclude(email='')
        .values_list('email', flat=True)
    )

    if not recipients:
        logger.info(f"No recipients for {event} notification (article {article_id})")
        increment_notification(event, 'skipped')
        return {'event': event, 'sent': 0}

    if not getattr(settings, 'SAFRA_NOTIFY_BY_EMAIL', False):
        logger.info(f"Notification {event} for article {article_id} -> {len(recipients)} recipient(s) (email disabled)")
        increment_notification(event, 'logged')
        return {'event': event, 'sent': 0, 'logged': len(recipients)}

    body = message
    if article_id:
        body += f"\n\n{settings.SITE_URL}/admin/articles/article/{article_id}/change/"

    try:
        sent = send_mail(
            subject=f"[SafraReport] {subject}",
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipients,
            fail_silently=False,
        )
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"Notification {event} for article {article_id} failed: {exc}")
        increment_notification(event, 'failed')
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    increment_notification(event, 'sent')
    logger.info(f"Notification {event} for article {article_id} sent to {len(recipients)} recipient(s)")
    return {'event': event, 'sent': sent}
