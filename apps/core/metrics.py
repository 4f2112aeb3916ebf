"""
Prometheus Metrics for SafraReport.

Metrics included:
- workflow_transitions_total: status changes per state machine
- article_versions_saved_total: version snapshots by origin
- editorial_comments_total: comment writes by action
- moderation_decisions_total: classified/review moderation outcomes
- notifications_total: editorial notifications by outcome
- scheduled_publications_total: articles published by the scheduler
- http_request_duration_seconds: API latency

Cardinality Guidelines:
- All labels MUST be low-cardinality (small, bounded set of values)
- ALLOWED label values: status enums, machine names, actions
- FORBIDDEN label values: slugs, IDs, usernames, user-generated strings
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

workflow_transitions_total = Counter(
    'safrareport_workflow_transitions_total',
    'Status transitions applied by workflow state machines',
    ['machine', 'from_state', 'to_state']
)

article_versions_saved_total = Counter(
    'safrareport_article_versions_saved_total',
    'Article version snapshots stored',
    ['origin']  # origin: api/admin/restore
)

editorial_comments_total = Counter(
    'safrareport_editorial_comments_total',
    'Editorial comment operations',
    ['action']  # action: create/update/delete/resolve/reopen
)

moderation_decisions_total = Counter(
    'safrareport_moderation_decisions_total',
    'Moderation decisions on user-submitted content',
    ['entity', 'decision']
)

notifications_total = Counter(
    'safrareport_notifications_total',
    'Editorial notifications dispatched',
    ['event', 'status']
)

scheduled_publications_total = Counter(
    'safrareport_scheduled_publications_total',
    'Articles published by the scheduler',
)

pending_reviews = Gauge(
    'safrareport_pending_reviews',
    'Articles currently waiting for editorial review',
)

http_request_duration_seconds = Histogram(
    'safrareport_http_request_duration_seconds',
    'API request latency',
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)


# ============================================================================
# Helper Functions
# ============================================================================

def increment_workflow_transition(machine, from_state, to_state):
    """Increment the transition counter for a state machine."""
    workflow_transitions_total.labels(
        machine=machine, from_state=from_state, to_state=to_state
    ).inc()


def increment_versions_saved(origin='api'):
    article_versions_saved_total.labels(origin=origin).inc()


def increment_editorial_comment(action='create'):
    editorial_comments_total.labels(action=action).inc()


def increment_moderation_decision(entity, decision):
    moderation_decisions_total.labels(entity=entity, decision=decision).inc()


def increment_notification(event, status='sent'):
    notifications_total.labels(event=event, status=status).inc()


def increment_scheduled_publications(count=1):
    if count:
        scheduled_publications_total.inc(count)


def observe_request_duration(seconds):
    """Record the latency of one API request."""
    http_request_duration_seconds.observe(seconds)


# ============================================================================
# Metrics View
# ============================================================================

def metrics_view(request):
    """
    Django view to expose Prometheus metrics.

    Returns metrics in Prometheus text format.
    """
    from django.http import HttpResponse
    from django.db import DatabaseError

    # Refresh gauges before generating output
    try:
        from apps.articles.models import Article
        pending_reviews.set(Article.objects.filter(status='pending_review').count())
    except DatabaseError as e:
        logger.warning(f"Could not refresh pending review gauge: {e}")

    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
