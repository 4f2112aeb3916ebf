"""
Tests for Prometheus Metrics - Smoke Tests.

Tests cover:
- Metric registration
- Label cardinality limits
- Counter increments
- Histogram observations
- Metrics endpoint
"""

import pytest
from prometheus_client import REGISTRY


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


# ============================================================================
# Metric Registration Tests
# ============================================================================

class TestMetricRegistration:
    """Test that all metrics are registered correctly."""

    def test_workflow_transitions_exists(self):
        from apps.core.metrics import workflow_transitions_total

        assert hasattr(workflow_transitions_total, 'labels')

    def test_request_duration_exists(self):
        from apps.core.metrics import http_request_duration_seconds

        assert http_request_duration_seconds is not None

    def test_pending_reviews_gauge_exists(self):
        from apps.core.metrics import pending_reviews

        assert hasattr(pending_reviews, 'set')


# ============================================================================
# Label Cardinality Tests
# ============================================================================

class TestLabelCardinality:
    """Labels must stay low-cardinality."""

    FORBIDDEN = {'article_id', 'slug', 'user', 'username', 'url', 'path', 'id'}

    def test_no_identifier_labels(self):
        from apps.core import metrics

        for metric in (
            metrics.workflow_transitions_total,
            metrics.article_versions_saved_total,
            metrics.editorial_comments_total,
            metrics.moderation_decisions_total,
            metrics.notifications_total,
        ):
            assert not self.FORBIDDEN & set(metric._labelnames)

    def test_transition_labels(self):
        from apps.core.metrics import workflow_transitions_total

        assert list(workflow_transitions_total._labelnames) == ['machine', 'from_state', 'to_state']


# ============================================================================
# Counter Increment Tests
# ============================================================================

class TestCounterIncrements:
    """Helpers increment the right series."""

    def test_increment_workflow_transition(self):
        from apps.core.metrics import increment_workflow_transition

        labels = {'machine': 'article', 'from_state': 'draft', 'to_state': 'pending_review'}
        before = sample('safrareport_workflow_transitions_total', **labels)
        increment_workflow_transition('article', 'draft', 'pending_review')
        assert sample('safrareport_workflow_transitions_total', **labels) == before + 1

    def test_increment_versions_saved(self):
        from apps.core.metrics import increment_versions_saved

        before = sample('safrareport_article_versions_saved_total', origin='restore')
        increment_versions_saved('restore')
        assert sample('safrareport_article_versions_saved_total', origin='restore') == before + 1

    def test_increment_moderation_decision(self):
        from apps.core.metrics import increment_moderation_decision

        labels = {'entity': 'classified', 'decision': 'approved'}
        before = sample('safrareport_moderation_decisions_total', **labels)
        increment_moderation_decision('classified', 'approved')
        assert sample('safrareport_moderation_decisions_total', **labels) == before + 1

    def test_scheduled_publications_ignores_zero(self):
        from apps.core.metrics import increment_scheduled_publications

        before = sample('safrareport_scheduled_publications_total')
        increment_scheduled_publications(0)
        assert sample('safrareport_scheduled_publications_total') == before
        increment_scheduled_publications(3)
        assert sample('safrareport_scheduled_publications_total') == before + 3


# ============================================================================
# Histogram Tests
# ============================================================================

class TestHistograms:

    def test_observe_request_duration(self):
        from apps.core.metrics import observe_request_duration

        before = sample('safrareport_http_request_duration_seconds_count')
        observe_request_duration(0.2)
        assert sample('safrareport_http_request_duration_seconds_count') == before + 1

    @pytest.mark.django_db
    def test_api_requests_are_timed(self, client):
        before = sample('safrareport_http_request_duration_seconds_count')
        client.get('/api/provinces/')
        assert sample('safrareport_http_request_duration_seconds_count') == before + 1

    @pytest.mark.django_db
    def test_probes_are_not_timed(self, client):
        before = sample('safrareport_http_request_duration_seconds_count')
        client.get('/livez/')
        assert sample('safrareport_http_request_duration_seconds_count') == before


# ============================================================================
# Metrics Endpoint Tests
# ============================================================================

@pytest.mark.django_db
class TestMetricsEndpoint:

    def test_exposes_prometheus_text(self, client):
        response = client.get('/metrics/')

        assert response.status_code == 200
        assert b'safrareport_pending_reviews' in response.content

    def test_pending_gauge_refreshed(self, client):
        from apps.articles.models import Article

        Article.objects.create(title='En cola', status='pending_review')
        client.get('/metrics/')

        assert sample('safrareport_pending_reviews') == 1.0
