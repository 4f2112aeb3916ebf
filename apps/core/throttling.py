"""
Rate Limiting / Throttling for SafraReport.

Custom DRF throttle classes for different endpoint types. Rates are read
from REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] and fall back to the
defaults in each class when a scope is not configured.

Usage in views:
    from apps.core.throttling import WorkflowThrottle

    class ReviewView(APIView):
        throttle_classes = [WorkflowThrottle]
"""

from rest_framework.throttling import UserRateThrottle, AnonRateThrottle
import logging

logger = logging.getLogger(__name__)


class LoginThrottle(AnonRateThrottle):
    """
    Throttle for credential checks, keyed by client address.

    Applies to:
    - POST /api/auth/login/

    Default: 5 requests/minute
    """
    scope = 'login'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '5/minute'


class WorkflowThrottle(UserRateThrottle):
    """
    Throttle for editorial state changes.

    Applies to:
    - POST /api/admin/article-review/submit/
    - POST /api/admin/article-review/{id}/review/
    - POST /api/admin/article-review/{id}/publish/
    - POST /api/admin/versions/{id}/restore/

    Default: 30 requests/minute
    """
    scope = 'workflow'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '30/minute'


class CommentThrottle(UserRateThrottle):
    """
    Throttle for editorial comment writes.

    Default: 60 requests/minute
    """
    scope = 'comment'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '60/minute'


class ReviewSubmitThrottle(UserRateThrottle):
    """
    Throttle for readers posting business reviews and feedback.

    Default: 10 requests/hour
    """
    scope = 'review_submit'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '10/hour'


class PublicBurstThrottle(AnonRateThrottle):
    """
    Burst throttle for the public read API.

    Default: 120 requests/minute
    """
    scope = 'public'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '120/minute'


class DestructiveActionThrottle(UserRateThrottle):
    """
    Throttle for destructive actions (DELETE, purges).

    Default: 20 requests/minute
    """
    scope = 'destructive'

    def get_rate(self):
        try:
            return super().get_rate()
        except Exception:
            return '20/minute'
