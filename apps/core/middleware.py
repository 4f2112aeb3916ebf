"""
Request ID Middleware for SafraReport.

Generates and propagates unique request IDs for tracing, and keeps the
client address and user agent at hand for the audit trail.

Features:
- Generates UUID-based request ID for each request
- Accepts incoming X-Request-ID header
- Adds request ID to response headers
- Injects request ID into thread-local logging context
- Provides context for Celery task correlation

Access request ID in views:
    from apps.core.middleware import get_request_id

    def my_view(request):
        request_id = get_request_id()
        # or
        request_id = request.request_id
"""

import time
import uuid
import threading
import logging
from django.utils.deprecation import MiddlewareMixin

from apps.core.metrics import observe_request_duration

logger = logging.getLogger(__name__)

# Thread-local storage for request context
_request_context = threading.local()

CONTEXT_KEYS = ('request_id', 'user_id', 'path', 'ip_address', 'user_agent')


def get_request_id():
    """
    Get the current request ID from thread-local storage.

    Returns None if called outside of a request context.
    """
    return getattr(_request_context, 'request_id', None)


def get_request_context():
    """
    Get the full request context from thread-local storage.

    Returns dict with request_id, client address and other context.
    """
    return {key: getattr(_request_context, key, None) for key in CONTEXT_KEYS}


def set_request_context(request_id, user_id=None, path=None, ip_address=None, user_agent=None):
    """
    Set request context in thread-local storage.

    Useful for setting context in Celery tasks.
    """
    _request_context.request_id = request_id
    _request_context.user_id = user_id
    _request_context.path = path
    _request_context.ip_address = ip_address
    _request_context.user_agent = user_agent


def clear_request_context():
    """Clear request context from thread-local storage."""
    for key in CONTEXT_KEYS:
        setattr(_request_context, key, None)


def get_client_ip(request):
    """Client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to handle request IDs for tracing.

    Flow:
    1. Check for incoming X-Request-ID header
    2. Generate new UUID if not present or malformed
    3. Store it with client address and user agent in thread-local
    4. Attach to request object as request.request_id
    5. Add to response headers
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        """Extract or generate request ID."""
        request_id = request.META.get(self.REQUEST_ID_HEADER)

        if request_id:
            try:
                uuid.UUID(request_id)
            except (ValueError, TypeError):
                request_id = str(uuid.uuid4())
        else:
            request_id = str(uuid.uuid4())

        user_id = None
        if hasattr(request, 'user') and request.user.is_authenticated:
            user_id = str(request.user.id)

        set_request_context(
            request_id,
            user_id=user_id,
            path=request.path,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', '')[:500],
        )

        request.request_id = request_id
        request._request_started = time.monotonic()
        return None

    def process_response(self, request, response):
        """Add request ID to response headers."""
        request_id = getattr(request, 'request_id', None)

        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        started = getattr(request, '_request_started', None)
        if started is not None and request.path.startswith('/api/'):
            observe_request_duration(time.monotonic() - started)

        clear_request_context()
        return response


class RequestIDFilter(logging.Filter):
    """
    Logging filter that adds request_id to log records.

    Wired into the console and file handlers in settings.LOGGING.
    """

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        return True


def celery_request_id_headers():
    """
    Get headers to pass to Celery tasks for correlation.

    Usage:
        task.apply_async(
            args=[...],
            headers=celery_request_id_headers(),
        )
    """
    request_id = get_request_id()
    if request_id:
        return {'request_id': request_id}
    return {}


def setup_celery_request_context(headers):
    """Set up request context in a Celery task from its message headers."""
    request_id = (headers or {}).get('request_id')
    set_request_context(request_id or str(uuid.uuid4()))
