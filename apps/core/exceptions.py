"""
Standardized error handling for the SafraReport API.

Provides consistent error codes, exception classes, database outage
classification and response formatting.
"""

import logging
import re
import traceback
import uuid
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.core.dominican import ERROR_MESSAGES

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_VALUE = "INVALID_VALUE"

    # Authentication/Authorization (401/403)
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    CONFLICT = "CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorDetail:
    """Detailed error information."""
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error.to_dict(),
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class SafraException(APIException):
    """Base exception for SafraReport API errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = ERROR_MESSAGES['generic']

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}

        if status_code:
            self.status_code = status_code

        super().__init__(detail=self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details if self.error_details else None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(SafraException):
    """Validation error."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = ERROR_MESSAGES['validation']


class NotFoundError(SafraException):
    """Resource not found."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = ERROR_MESSAGES['not_found']


class DuplicateError(SafraException):
    """Duplicate resource."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.DUPLICATE
    default_detail = ERROR_MESSAGES['duplicate']


class ConflictError(SafraException):
    """Resource is in a state that does not allow the operation."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.CONFLICT
    default_detail = ERROR_MESSAGES['conflict']


class InvalidTransitionError(SafraException):
    """A status change that the transition table does not allow."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.INVALID_TRANSITION
    default_detail = ERROR_MESSAGES['invalid_transition']

    def __init__(self, from_state: str, to_state: str, message: Optional[str] = None):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            message=message or f"Transición inválida: {from_state} -> {to_state}",
            details={"from_state": from_state, "to_state": to_state},
        )


class PermissionDeniedError(SafraException):
    """Permission denied."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = ERROR_MESSAGES['forbidden']


class ServiceUnavailableError(SafraException):
    """Backing service (database, broker) is unreachable."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = ErrorCode.SERVICE_UNAVAILABLE
    default_detail = ERROR_MESSAGES['unavailable']


# =============================================================================
# Database Error Classification
# =============================================================================

# PostgreSQL SQLSTATE codes that mean the database is unusable, not that
# the query is wrong.
DATABASE_OUTAGE_CODES = frozenset({
    '08000', '08001', '08003', '08004', '08006',  # connection exceptions
    '28000', '28P01',                             # invalid authorization
    '3D000',                                      # unknown database
    '42P01',                                      # undefined table
    '42703',                                      # undefined column
    '53300',                                      # too many connections
    '57P01', '57P02', '57P03',                    # server shutting down
})

DATABASE_OUTAGE_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in (
        r'connection refused',
        r'could not connect',
        r'connection .* (closed|terminated|reset)',
        r'server closed the connection',
        r'password authentication failed',
        r'database ".*" does not exist',
        r'relation ".*" does not exist',
        r'no such table',
        r'column ".*" does not exist',
        r'timeout expired',
        r'too many connections',
    )
]


def is_database_outage(exc: BaseException) -> bool:
    """
    Decide whether a database exception means the service is down.

    Connection and interface errors always count. Other database errors
    count when their SQLSTATE or message matches a known outage pattern.
    """
    if isinstance(exc, (InterfaceError, OperationalError)):
        return True
    if not isinstance(exc, DatabaseError) or isinstance(exc, IntegrityError):
        return False

    cause = exc.__cause__
    pgcode = getattr(cause, 'pgcode', None) or getattr(cause, 'sqlstate', None)
    if pgcode and pgcode in DATABASE_OUTAGE_CODES:
        return True

    message = str(exc)
    return any(pattern.search(message) for pattern in DATABASE_OUTAGE_PATTERNS)


# =============================================================================
# Exception Handler
# =============================================================================

def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def safra_exception_handler(exc, context):
    """
    Custom exception handler for the SafraReport API.

    Converts all exceptions to standardized error response format.
    """
    request = context.get('request')
    request_id = get_request_id(request) if request else str(uuid.uuid4())

    # Handle our custom exceptions
    if isinstance(exc, SafraException):
        error_response = exc.get_error_response(request_id)
        logger.warning(
            f"API Error: {exc.error_code.value}",
            extra={
                "request_id": request_id,
                "error_code": exc.error_code.value,
                "error_message": exc.message,
                "field": exc.field,
                "status_code": exc.status_code,
            }
        )
        return error_response.to_response(exc.status_code)

    # Handle Django validation errors
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            details = exc.message_dict
            message = ERROR_MESSAGES['validation']
        else:
            details = {"errors": exc.messages}
            message = exc.messages[0] if exc.messages else ERROR_MESSAGES['validation']

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                details=details,
            ),
            request_id=request_id,
        )
        return error_response.to_response(status.HTTP_400_BAD_REQUEST)

    # Handle 404
    if isinstance(exc, Http404):
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.NOT_FOUND,
                message=str(exc) if str(exc) else ERROR_MESSAGES['not_found'],
            ),
            request_id=request_id,
        )
        return error_response.to_response(status.HTTP_404_NOT_FOUND)

    # Unique constraint races surface as integrity errors
    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error: {exc}", extra={"request_id": request_id})
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.DUPLICATE,
                message=ERROR_MESSAGES['duplicate'],
            ),
            request_id=request_id,
        )
        return error_response.to_response(status.HTTP_409_CONFLICT)

    # Database outages degrade to 503 instead of a stack trace
    if is_database_outage(exc):
        logger.error(
            f"Database unavailable: {type(exc).__name__}: {exc}",
            extra={"request_id": request_id},
        )
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=ErrorCode.SERVICE_UNAVAILABLE,
                message=ERROR_MESSAGES['unavailable'],
            ),
            request_id=request_id,
        )
        response = error_response.to_response(status.HTTP_503_SERVICE_UNAVAILABLE)
        response['Retry-After'] = '30'
        return response

    # Use DRF's default handler for standard exceptions
    response = drf_exception_handler(exc, context)

    if response is not None:
        # Wrap DRF response in our format
        error_code = ErrorCode.VALIDATION_ERROR
        if response.status_code == 401:
            error_code = ErrorCode.AUTHENTICATION_ERROR
        elif response.status_code == 403:
            error_code = ErrorCode.PERMISSION_DENIED
        elif response.status_code == 404:
            error_code = ErrorCode.NOT_FOUND
        elif response.status_code == 405:
            error_code = ErrorCode.INVALID_VALUE
        elif response.status_code == 429:
            error_code = ErrorCode.RATE_LIMITED
        elif response.status_code >= 500:
            error_code = ErrorCode.INTERNAL_ERROR

        # Extract message from DRF response
        if isinstance(response.data, dict):
            if 'detail' in response.data:
                message = str(response.data['detail'])
                details = None
            else:
                message = ERROR_MESSAGES['validation']
                details = response.data
        elif isinstance(response.data, list):
            message = str(response.data[0]) if response.data else ERROR_MESSAGES['generic']
            details = {"errors": response.data}
        else:
            message = str(response.data)
            details = None

        error_response = ErrorResponse(
            error=ErrorDetail(
                code=error_code,
                message=message,
                details=details,
            ),
            request_id=request_id,
        )
        wrapped = error_response.to_response(response.status_code)
        for header in ('Retry-After', 'WWW-Authenticate', 'Allow'):
            if header in response:
                wrapped[header] = response[header]
        return wrapped

    # Unhandled exception - log and return generic error
    logger.exception(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "request_id": request_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "traceback": traceback.format_exc(),
        }
    )

    error_response = ErrorResponse(
        error=ErrorDetail(
            code=ErrorCode.INTERNAL_ERROR,
            message=ERROR_MESSAGES['generic'],
        ),
        request_id=request_id,
    )
    return error_response.to_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


# =============================================================================
# Response Helpers
# =============================================================================

def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
) -> Response:
    """Create a standardized success envelope."""
    response_data = {'success': True}

    if message:
        response_data['message'] = message

    if data is not None:
        response_data['data'] = data

    return Response(response_data, status=status_code)


def created_response(
    data: Any = None,
    message: str = "Creado exitosamente",
) -> Response:
    """Create a 201 Created response."""
    return success_response(data=data, message=message, status_code=201)
