"""
Health, authentication, province and audit-log views.
"""

import logging

from django.http import JsonResponse
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator
from django.utils import timezone

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.tokens import RefreshToken

from apps.core.audit import record_audit
from apps.core.exceptions import ValidationError, success_response
from apps.core.health import health_checker, HealthStatus
from apps.core.models import AuditLog, Province
from apps.core.permissions import IsAdmin
from apps.core.serializers import (
    AuditLogSerializer,
    CustomTokenObtainPairSerializer,
    ProfileUpdateSerializer,
    ProvinceSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from apps.core.throttling import LoginThrottle, PublicBurstThrottle

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name='dispatch')
class HealthCheckView(View):
    """
    Health check endpoint.

    GET /health/ - Run all health checks
    GET /health/<check_name>/ - Run specific health check
    """

    def get(self, request, check_name=None):
        if check_name:
            result = health_checker.check(check_name)
            status_code = 200 if result.status != HealthStatus.UNHEALTHY else 503
            return JsonResponse({
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }, status=status_code)

        results = health_checker.check_all()
        status_code = 503 if results["status"] == HealthStatus.UNHEALTHY.value else 200
        return JsonResponse(results, status=status_code)


@method_decorator(csrf_exempt, name='dispatch')
class LivenessView(View):
    """
    Liveness probe endpoint.

    Returns 200 if the application is running.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


@method_decorator(csrf_exempt, name='dispatch')
class ReadinessView(View):
    """
    Readiness probe endpoint.

    Returns 200 when the database answers.
    """

    def get(self, request):
        db_check = health_checker.check("database")

        if db_check.status == HealthStatus.HEALTHY:
            return JsonResponse({"status": "ready"})
        return JsonResponse({
            "status": "not_ready",
            "reason": db_check.message,
        }, status=503)


@method_decorator(csrf_exempt, name='dispatch')
class StatusView(View):
    """
    Application status endpoint.

    GET /status/ - Content counts and health summary
    """

    def get(self, request):
        from django.conf import settings
        from django.db import DatabaseError
        from apps.articles.services import ArticleReviewService
        from apps.classifieds.models import Classified
        from apps.businesses.models import Business, Review

        try:
            stats = {
                "articles": ArticleReviewService().get_workflow_stats(),
                "classifieds_active": Classified.objects.filter(status='approved').count(),
                "businesses": Business.objects.filter(is_active=True).count(),
                "reviews_pending": Review.objects.filter(status='pending').count(),
            }
        except DatabaseError as e:
            logger.warning(f"Status counts unavailable: {e}")
            stats = None

        health = health_checker.check_all(["database", "cache"])

        return JsonResponse({
            "application": "SafraReport",
            "environment": getattr(settings, 'ENVIRONMENT', 'development'),
            "health": health["status"],
            "stats": stats,
            "checks": {
                name: check["status"]
                for name, check in health.get("checks", {}).items()
            },
        })


# =============================================================================
# JWT Authentication Views
# =============================================================================

class CustomTokenObtainPairView(TokenObtainPairView):
    """
    Login endpoint that returns JWT tokens.

    POST /api/auth/login/
    Body: {"username": "...", "password": "..."}
    Returns: {"access": "...", "refresh": "...", "user": {...}}
    """
    serializer_class = CustomTokenObtainPairSerializer
    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed:
            record_audit(
                None, 'login', 'user',
                details=f"Failed login for {request.data.get('username', '')!r}",
                success=False,
            )
            raise
        except TokenError as e:
            raise InvalidToken(e.args[0])

        user = serializer.user
        record_audit(user, 'login', 'user', user.pk)
        if hasattr(user, 'profile'):
            user.profile.last_active_at = timezone.now()
            user.profile.save(update_fields=['last_active_at', 'updated_at'])

        return Response(serializer.validated_data)


class CustomTokenRefreshView(TokenRefreshView):
    """
    Token refresh endpoint.

    POST /api/auth/refresh/
    Body: {"refresh": "..."}
    Returns: {"access": "...", "refresh": "..."}
    """
    permission_classes = [AllowAny]


class CurrentUserView(APIView):
    """
    Get or update the current authenticated user.

    GET /api/auth/me/ - Get current user info
    PATCH /api/auth/me/ - Update user info and profile
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        user_serializer = UserUpdateSerializer(request.user, data=request.data, partial=True)
        user_serializer.is_valid(raise_exception=True)

        profile_data = request.data.get('profile') or {}
        profile_serializer = None
        if profile_data:
            profile_serializer = ProfileUpdateSerializer(
                request.user.profile,
                data=profile_data,
                partial=True
            )
            profile_serializer.is_valid(raise_exception=True)

        user_serializer.save()
        if profile_serializer is not None:
            profile_serializer.save()

        request.user.profile.last_active_at = timezone.now()
        request.user.profile.save(update_fields=['last_active_at', 'updated_at'])

        return Response(UserSerializer(request.user).data)


class LogoutView(APIView):
    """
    Logout endpoint - blacklist refresh token.

    POST /api/auth/logout/
    Body: {"refresh": "..."}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get('refresh')
        if not refresh_token:
            raise ValidationError("Se requiere el token de actualización", field='refresh')

        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as e:
            raise ValidationError(str(e), field='refresh')

        record_audit(request.user, 'logout', 'user', request.user.pk)
        return success_response(message="Sesión cerrada")


# =============================================================================
# Provinces & Audit Log
# =============================================================================

class ProvinceViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Dominican provinces.

    GET /api/provinces/
    GET /api/provinces/{slug}/
    """
    queryset = Province.objects.all().order_by('name')
    serializer_class = ProvinceSerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicBurstThrottle]
    pagination_class = None
    lookup_field = 'slug'


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Audit trail for administrators.

    GET /api/admin/audit-logs/?action=&entity_type=&entity_id=&actor=&success=
    GET /api/admin/audit-logs/summary/?days=7
    """
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_queryset(self):
        queryset = AuditLog.objects.select_related('actor')
        params = self.request.query_params

        action_name = params.get('action')
        if action_name:
            queryset = queryset.filter(action=action_name)

        entity_type = params.get('entity_type')
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)

        entity_id = params.get('entity_id')
        if entity_id:
            queryset = queryset.filter(entity_id=entity_id)

        actor = params.get('actor')
        if actor:
            queryset = queryset.filter(actor__username=actor)

        success = params.get('success')
        if success is not None:
            queryset = queryset.filter(success=success.lower() == 'true')

        return queryset.order_by('-created_at')

    @action(detail=False, methods=['get'])
    def summary(self, request):
        try:
            days = max(1, min(int(request.query_params.get('days', 7)), 90))
        except ValueError:
            raise ValidationError("days debe ser un número entero", field='days')
        return success_response(data=AuditLog.get_summary(days))
