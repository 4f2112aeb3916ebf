"""
URL patterns for core app health, auth, provinces and audit-log endpoints.
"""

from django.urls import include, path

from config.routers import SafeDefaultRouter
from apps.core.metrics import metrics_view
from .views import (
    AuditLogViewSet,
    HealthCheckView,
    LivenessView,
    ReadinessView,
    StatusView,
    CustomTokenObtainPairView,
    CustomTokenRefreshView,
    CurrentUserView,
    LogoutView,
    ProvinceViewSet,
)

app_name = 'core'

urlpatterns = [
    # Health checks
    path('health/', HealthCheckView.as_view(), name='health'),
    path('health/<str:check_name>/', HealthCheckView.as_view(), name='health-check'),

    # Probes
    path('livez/', LivenessView.as_view(), name='liveness'),
    path('readyz/', ReadinessView.as_view(), name='readiness'),

    # Prometheus
    path('metrics/', metrics_view, name='metrics'),

    # Status
    path('status/', StatusView.as_view(), name='status'),
]

# Auth URLs - mounted at /api/auth/ in main urls.py
auth_urlpatterns = [
    path('login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('me/', CurrentUserView.as_view(), name='current_user'),
    path('logout/', LogoutView.as_view(), name='logout'),
]

province_router = SafeDefaultRouter()
province_router.register(r'', ProvinceViewSet, basename='province')

# Mounted at /api/provinces/
province_urlpatterns = [
    path('', include(province_router.urls)),
]

audit_router = SafeDefaultRouter()
audit_router.register(r'', AuditLogViewSet, basename='audit-log')

# Mounted at /api/admin/audit-logs/
audit_urlpatterns = [
    path('', include(audit_router.urls)),
]
