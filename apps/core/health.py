"""
Health checks for SafraReport.

A registry of named checks run by the /health/ and /readyz/ endpoints.
"""

import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List

from django.conf import settings
from django.utils import timezone


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0


class HealthChecker:
    """
    Health check registry and executor.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._checks = {}
        return cls._instance

    def register(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> None:
        """Register a health check under a unique name."""
        self._checks[name] = check_fn

    def check(self, name: str) -> HealthCheckResult:
        """Run a specific health check."""
        if name not in self._checks:
            return HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Unknown check: {name}",
            )

        start = time.perf_counter()
        try:
            result = self._checks[name]()
        except Exception as e:
            result = HealthCheckResult(name=name, status=HealthStatus.UNHEALTHY, message=str(e))
        result.duration_ms = (time.perf_counter() - start) * 1000
        return result

    def check_all(self, names: List[str] = None) -> Dict[str, Any]:
        """Run the named checks (all when ``names`` is None)."""
        results = {}
        overall_status = HealthStatus.HEALTHY

        for name in names or list(self._checks):
            result = self.check(name)
            results[name] = {
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": round(result.duration_ms, 2),
            }

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status != HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status.value,
            "checks": results,
            "timestamp": timezone.now().isoformat(),
        }

    def list_checks(self) -> List[str]:
        return list(self._checks.keys())


health_checker = HealthChecker()


# =============================================================================
# Built-in Health Checks
# =============================================================================

def check_database() -> HealthCheckResult:
    """Check database connectivity."""
    from django.db import connection, DatabaseError

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return HealthCheckResult(
            name="database",
            status=HealthStatus.HEALTHY,
            message="Database connection successful",
        )
    except DatabaseError as e:
        return HealthCheckResult(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message=f"Database error: {e}",
        )


def check_cache() -> HealthCheckResult:
    """Check the cache backend (Redis in deployed environments)."""
    from django.core.cache import cache

    try:
        cache.set("health_check", "ok", 10)
        if cache.get("health_check") == "ok":
            return HealthCheckResult(
                name="cache",
                status=HealthStatus.HEALTHY,
                message="Cache connection successful",
            )
        return HealthCheckResult(
            name="cache",
            status=HealthStatus.DEGRADED,
            message="Cache get/set mismatch",
        )
    except Exception as e:
        return HealthCheckResult(
            name="cache",
            status=HealthStatus.UNHEALTHY,
            message=f"Cache error: {e}",
        )


def check_celery() -> HealthCheckResult:
    """Check Celery worker availability."""
    from config.celery import app

    try:
        active = app.control.inspect(timeout=1.0).active()
    except Exception as e:
        return HealthCheckResult(
            name="celery",
            status=HealthStatus.DEGRADED,
            message=f"Celery error: {e}",
        )

    if active:
        return HealthCheckResult(
            name="celery",
            status=HealthStatus.HEALTHY,
            message=f"{len(active)} worker(s) active",
            details={"worker_count": len(active)},
        )
    return HealthCheckResult(
        name="celery",
        status=HealthStatus.DEGRADED,
        message="No active Celery workers",
    )


def check_review_backlog() -> HealthCheckResult:
    """Degrade when articles wait in review longer than the configured SLA."""
    from apps.articles.models import Article

    sla_hours = getattr(settings, 'EDITORIAL_REVIEW_SLA_HOURS', 48)
    cutoff = timezone.now() - timedelta(hours=sla_hours)
    stale = Article.objects.filter(status='pending_review', submitted_at__lt=cutoff).count()

    return HealthCheckResult(
        name="review_backlog",
        status=HealthStatus.DEGRADED if stale else HealthStatus.HEALTHY,
        message=f"{stale} article(s) waiting more than {sla_hours}h" if stale else "Review queue within SLA",
        details={"stale_count": stale, "sla_hours": sla_hours},
    )


def register_default_checks():
    """Register built-in health checks."""
    health_checker.register("database", check_database)
    health_checker.register("cache", check_cache)
    health_checker.register("celery", check_celery)
    health_checker.register("review_backlog", check_review_backlog)
