"""Health checks for the service and its dependencies."""

import time

from django.core.cache import cache
from django.db import connection
from django.db.utils import OperationalError

import structlog
from redis.exceptions import RedisError

from core.enums import HealthStatus
from core.schemas.health import (
    DependencyHealth,
    LivenessResponse,
    ReadinessResponse,
)

logger = structlog.get_logger(__name__)

PROVIDER_DESYNC_CACHE_KEY = "health:provider_desync_count"
PROVIDER_DESYNC_UNRESOLVED_CACHE_KEY = "health:provider_desync_unresolved_count"


class HealthService:
    """Service for performing health checks with caching.

    Readiness reports the database, the cache (Redis) and the push provider.
    Provider desyncs (local subscriptions the provider rejected) are counted
    in the cache so every process reports the same number.
    """

    def __init__(self, cache_ttl_seconds: float = 5.0) -> None:
        """Initialize the health service.

        Args:
            cache_ttl_seconds: Time to live for cached database results
        """
        self.cache_ttl_seconds = cache_ttl_seconds
        self._db_health_cache: DependencyHealth | None = None
        self._db_health_cache_time: float = 0.0
        self._push_dispatcher = None

    def set_push_dispatcher(self, dispatcher) -> None:
        """Set the push dispatcher whose configuration is reported."""
        self._push_dispatcher = dispatcher

    def get_liveness_status(self) -> LivenessResponse:
        """Liveness never checks dependencies."""
        return LivenessResponse(status="alive")

    def get_readiness_status(self) -> ReadinessResponse:
        """Readiness with dependency health.

        Unhealthy dependencies degrade the service but keep it ready.
        """
        dependencies = {
            "database": self.check_database_health(),
            "cache": self.check_cache_health(),
            "push_provider": self.check_push_provider_health(),
        }
        degraded = not all(dep.healthy for dep in dependencies.values())

        return ReadinessResponse(
            ready=True,
            status="degraded" if degraded else "ready",
            degraded=degraded,
            dependencies=dependencies,
        )

    def check_database_health(self) -> DependencyHealth:
        """Check database connectivity, cached for ``cache_ttl_seconds``."""
        current_time = time.time()
        if (
            self._db_health_cache is not None
            and (current_time - self._db_health_cache_time) < self.cache_ttl_seconds
        ):
            return self._db_health_cache

        start_time = time.perf_counter()
        try:
            connection.ensure_connection()
            health = DependencyHealth(
                healthy=True,
                status=HealthStatus.HEALTHY,
                message="Database connection successful",
                response_time_ms=(time.perf_counter() - start_time) * 1000,
            )
        except OperationalError as e:
            logger.warning("database_unhealthy", error=str(e))
            health = DependencyHealth(
                healthy=False,
                status=HealthStatus.UNHEALTHY,
                message=f"Database connection failed: {e!s}",
                response_time_ms=(time.perf_counter() - start_time) * 1000,
            )

        self._db_health_cache = health
        self._db_health_cache_time = current_time
        return health

    def check_cache_health(self) -> DependencyHealth:
        """Round-trip a key through the cache."""
        start_time = time.perf_counter()
        try:
            cache.set("__health_check__", "ok", timeout=1)
            healthy = cache.get("__health_check__") == "ok"
            message = (
                "Cache connection successful"
                if healthy
                else "Cache health check failed: unexpected result"
            )
            status = HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY
        except Exception as e:
            logger.warning("cache_unhealthy", error=str(e))
            healthy = False
            message = f"Cache connection failed: {e!s}"
            status = HealthStatus.ERROR

        return DependencyHealth(
            healthy=healthy,
            status=status,
            message=message,
            response_time_ms=(time.perf_counter() - start_time) * 1000,
        )

    def check_push_provider_health(self) -> DependencyHealth:
        """Report provider configuration and unresolved desyncs."""
        desyncs = self.provider_desync_count()
        unresolved = self.unresolved_desync_count()
        tenants = (
            len(self._push_dispatcher.configured_tenants())
            if self._push_dispatcher is not None
            else 0
        )
        configured = f"{tenants} tenant(s) configured"
        if unresolved:
            configured += f"; {unresolved} unresolved provider desync(s)"
        if desyncs:
            return DependencyHealth(
                healthy=False,
                status=HealthStatus.DEGRADED,
                message=f"{desyncs} provider subscription desync(s) pending repair; "
                f"{configured}",
            )
        if not tenants:
            return DependencyHealth(
                healthy=False,
                status=HealthStatus.DISCONNECTED,
                message="No push provider configured",
            )
        return DependencyHealth(
            healthy=True,
            status=HealthStatus.HEALTHY,
            message=configured,
        )

    def record_provider_desync(self) -> None:
        """Count a subscription the provider rejected after local persistence."""
        self._count(PROVIDER_DESYNC_CACHE_KEY, 1)

    def resolve_provider_desync(self) -> None:
        """Count down a desync after its compensating call succeeded."""
        self._count(PROVIDER_DESYNC_CACHE_KEY, -1)

    def abandon_provider_desync(self) -> None:
        """Move a desync that will not be repaired to the unresolved gauge.

        Used when compensating retries run out, the provider rejects the call
        for good, or the retry could not be scheduled.
        """
        self._count(PROVIDER_DESYNC_CACHE_KEY, -1)
        self._count(PROVIDER_DESYNC_UNRESOLVED_CACHE_KEY, 1)

    def provider_desync_count(self) -> int:
        """Desyncs still waiting for a successful compensating call."""
        return self._read(PROVIDER_DESYNC_CACHE_KEY)

    def unresolved_desync_count(self) -> int:
        """Desyncs given up on since the cache was last cleared."""
        return self._read(PROVIDER_DESYNC_UNRESOLVED_CACHE_KEY)

    @staticmethod
    def _read(key: str) -> int:
        try:
            return int(cache.get(key) or 0)
        except RedisError as e:
            logger.warning("health_counter_unavailable", key=key, error=str(e))
            return 0

    @staticmethod
    def _count(key: str, delta: int) -> None:
        """Add ``delta`` to a counter without letting it go negative."""
        try:
            if delta > 0:
                if not cache.add(key, delta, timeout=None):
                    cache.incr(key, delta)
            elif int(cache.get(key) or 0) > 0:
                cache.decr(key, -delta)
        except (RedisError, ValueError) as e:
            # ValueError: the key expired between the check and the update
            logger.warning("health_counter_update_failed", key=key, error=str(e))


health_service = HealthService()
