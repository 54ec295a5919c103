"""Database health checks for the liveness and readiness endpoints."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..infra.database import DatabaseEngines
from ..logging_config import get_logger

logger = get_logger("services.health")

HEALTHY = "Healthy"
DEGRADED = "Degraded"
UNHEALTHY = "Unhealthy"

# Worst status wins when checks are combined.
_SEVERITY = {HEALTHY: 0, DEGRADED: 1, UNHEALTHY: 2}


@dataclass(frozen=True)
class HealthCheck:
    name: str
    engine: Engine
    tags: tuple[str, ...]
    failure_status: str = DEGRADED


@dataclass
class HealthCheckResult:
    name: str
    status: str
    duration_ms: float
    description: Optional[str]
    tags: tuple[str, ...]
    exception: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "duration": self.duration_ms,
            "description": self.description,
            "tags": list(self.tags),
            "exception": self.exception,
        }


@dataclass
class HealthReport:
    status: str
    total_duration_ms: float
    timestamp: datetime
    results: list[HealthCheckResult] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        """Degraded still serves traffic; only Unhealthy takes the app out."""
        return self.status != UNHEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "totalDuration": self.total_duration_ms,
            "timestamp": self.timestamp.isoformat(),
            "results": [result.to_dict() for result in self.results],
        }


def default_checks(engines: DatabaseEngines) -> list[HealthCheck]:
    return [
        HealthCheck("user-database", engines.user, ("database", "user")),
        HealthCheck("expense-database", engines.expense, ("database", "expense")),
    ]


def _run_check(check: HealthCheck) -> HealthCheckResult:
    started = time.perf_counter()
    try:
        with check.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning(
            "Health check failed", extra={"check": check.name, "error": str(exc)}
        )
        return HealthCheckResult(
            name=check.name,
            status=check.failure_status,
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
            description="Database connection failed",
            tags=check.tags,
            exception=str(exc),
        )
    return HealthCheckResult(
        name=check.name,
        status=HEALTHY,
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
        description=None,
        tags=check.tags,
    )


def run_health_checks(
    checks: Iterable[HealthCheck], *, tag: Optional[str] = None
) -> HealthReport:
    """Run every check (or those carrying ``tag``) and combine their status."""

    started = time.perf_counter()
    selected = [check for check in checks if tag is None or tag in check.tags]
    results = [_run_check(check) for check in selected]
    status = HEALTHY
    for result in results:
        if _SEVERITY[result.status] > _SEVERITY[status]:
            status = result.status
    return HealthReport(
        status=status,
        total_duration_ms=round((time.perf_counter() - started) * 1000, 3),
        timestamp=datetime.now(timezone.utc),
        results=results,
    )
