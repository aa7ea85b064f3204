"""
Liveness and readiness probes.
"""

import time
from typing import Any

from fastapi import APIRouter

from wink.config import settings
from wink.db.pool import db_health_check
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz():
    """The process is up; no dependencies are touched."""
    return {"status": "ok", "service": "wink"}


@router.get("/readyz")
async def readyz():
    """Ready when the database answers and the required settings are present."""
    checks = {
        "database": await _database_check(),
        "configuration": _configuration_check(),
    }
    overall_ok = all(check["ok"] for check in checks.values())
    if not overall_ok:
        failing = [name for name, check in checks.items() if not check["ok"]]
        logger.warning("Readiness check failed", failing=failing)
    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}


async def _database_check() -> dict[str, Any]:
    started = time.perf_counter()
    try:
        health = await db_health_check()
    except Exception as e:
        health = {"healthy": False, "error": f"{type(e).__name__}: {e}"}

    check: dict[str, Any] = {
        "ok": bool(health.get("healthy")),
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
    }
    stats = health.get("pool_stats")
    if stats:
        check["pool_size"] = stats.get("pool_size", 0)
        check["pool_available"] = stats.get("pool_available", 0)
    if not check["ok"]:
        check["error"] = health.get("error", "Database unhealthy")
    return check


def _configuration_check() -> dict[str, Any]:
    issues = []
    if not settings.SUPABASE_DB_URL:
        issues.append("SUPABASE_DB_URL not set")
    if not settings.SUPABASE_URL and not settings.SUPABASE_JWKS_URL:
        issues.append("SUPABASE_URL or SUPABASE_JWKS_URL must be set")
    return {"ok": not issues, "issues": issues or None, "environment": settings.environment}
