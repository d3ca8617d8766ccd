# api/v1/routers/health.py
import subprocess
import time

from fastapi import APIRouter

from shopreco.api.deps import ContainerDep

router = APIRouter(tags=["health"])
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except Exception:
        return "unknown"


@router.get("/health")
async def health(container: ContainerDep):
    """
    Tolerant health check:
    - Mongo ping
    - Redis 'skipped' when not configured, plus cache hit/miss/error counters
    - classifier mode (remote with keyword fallback, or keyword only)
    """
    settings = container.settings
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
    }

    # --- Mongo ---
    try:
        await container.db.command("ping")
        checks["mongodb"] = "ok"
    except Exception as e:
        checks["mongodb"] = f"error: {e}"

    # --- Redis (tolerant) ---
    checks["redis"] = await container.cache.ping()
    checks["cache_stats"] = dict(container.cache.stats)

    checks["classifier"] = "remote+keyword" if settings.OPENAI_API_KEY else "keyword"

    health_keys = ("mongodb", "redis")
    status = "ok" if all(checks.get(k) in ("ok", "skipped") for k in health_keys) else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
