from fastapi import APIRouter
from sqlalchemy import text

from app.database import engine
from app.utils.cache import redis_client

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Answers as long as the process is up."
)
def health_check():
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Reports whether the database and Redis answer. Redis down only degrades caching."
)
def readiness_check():
    checks = {"database": False, "redis": False}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    try:
        checks["redis"] = bool(redis_client.ping())
    except Exception as e:
        checks["redis_error"] = str(e)

    ready = checks["database"] and checks["redis"]
    return {"status": "ready" if ready else "not_ready", "checks": checks}
