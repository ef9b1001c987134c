"""System API routes (health, logs)"""

from datetime import datetime, timezone

from fastapi import APIRouter, Query

from ..services.log_service import log_service

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health")
async def health_check():
    """Liveness check"""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/system/logs")
async def get_logs(
    type: str = Query("error", pattern="^(error|info|llm)$"),
    limit: int = Query(100, ge=1, le=1000),
):
    """Get recent log entries"""
    logs = log_service.get_logs(type, limit)
    return {"success": True, "logType": type, "lines": logs, "count": len(logs)}
