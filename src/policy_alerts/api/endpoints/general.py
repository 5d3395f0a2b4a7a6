from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from policy_alerts.api.dependencies import get_log_store
from policy_alerts.settings import API_VERSION
from policy_alerts.storage.policy_log import PolicyLogStore

router = APIRouter(tags=["General"])


@router.get("/")
async def root():
    """Endpoint raíz con información de la API"""
    return {
        "message": "Alertas de Cobranza y Renovación - API v1",
        "status": "active",
        "endpoints": {
            "health": "/health",
            "alerts": "/api/v1/alerts",
            "logs": "/api/v1/logs",
            "docs": "/docs",
        },
    }


@router.get("/health")
async def health_check(store: PolicyLogStore = Depends(get_log_store)):
    """Health check endpoint"""
    try:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": {
                "api": "running",
                "log_store": "available" if store.db_path.exists() else "not_initialized",
            },
            "version": API_VERSION,
        }
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": str(e)},
        )
