"""
API Endpoints para la bitácora de actividad de pólizas
"""
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from policy_alerts.api.dependencies import get_log_store
from policy_alerts.models.logs import LogAction
from policy_alerts.settings import LOG_PAGE_SIZE
from policy_alerts.storage.policy_log import PolicyLogStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/logs", tags=["logs"])


class LogCreateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    policy_id: str
    action: str
    description: str
    performed_by: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


def _parse_action(action: Optional[str]) -> Optional[LogAction]:
    if action is None:
        return None
    try:
        return LogAction(action)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Acción inválida: {action}")


@router.get("")
async def list_logs(
    action: Optional[str] = None,
    performed_by: Optional[str] = Query(None, alias="performedBy"),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = Query(LOG_PAGE_SIZE, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: PolicyLogStore = Depends(get_log_store),
):
    entries = store.get_logs(
        action=_parse_action(action),
        performed_by=performed_by,
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )
    return {
        "logs": [e.model_dump(mode="json", by_alias=True) for e in entries],
        "limit": limit,
        "offset": offset,
    }


@router.get("/statistics")
async def log_statistics(store: PolicyLogStore = Depends(get_log_store)):
    return store.get_statistics().model_dump(by_alias=True)


@router.get("/policies/{policy_id}")
async def policy_logs(
    policy_id: str,
    limit: int = Query(LOG_PAGE_SIZE, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: PolicyLogStore = Depends(get_log_store),
):
    entries = store.get_policy_logs(policy_id, limit=limit, offset=offset)
    return {
        "policyId": policy_id,
        "logs": [e.model_dump(mode="json", by_alias=True) for e in entries],
    }


@router.post("", status_code=201)
async def create_log(
    request: LogCreateRequest,
    store: PolicyLogStore = Depends(get_log_store),
):
    action = _parse_action(request.action)
    try:
        entry = store.create_log(
            request.policy_id,
            action,
            request.description,
            request.performed_by,
            old_value=request.old_value,
            new_value=request.new_value,
            metadata=request.metadata,
        )
    except Exception as e:
        logger.error(f"No se pudo registrar el log: {e}")
        raise HTTPException(status_code=500, detail="No se pudo registrar el log")
    return entry.model_dump(mode="json", by_alias=True)
