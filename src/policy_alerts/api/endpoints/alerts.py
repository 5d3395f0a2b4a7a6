"""
API Endpoints para alertas de cobranza y renovación
"""
from datetime import date
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from policy_alerts.api.dependencies import get_log_store
from policy_alerts.engine.alerts import generate_alerts
from policy_alerts.engine.messages import alert_message
from policy_alerts.engine.payment_status import mark_payment_confirmed, resolve_status
from policy_alerts.engine.statistics import aggregate, payment_statistics, renewal_statistics
from policy_alerts.models.logs import LogAction
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.storage.policy_log import PolicyLogStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["alerts"])


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PortfolioRequest(_Request):
    policies: List[PolicyRecord] = Field(default_factory=list)
    today: Optional[date] = None  # si no viene, se usa la fecha del servidor


class ConfirmPaymentRequest(_Request):
    policy: PolicyRecord
    paid_on: Optional[date] = None
    performed_by: str = "sistema"


def _today(requested: Optional[date]) -> date:
    return requested or date.today()


@router.post("/alerts")
async def list_alerts(request: PortfolioRequest):
    """
    Genera las alertas de pago y renovación de la cartera recibida

    Returns:
        Alertas ordenadas por urgencia (con mensaje para mostrar) y sus contadores
    """
    today = _today(request.today)
    alerts = generate_alerts(request.policies, today)
    logger.info(f"{len(alerts)} alertas generadas para {len(request.policies)} pólizas ({today})")

    return {
        "today": today.isoformat(),
        "alerts": [
            {**a.model_dump(mode="json", by_alias=True), "message": alert_message(a)}
            for a in alerts
        ],
        "statistics": aggregate(alerts).model_dump(by_alias=True),
    }


@router.post("/payments/status")
async def payment_status(request: PortfolioRequest):
    """Clasificación de pago y estado visible de cada póliza"""
    today = _today(request.today)
    return {
        "today": today.isoformat(),
        "policies": [
            resolve_status(p, today).model_dump(mode="json", by_alias=True)
            for p in request.policies
        ],
    }


@router.post("/payments/statistics")
async def payments_statistics(request: PortfolioRequest):
    today = _today(request.today)
    return payment_statistics(request.policies, today).model_dump(by_alias=True)


@router.post("/renewals/statistics")
async def renewals_statistics(request: PortfolioRequest):
    today = _today(request.today)
    return renewal_statistics(request.policies, today).model_dump(by_alias=True)


@router.post("/payments/confirm")
async def confirm_payment(
    request: ConfirmPaymentRequest,
    store: PolicyLogStore = Depends(get_log_store),
):
    """
    Marca el pago de una póliza como recibido y lo registra en la bitácora
    """
    paid_on = _today(request.paid_on)
    updated = mark_payment_confirmed(request.policy, paid_on)

    store.log_payment(
        request.policy,
        request.policy.total_amount,
        paid_on.isoformat(),
        request.performed_by,
    )
    if request.policy.status != updated.status:
        store.log_policy_change(
            request.policy,
            LogAction.STATUS_CHANGED,
            request.performed_by,
            old_value=request.policy.status.value,
            new_value=updated.status.value,
        )
    logger.info(f"Pago confirmado para póliza {request.policy.id} ({paid_on})")

    return {"policy": updated.model_dump(mode="json", by_alias=True)}
