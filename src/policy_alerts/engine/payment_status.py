# src/policy_alerts/engine/payment_status.py
"""
Clasificador de estado de pago.

Calcula la próxima fecha de pago a partir del último pago y la forma de pago,
y deriva un estado discreto (al corriente, por vencer, vencido, vencido
crítico). Todas las funciones son puras: reciben la fecha de hoy y nunca
modifican la póliza recibida.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from policy_alerts.models.alert import PaymentClassification, PolicyPaymentStatus
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import AlertConfig, PaymentFrequency, PaymentState, PolicyStatus
from policy_alerts.utils.dates import as_date, days_between, parse_date

logger = logging.getLogger(__name__)

PENDING_PAYMENT_STATES = {
    PaymentState.DUE_SOON,
    PaymentState.OVERDUE,
    PaymentState.OVERDUE_CRITICAL,
}

STATE_FILTERS = ("all", "current", "due_soon", "overdue", "critical")


def resolve_frequency(payment_frequency: Optional[str]) -> Optional[PaymentFrequency]:
    """Acepta el valor canónico o la etiqueta en español (Mensual, Anual...)."""
    if not payment_frequency:
        return None
    key = str(payment_frequency).strip().lower()
    try:
        return PaymentFrequency(key)
    except ValueError:
        return AlertConfig.FREQUENCY_ALIASES.get(key)


def frequency_days(payment_frequency: Optional[str]) -> int:
    frequency = resolve_frequency(payment_frequency)
    if frequency is None:
        return AlertConfig.DEFAULT_FREQUENCY_DAYS
    return AlertConfig.FREQUENCY_DAYS[frequency]


def next_due_date(last_payment: date, payment_frequency: Optional[str]) -> date:
    return last_payment + timedelta(days=frequency_days(payment_frequency))


def state_for_days(days_until_due: int) -> PaymentState:
    if days_until_due < -AlertConfig.CRITICAL_OVERDUE_DAYS:
        return PaymentState.OVERDUE_CRITICAL
    if days_until_due < 0:
        return PaymentState.OVERDUE
    if days_until_due <= AlertConfig.DUE_SOON_DAYS:
        return PaymentState.DUE_SOON
    return PaymentState.CURRENT


def classify(policy: PolicyRecord, today: Union[date, datetime]) -> PaymentClassification:
    """
    Clasifica el estado de pago de una póliza.

    Si no hay fecha de último pago (o no se puede interpretar) el estado es
    `unknown` y el generador no emitirá alerta de pago para esa póliza.
    """
    last_payment = parse_date(policy.last_payment_date)
    if last_payment is None:
        if policy.last_payment_date:
            logger.debug(
                f"Fecha de pago ilegible en póliza {policy.id}: {policy.last_payment_date!r}"
            )
        return PaymentClassification(state=PaymentState.UNKNOWN)

    due = next_due_date(last_payment, policy.payment_frequency)
    days_until_due = days_between(as_date(today), due)
    return PaymentClassification(
        next_due_date=due,
        days_until_due=days_until_due,
        state=state_for_days(days_until_due),
    )


def resolve_status(policy: PolicyRecord, today: Union[date, datetime]) -> PolicyPaymentStatus:
    """
    Estado visible de la póliza tras clasificar su pago.

    - Más de 7 días de retraso: `overdue_critical`.
    - 1 a 7 días de retraso: sigue `active`, sólo se marca el pago pendiente.
    - Cualquier otro caso conserva el estado actual.
    Las pólizas canceladas o expiradas nunca se reescriben.
    """
    classification = classify(policy, today)
    status = policy.status

    if policy.status not in AlertConfig.FROZEN_STATUSES:
        if classification.state == PaymentState.OVERDUE_CRITICAL:
            status = PolicyStatus.OVERDUE_CRITICAL
        elif classification.state == PaymentState.OVERDUE:
            status = PolicyStatus.ACTIVE

    return PolicyPaymentStatus(
        policy_id=policy.id,
        classification=classification,
        status=status,
        has_pending_payment=classification.state in PENDING_PAYMENT_STATES,
    )


def update_policy_statuses(
    policies: Iterable[PolicyRecord], today: Union[date, datetime]
) -> List[PolicyRecord]:
    """Devuelve copias con el estado y la marca de pago pendiente recalculados."""
    updated = []
    for policy in policies:
        resolved = resolve_status(policy, today)
        updated.append(
            policy.model_copy(
                update={
                    "status": resolved.status,
                    "has_pending_payment": resolved.has_pending_payment,
                }
            )
        )
    return updated


_STANDING_BY_STATE = {
    PaymentState.DUE_SOON: "due_soon",
    PaymentState.OVERDUE: "overdue",
    PaymentState.OVERDUE_CRITICAL: "critical",
}


def payment_standing(policy: PolicyRecord, today: Union[date, datetime]) -> str:
    """
    Situación de cobranza de la póliza: current, due_soon, overdue o critical.

    Es la misma regla para el filtro por estado y para las estadísticas de
    pago. Las pólizas canceladas o vencidas ya no tienen cobro pendiente y
    cuentan como al corriente.
    """
    if policy.status in AlertConfig.FROZEN_STATUSES:
        return "current"
    resolved = resolve_status(policy, today)
    if resolved.status == PolicyStatus.OVERDUE_CRITICAL:
        return "critical"
    return _STANDING_BY_STATE.get(resolved.classification.state, "current")


def filter_policies_by_payment_state(
    policies: Iterable[PolicyRecord],
    today: Union[date, datetime],
    state_filter: str = "all",
) -> List[PolicyRecord]:
    if state_filter not in STATE_FILTERS:
        raise ValueError(f"Filtro de estado inválido: {state_filter}")
    policies = list(policies)
    if state_filter == "all":
        return policies
    return [
        policy
        for policy in policies
        if payment_standing(policy, today) == state_filter
    ]


def mark_payment_confirmed(policy: PolicyRecord, paid_on: Union[date, datetime]) -> PolicyRecord:
    """Registra el pago: nueva fecha de último pago y póliza activa de nuevo."""
    return policy.model_copy(
        update={
            "last_payment_date": as_date(paid_on).isoformat(),
            "status": PolicyStatus.ACTIVE,
            "has_pending_payment": False,
        }
    )
