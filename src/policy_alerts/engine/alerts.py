# src/policy_alerts/engine/alerts.py
"""
Generador de alertas de pago y renovación.

Recorre la cartera completa en cada llamada y devuelve una lista nueva,
ordenada por urgencia. No guarda estado entre llamadas: cualquier alerta
"vista" o "descartada" la filtra quien consume la lista usando `Alert.id`.
"""
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Set, Tuple, Union

from policy_alerts.engine.payment_status import classify
from policy_alerts.models.alert import Alert
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import AlertConfig, AlertKind, Bucket, Severity
from policy_alerts.utils.dates import as_date, days_between, parse_date

logger = logging.getLogger(__name__)


def _bucket_for(days_until_due: int, buckets: List[tuple], horizon: int) -> Optional[Bucket]:
    if days_until_due > horizon:
        return None
    if days_until_due < 0:
        return Bucket.OVERDUE
    for limit, bucket in buckets:
        if days_until_due <= limit:
            return bucket
    return None


def payment_bucket(days_until_due: int) -> Optional[Bucket]:
    """Ventana de alerta de pago; None si está fuera del horizonte de 30 días."""
    return _bucket_for(days_until_due, AlertConfig.PAYMENT_BUCKETS, AlertConfig.PAYMENT_HORIZON_DAYS)


def renewal_bucket(days_until_due: int) -> Optional[Bucket]:
    """Ventana de alerta de renovación; None fuera del horizonte de 45 días."""
    return _bucket_for(days_until_due, AlertConfig.RENEWAL_BUCKETS, AlertConfig.RENEWAL_HORIZON_DAYS)


def payment_kind(days_until_due: int) -> AlertKind:
    if days_until_due < -AlertConfig.CRITICAL_OVERDUE_DAYS:
        return AlertKind.PAYMENT_OVERDUE_CRITICAL
    if days_until_due < 0:
        return AlertKind.PAYMENT_OVERDUE
    return AlertKind.PAYMENT_DUE


def payment_severity(bucket: Bucket, days_until_due: int) -> Severity:
    if bucket == Bucket.OVERDUE and days_until_due < -AlertConfig.CRITICAL_OVERDUE_DAYS:
        return Severity.CRITICAL
    return AlertConfig.PAYMENT_SEVERITY[bucket]


def _is_eligible(policy: PolicyRecord) -> bool:
    return policy.status not in AlertConfig.NON_ALERTING_STATUSES


def _build_alert(
    family: str,
    policy: PolicyRecord,
    kind: AlertKind,
    severity: Severity,
    bucket: Bucket,
    days_until_due: int,
    due_date: date,
) -> Alert:
    return Alert(
        id=f"{family}-{policy.id}-{bucket.value}",
        policy_id=policy.id,
        policy_number=policy.policy_number,
        holder_name=policy.holder_name,
        kind=kind,
        severity=severity,
        bucket_category=bucket,
        days_until_due=days_until_due,
        due_date=due_date,
        amount=policy.total_amount,
        is_persistent=bucket in AlertConfig.PERSISTENT_BUCKETS,
        priority=AlertConfig.BUCKET_PRIORITY[bucket],
    )


def payment_alert(policy: PolicyRecord, today: Union[date, datetime]) -> Optional[Alert]:
    if not _is_eligible(policy):
        return None

    classification = classify(policy, today)
    if classification.days_until_due is None or classification.next_due_date is None:
        return None

    days_until_due = classification.days_until_due
    bucket = payment_bucket(days_until_due)
    if bucket is None:
        return None

    return _build_alert(
        "payment",
        policy,
        payment_kind(days_until_due),
        payment_severity(bucket, days_until_due),
        bucket,
        days_until_due,
        classification.next_due_date,
    )


def renewal_alert(policy: PolicyRecord, today: Union[date, datetime]) -> Optional[Alert]:
    if not _is_eligible(policy):
        return None

    expiration = parse_date(policy.expiration_date)
    if expiration is None:
        if policy.expiration_date:
            logger.debug(
                f"Fecha de vencimiento ilegible en póliza {policy.id}: {policy.expiration_date!r}"
            )
        return None

    days_until_due = days_between(as_date(today), expiration)
    bucket = renewal_bucket(days_until_due)
    if bucket is None:
        return None

    kind = AlertKind.RENEWAL_OVERDUE if days_until_due < 0 else AlertKind.RENEWAL_UPCOMING
    return _build_alert(
        "renewal",
        policy,
        kind,
        AlertConfig.RENEWAL_SEVERITY[bucket],
        bucket,
        days_until_due,
        expiration,
    )


def sort_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """Prioridad ascendente (0 = más crítica), después días hasta el vencimiento."""
    return sorted(alerts, key=lambda a: (a.priority, a.days_until_due))


def generate_alerts(policies: Iterable[PolicyRecord], today: Union[date, datetime]) -> List[Alert]:
    """
    Genera las alertas de pago y renovación de toda la cartera.

    Args:
        policies: Pólizas tal como las entrega la capa de datos
        today: Fecha de referencia; el motor no consulta el reloj

    Returns:
        Lista ordenada sin duplicados: a lo sumo una alerta por (póliza, tipo)
    """
    today = as_date(today)
    alerts: List[Alert] = []
    # una póliza repetida en la entrada sólo produce una alerta por familia
    seen: Set[Tuple[str, str]] = set()

    for policy in policies:
        for family, build in (("payment", payment_alert), ("renewal", renewal_alert)):
            alert = build(policy, today)
            if alert is None:
                continue
            key = (alert.policy_id, family)
            if key in seen:
                continue
            seen.add(key)
            alerts.append(alert)

    return sort_alerts(alerts)
