# src/policy_alerts/engine/statistics.py
"""
Contadores para los indicadores del tablero de cobranza.
"""
from collections import Counter
from datetime import date, datetime
from typing import Iterable, Union

from policy_alerts.engine.alerts import renewal_bucket
from policy_alerts.engine.payment_status import payment_standing
from policy_alerts.models.alert import (
    Alert,
    AlertStatistics,
    LifeProductStatistics,
    PaymentStatistics,
    RenewalStatistics,
)
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import AlertConfig, Bucket
from policy_alerts.utils.dates import as_date, days_between, parse_date


def aggregate(alerts: Iterable[Alert]) -> AlertStatistics:
    """Pliega la lista de alertas en contadores por severidad, ventana y tipo."""
    by_severity: Counter = Counter()
    by_bucket: Counter = Counter()
    by_kind: Counter = Counter()
    total = 0
    persistent = 0

    for alert in alerts:
        total += 1
        by_severity[alert.severity.value] += 1
        by_bucket[alert.bucket_category.value] += 1
        by_kind[alert.kind.value] += 1
        if alert.is_persistent:
            persistent += 1

    return AlertStatistics(
        total=total,
        by_severity=dict(by_severity),
        by_bucket=dict(by_bucket),
        by_kind=dict(by_kind),
        persistent_count=persistent,
    )


def payment_statistics(
    policies: Iterable[PolicyRecord], today: Union[date, datetime]
) -> PaymentStatistics:
    stats = {
        "total": 0,
        "current": 0,
        "due_soon": 0,
        "overdue": 0,
        "critical": 0,
        "total_amount": 0.0,
        "overdue_amount": 0.0,
    }

    for policy in policies:
        standing = payment_standing(policy, today)
        amount = policy.total_amount

        stats["total"] += 1
        stats["total_amount"] += amount
        stats[standing] += 1
        if standing in ("overdue", "critical"):
            stats["overdue_amount"] += amount

    return PaymentStatistics(**stats)


def renewal_statistics(
    policies: Iterable[PolicyRecord], today: Union[date, datetime]
) -> RenewalStatistics:
    """
    Próximas renovaciones por ventana y contadores de productos de vida.

    Las pólizas canceladas cuentan en el total pero no en las ventanas.
    """
    today = as_date(today)
    upcoming = {bucket.value: 0 for bucket in (
        Bucket.DAYS_45, Bucket.DAYS_30, Bucket.DAYS_15, Bucket.DAYS_7, Bucket.OVERDUE
    )}
    total = 0
    life_total = 0
    life_upcoming = 0

    for policy in policies:
        total += 1
        is_life = (policy.line_of_business or "").strip().lower() == AlertConfig.LIFE_LINE_OF_BUSINESS
        if is_life:
            life_total += 1

        if policy.status in AlertConfig.NON_ALERTING_STATUSES:
            continue
        expiration = parse_date(policy.expiration_date)
        if expiration is None:
            continue

        days = days_between(today, expiration)
        bucket = renewal_bucket(days)
        if bucket is None:
            continue
        upcoming[bucket.value] += 1
        if is_life:
            life_upcoming += 1

    return RenewalStatistics(
        total_policies=total,
        upcoming=upcoming,
        life_products=LifeProductStatistics(total=life_total, upcoming_renewals=life_upcoming),
    )
