#!/usr/bin/env python3
"""
Pruebas del generador de alertas de pago y renovación
"""

import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

import pytest

from policy_alerts.engine.alerts import generate_alerts, payment_bucket, renewal_bucket
from policy_alerts.engine.messages import alert_message
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import AlertKind, Bucket, Severity

TODAY = date(2024, 6, 20)


def payment_policy(days: int, policy_id: str = "p1", **extra) -> PolicyRecord:
    """Póliza mensual con el próximo pago a `days` días de TODAY."""
    return PolicyRecord(
        id=policy_id,
        policy_number=f"POL-{policy_id}",
        holder_name="Juan Pérez",
        payment_frequency="monthly",
        last_payment_date=(TODAY + timedelta(days=days - 30)).isoformat(),
        total_amount=1500.0,
        **extra,
    )


def renewal_policy(days: int, policy_id: str = "r1", **extra) -> PolicyRecord:
    """Póliza sin pagos registrados que vence a `days` días de TODAY."""
    return PolicyRecord(
        id=policy_id,
        policy_number=f"POL-{policy_id}",
        expiration_date=(TODAY + timedelta(days=days)).isoformat(),
        **extra,
    )


def test_portfolio_example():
    p1 = PolicyRecord(id="P1", policy_number="A-1", payment_frequency="monthly",
                      last_payment_date="2024-05-22")
    p2 = PolicyRecord(id="P2", policy_number="A-2", payment_frequency="monthly",
                      last_payment_date="2024-04-01")
    alerts = generate_alerts([p1, p2], TODAY)
    by_policy = {a.policy_id: a for a in alerts}

    a1 = by_policy["P1"]
    assert a1.bucket_category == Bucket.DAYS_7
    assert a1.severity == Severity.ERROR
    assert a1.is_persistent is True
    assert a1.due_date == date(2024, 6, 21)

    a2 = by_policy["P2"]
    assert a2.bucket_category == Bucket.OVERDUE
    assert a2.severity == Severity.CRITICAL
    assert a2.kind == AlertKind.PAYMENT_OVERDUE_CRITICAL
    assert a2.days_until_due == -50

    # la vencida va primero
    assert [a.policy_id for a in alerts] == ["P2", "P1"]


@pytest.mark.parametrize(
    "days, bucket, severity, persistent, kind",
    [
        (30, Bucket.DAYS_30, Severity.INFO, False, AlertKind.PAYMENT_DUE),
        (16, Bucket.DAYS_30, Severity.INFO, False, AlertKind.PAYMENT_DUE),
        (15, Bucket.DAYS_15, Severity.WARNING, False, AlertKind.PAYMENT_DUE),
        (10, Bucket.DAYS_10, Severity.WARNING, False, AlertKind.PAYMENT_DUE),
        (7, Bucket.DAYS_7, Severity.ERROR, True, AlertKind.PAYMENT_DUE),
        (0, Bucket.DAYS_7, Severity.ERROR, True, AlertKind.PAYMENT_DUE),
        (-3, Bucket.OVERDUE, Severity.ERROR, True, AlertKind.PAYMENT_OVERDUE),
        (-7, Bucket.OVERDUE, Severity.ERROR, True, AlertKind.PAYMENT_OVERDUE),
        (-8, Bucket.OVERDUE, Severity.CRITICAL, True, AlertKind.PAYMENT_OVERDUE_CRITICAL),
    ],
)
def test_payment_bucket_table(days, bucket, severity, persistent, kind):
    alerts = generate_alerts([payment_policy(days)], TODAY)
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.days_until_due == days
    assert alert.bucket_category == bucket
    assert alert.severity == severity
    assert alert.is_persistent is persistent
    assert alert.kind == kind
    assert alert.id == f"payment-p1-{bucket.value}"


def test_payment_horizon_boundary():
    assert generate_alerts([payment_policy(31)], TODAY) == []
    assert generate_alerts([payment_policy(30)], TODAY)[0].bucket_category == Bucket.DAYS_30
    assert payment_bucket(31) is None


@pytest.mark.parametrize(
    "days, bucket, severity, persistent, kind",
    [
        (45, Bucket.DAYS_45, Severity.INFO, False, AlertKind.RENEWAL_UPCOMING),
        (30, Bucket.DAYS_30, Severity.WARNING, False, AlertKind.RENEWAL_UPCOMING),
        (15, Bucket.DAYS_15, Severity.WARNING, False, AlertKind.RENEWAL_UPCOMING),
        (7, Bucket.DAYS_7, Severity.ERROR, True, AlertKind.RENEWAL_UPCOMING),
        (-1, Bucket.OVERDUE, Severity.CRITICAL, True, AlertKind.RENEWAL_OVERDUE),
    ],
)
def test_renewal_bucket_table(days, bucket, severity, persistent, kind):
    alerts = generate_alerts([renewal_policy(days)], TODAY)
    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.bucket_category == bucket
    assert alert.severity == severity
    assert alert.is_persistent is persistent
    assert alert.kind == kind
    assert alert.due_date == TODAY + timedelta(days=days)


def test_renewal_horizon_boundary():
    assert generate_alerts([renewal_policy(46)], TODAY) == []
    assert renewal_bucket(46) is None


def test_payment_and_renewal_are_independent():
    policy = payment_policy(5, expiration_date=(TODAY + timedelta(days=20)).isoformat())
    alerts = generate_alerts([policy], TODAY)
    assert {a.kind for a in alerts} == {AlertKind.PAYMENT_DUE, AlertKind.RENEWAL_UPCOMING}
    assert {a.id for a in alerts} == {"payment-p1-7_days", "renewal-p1-30_days"}


def test_sort_by_priority_then_days():
    policies = [
        payment_policy(20, "a"),   # 30_days → 3
        payment_policy(-3, "b"),   # overdue → 0
        payment_policy(5, "c"),    # 7_days → 1
        payment_policy(-10, "d"),  # overdue → 0
    ]
    alerts = generate_alerts(policies, TODAY)
    assert [a.priority for a in alerts] == [0, 0, 1, 3]
    assert [a.policy_id for a in alerts] == ["d", "b", "c", "a"]


def test_generation_is_deterministic():
    policies = [payment_policy(d, f"p{i}") for i, d in enumerate([12, -2, 29, 3, -30])]
    policies.append(renewal_policy(40))
    assert generate_alerts(policies, TODAY) == generate_alerts(policies, TODAY)


def test_no_duplicates_for_repeated_policy():
    policy = payment_policy(5)
    alerts = generate_alerts([policy, policy, payment_policy(-20)], TODAY)
    assert len(alerts) == 1
    keys = [(a.policy_id, a.kind) for a in alerts]
    assert len(keys) == len(set(keys))


def test_cancelled_policies_do_not_alert():
    policy = payment_policy(-20, status="cancelled", expiration_date=TODAY.isoformat())
    assert generate_alerts([policy], TODAY) == []


def test_bad_records_are_skipped_without_aborting_batch():
    missing = PolicyRecord(id="m", policy_number="M-1", last_payment_date=None)
    garbage = PolicyRecord(id="g", policy_number="G-1", last_payment_date="ayer",
                           expiration_date="pronto")
    alerts = generate_alerts([missing, garbage, payment_policy(2, "ok")], TODAY)
    assert [a.policy_id for a in alerts] == ["ok"]


def test_inputs_are_not_mutated():
    policy = payment_policy(-20)
    before = policy.model_dump()
    generate_alerts([policy], TODAY)
    assert policy.model_dump() == before


def test_alert_messages():
    def message_for(policy):
        return alert_message(generate_alerts([policy], TODAY)[0])

    assert message_for(payment_policy(0)) == "Pago vence HOY"
    assert message_for(payment_policy(1)) == "Pago próximo en 1 día"
    assert message_for(payment_policy(12)) == "Pago próximo en 12 días"
    assert message_for(payment_policy(-2)) == "Pago vencido - 2 días de retraso"
    assert message_for(payment_policy(-9)) == "PAGO VENCIDO CRÍTICO - 9 días de retraso"
    assert message_for(renewal_policy(0)) == "Renovación vence HOY"
    assert message_for(renewal_policy(-1)) == "RENOVACIÓN VENCIDA - 1 día de retraso"
    assert message_for(renewal_policy(40)) == "Renovación próxima en 40 días"
