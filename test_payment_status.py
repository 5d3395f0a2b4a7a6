#!/usr/bin/env python3
"""
Pruebas del clasificador de estado de pago
"""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

import pytest

from policy_alerts.engine.payment_status import (
    classify,
    filter_policies_by_payment_state,
    frequency_days,
    mark_payment_confirmed,
    resolve_status,
    update_policy_statuses,
)
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import PaymentState, PolicyStatus

TODAY = date(2024, 6, 20)


def policy_due_in(days: int, policy_id: str = "p1", **extra) -> PolicyRecord:
    """Póliza mensual cuyo próximo pago cae `days` días después de TODAY."""
    last_payment = TODAY + timedelta(days=days - 30)
    return PolicyRecord(
        id=policy_id,
        policy_number=f"POL-{policy_id}",
        payment_frequency="monthly",
        last_payment_date=last_payment.isoformat(),
        **extra,
    )


def test_frequency_days():
    assert frequency_days("monthly") == 30
    assert frequency_days("quarterly") == 90
    assert frequency_days("semiannual") == 180
    assert frequency_days("annual") == 365
    # etiquetas de la agencia
    assert frequency_days("Trimestral") == 90
    assert frequency_days("ANUAL") == 365
    # desconocida o ausente → mensual
    assert frequency_days("single") == 30
    assert frequency_days(None) == 30


def test_classify_example_from_portfolio():
    p1 = PolicyRecord(id="P1", policy_number="A-1", payment_frequency="monthly",
                      last_payment_date="2024-05-22")
    result = classify(p1, TODAY)
    assert result.next_due_date == date(2024, 6, 21)
    assert result.days_until_due == 1
    assert result.state == PaymentState.DUE_SOON

    p2 = PolicyRecord(id="P2", policy_number="A-2", payment_frequency="monthly",
                      last_payment_date="2024-04-01")
    result = classify(p2, TODAY)
    assert result.next_due_date == date(2024, 5, 1)
    assert result.days_until_due == -50
    assert result.state == PaymentState.OVERDUE_CRITICAL


@pytest.mark.parametrize(
    "days, expected",
    [
        (-8, PaymentState.OVERDUE_CRITICAL),
        (-7, PaymentState.OVERDUE),
        (-1, PaymentState.OVERDUE),
        (0, PaymentState.DUE_SOON),
        (7, PaymentState.DUE_SOON),
        (8, PaymentState.CURRENT),
    ],
)
def test_classify_state_thresholds(days, expected):
    assert classify(policy_due_in(days), TODAY).state == expected


def test_classify_accepts_datetime_today():
    now = datetime(2024, 6, 20, 23, 59)
    assert classify(policy_due_in(3), now).days_until_due == 3


def test_classify_without_payment_date_is_unknown():
    policy = PolicyRecord(id="p1", policy_number="X-1", payment_frequency="monthly")
    result = classify(policy, TODAY)
    assert result.state == PaymentState.UNKNOWN
    assert result.next_due_date is None
    assert result.days_until_due is None


def test_classify_unparseable_date_is_unknown():
    policy = PolicyRecord(id="p1", policy_number="X-1", last_payment_date="31/31/2024")
    assert classify(policy, TODAY).state == PaymentState.UNKNOWN


def test_classify_accepts_manual_date_format():
    policy = PolicyRecord(id="p1", policy_number="X-1", last_payment_date="22/05/2024")
    assert classify(policy, TODAY).days_until_due == 1


def test_resolve_status_rules():
    # más de 7 días de retraso → vencido crítico
    assert resolve_status(policy_due_in(-8), TODAY).status == PolicyStatus.OVERDUE_CRITICAL
    # retraso corto no degrada el estado
    resolved = resolve_status(policy_due_in(-3, status="overdue_critical"), TODAY)
    assert resolved.status == PolicyStatus.ACTIVE
    assert resolved.has_pending_payment is True
    # al corriente conserva el estado original
    resolved = resolve_status(policy_due_in(20, status="pending"), TODAY)
    assert resolved.status == PolicyStatus.PENDING
    assert resolved.has_pending_payment is False


def test_resolve_status_never_rewrites_cancelled_or_expired():
    assert resolve_status(policy_due_in(-40, status="cancelled"), TODAY).status == PolicyStatus.CANCELLED
    assert resolve_status(policy_due_in(-40, status="expired"), TODAY).status == PolicyStatus.EXPIRED


def test_update_policy_statuses_returns_copies():
    original = policy_due_in(-10)
    updated = update_policy_statuses([original], TODAY)
    assert updated[0].status == PolicyStatus.OVERDUE_CRITICAL
    assert updated[0].has_pending_payment is True
    assert original.status == PolicyStatus.ACTIVE
    assert original.has_pending_payment is False


def test_filter_policies_by_payment_state():
    policies = [
        policy_due_in(20, "current"),
        policy_due_in(3, "soon"),
        policy_due_in(-2, "late"),
        policy_due_in(-15, "critical"),
    ]
    ids = lambda ps: [p.id for p in ps]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "all")) == ["current", "soon", "late", "critical"]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "current")) == ["current"]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "due_soon")) == ["soon"]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "overdue")) == ["late"]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "critical")) == ["critical"]

    with pytest.raises(ValueError):
        filter_policies_by_payment_state(policies, TODAY, "bogus")


def test_filter_treats_cancelled_and_expired_as_current():
    policies = [
        policy_due_in(-3, "expired-late", status="expired"),
        policy_due_in(-10, "cancelled-late", status="cancelled"),
        policy_due_in(-10, "active-late"),
    ]
    ids = lambda ps: [p.id for p in ps]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "current")) == ["expired-late", "cancelled-late"]
    assert ids(filter_policies_by_payment_state(policies, TODAY, "overdue")) == []
    assert ids(filter_policies_by_payment_state(policies, TODAY, "critical")) == ["active-late"]


def test_mark_payment_confirmed():
    policy = policy_due_in(-15, status="overdue_critical", has_pending_payment=True)
    confirmed = mark_payment_confirmed(policy, TODAY)
    assert confirmed.last_payment_date == "2024-06-20"
    assert confirmed.status == PolicyStatus.ACTIVE
    assert confirmed.has_pending_payment is False
    assert classify(confirmed, TODAY).state == PaymentState.CURRENT
    # el original no cambia
    assert policy.status == PolicyStatus.OVERDUE_CRITICAL
