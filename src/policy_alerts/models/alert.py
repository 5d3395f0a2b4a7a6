# src/policy_alerts/models/alert.py

from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from policy_alerts.settings import AlertKind, Bucket, PaymentState, PolicyStatus, Severity


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PaymentClassification(_CamelModel):
    """Resultado del clasificador de pagos para una póliza."""
    next_due_date: Optional[date] = None
    days_until_due: Optional[int] = None
    state: PaymentState = PaymentState.UNKNOWN


class Alert(_CamelModel):
    id: str
    policy_id: str
    policy_number: str
    holder_name: str
    kind: AlertKind
    severity: Severity
    bucket_category: Bucket
    days_until_due: int
    due_date: date
    amount: float = 0.0
    is_persistent: bool
    priority: int


class AlertStatistics(_CamelModel):
    total: int = 0
    by_severity: Dict[str, int] = Field(default_factory=dict)
    by_bucket: Dict[str, int] = Field(default_factory=dict)
    by_kind: Dict[str, int] = Field(default_factory=dict)
    persistent_count: int = 0


class PaymentStatistics(_CamelModel):
    total: int = 0
    current: int = 0
    due_soon: int = 0
    overdue: int = 0
    critical: int = 0
    total_amount: float = 0.0
    overdue_amount: float = 0.0


class LifeProductStatistics(_CamelModel):
    total: int = 0
    upcoming_renewals: int = 0


class RenewalStatistics(_CamelModel):
    total_policies: int = 0
    upcoming: Dict[str, int] = Field(default_factory=dict)
    life_products: LifeProductStatistics = Field(default_factory=LifeProductStatistics)


class PolicyPaymentStatus(_CamelModel):
    """Clasificación más el estado visible que resulta de aplicarla."""
    policy_id: str
    classification: PaymentClassification
    status: PolicyStatus
    has_pending_payment: bool
