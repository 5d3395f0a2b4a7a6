# src/policy_alerts/models/policy.py
"""
Registro de póliza tal como lo entrega la capa de datos.

Es un modelo cerrado: los campos desconocidos se ignoran y los estados se
validan en la frontera, antes de llegar al motor de alertas.
"""
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from policy_alerts.settings import AlertConfig, PolicyStatus


class PolicyRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str
    policy_number: str
    status: PolicyStatus = PolicyStatus.ACTIVE
    payment_frequency: Optional[str] = None
    last_payment_date: Optional[str] = None  # ISO yyyy-mm-dd, se interpreta en el motor
    expiration_date: Optional[str] = None
    total_amount: float = Field(default=0.0, ge=0)
    holder_name: str = AlertConfig.DEFAULT_HOLDER_NAME
    line_of_business: Optional[str] = None  # ramo: "Vida", "Autos", ...
    has_pending_payment: bool = False

    @field_validator("id", "policy_number", mode="before")
    @classmethod
    def _coerce_identifiers(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("last_payment_date", "expiration_date", mode="before")
    @classmethod
    def _dates_to_text(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date().isoformat()
        if isinstance(v, date):
            return v.isoformat()
        if isinstance(v, str):
            return v
        # números, listas, etc.: la fecha se trata como ausente
        return None

    @field_validator("holder_name", mode="before")
    @classmethod
    def _default_holder(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return AlertConfig.DEFAULT_HOLDER_NAME
        return v

    @field_validator("total_amount", mode="before")
    @classmethod
    def _null_amount(cls, v: Any) -> Any:
        return 0.0 if v is None else v
