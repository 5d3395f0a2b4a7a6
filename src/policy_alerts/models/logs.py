# src/policy_alerts/models/logs.py

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LogAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_OVERDUE = "payment_overdue"
    RENEWAL_PROCESSED = "renewal_processed"
    RENEWAL_DUE = "renewal_due"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_REMOVED = "document_removed"
    NOTE_ADDED = "note_added"
    NOTE_UPDATED = "note_updated"
    NOTE_DELETED = "note_deleted"
    CONTACT_MADE = "contact_made"
    ALERT_CREATED = "alert_created"
    ALERT_RESOLVED = "alert_resolved"
    BULK_UPDATED = "bulk_updated"
    DELETED = "deleted"


class LogSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


# acción → (etiqueta, severidad)
LOG_ACTION_CONFIG: Dict[LogAction, tuple] = {
    LogAction.CREATED: ("Póliza Creada", LogSeverity.SUCCESS),
    LogAction.UPDATED: ("Póliza Actualizada", LogSeverity.INFO),
    LogAction.STATUS_CHANGED: ("Estado Cambiado", LogSeverity.WARNING),
    LogAction.PAYMENT_RECEIVED: ("Pago Recibido", LogSeverity.SUCCESS),
    LogAction.PAYMENT_OVERDUE: ("Pago Vencido", LogSeverity.ERROR),
    LogAction.RENEWAL_PROCESSED: ("Renovación Procesada", LogSeverity.SUCCESS),
    LogAction.RENEWAL_DUE: ("Renovación Próxima", LogSeverity.WARNING),
    LogAction.DOCUMENT_UPLOADED: ("Documento Subido", LogSeverity.INFO),
    LogAction.DOCUMENT_REMOVED: ("Documento Eliminado", LogSeverity.WARNING),
    LogAction.NOTE_ADDED: ("Nota Agregada", LogSeverity.INFO),
    LogAction.NOTE_UPDATED: ("Nota Actualizada", LogSeverity.INFO),
    LogAction.NOTE_DELETED: ("Nota Eliminada", LogSeverity.WARNING),
    LogAction.CONTACT_MADE: ("Contacto Realizado", LogSeverity.INFO),
    LogAction.ALERT_CREATED: ("Alerta Creada", LogSeverity.ERROR),
    LogAction.ALERT_RESOLVED: ("Alerta Resuelta", LogSeverity.SUCCESS),
    LogAction.BULK_UPDATED: ("Actualización Masiva", LogSeverity.INFO),
    LogAction.DELETED: ("Póliza Eliminada", LogSeverity.ERROR),
}


class LogEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    policy_id: str
    action: LogAction
    description: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    performed_by: str
    performed_at: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    severity: LogSeverity


class LogStatistics(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_logs: int = 0
    logs_by_action: Dict[str, int] = Field(default_factory=dict)
    logs_by_severity: Dict[str, int] = Field(default_factory=dict)
    logs_by_user: Dict[str, int] = Field(default_factory=dict)
    recent_activity: int = 0  # últimas 24 horas
