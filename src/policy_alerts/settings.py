# src/policy_alerts/settings.py

"""
Configuración del motor de alertas de cobranza y renovación
Incluye catálogos, tablas de segmentación y parámetros por entorno
"""
import os
from enum import Enum
from pathlib import Path
from typing import Dict, List


class PolicyStatus(str, Enum):
    """Estados de póliza manejados por la agencia"""
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PENDING_RENEWAL = "pending_renewal"
    OVERDUE_CRITICAL = "overdue_critical"  # Vencido super destacado


class PaymentFrequency(str, Enum):
    """Formas de pago reconocidas"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"


class PaymentState(str, Enum):
    """Estado de pago derivado por el clasificador"""
    UNKNOWN = "unknown"
    CURRENT = "current"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    OVERDUE_CRITICAL = "overdue_critical"


class AlertKind(str, Enum):
    PAYMENT_DUE = "payment_due"
    PAYMENT_OVERDUE = "payment_overdue"
    PAYMENT_OVERDUE_CRITICAL = "payment_overdue_critical"
    RENEWAL_UPCOMING = "renewal_upcoming"
    RENEWAL_OVERDUE = "renewal_overdue"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class Bucket(str, Enum):
    """Ventanas de días hasta el vencimiento"""
    DAYS_45 = "45_days"
    DAYS_30 = "30_days"
    DAYS_15 = "15_days"
    DAYS_10 = "10_days"
    DAYS_7 = "7_days"
    OVERDUE = "overdue"


class AlertConfig:
    """Reglas de negocio para la generación de alertas"""

    # Días entre pagos por forma de pago
    FREQUENCY_DAYS: Dict[PaymentFrequency, int] = {
        PaymentFrequency.MONTHLY: 30,
        PaymentFrequency.QUARTERLY: 90,
        PaymentFrequency.SEMIANNUAL: 180,
        PaymentFrequency.ANNUAL: 365,
    }
    DEFAULT_FREQUENCY_DAYS = 30

    # Etiquetas en español que usan las aseguradoras
    FREQUENCY_ALIASES: Dict[str, PaymentFrequency] = {
        "mensual": PaymentFrequency.MONTHLY,
        "trimestral": PaymentFrequency.QUARTERLY,
        "semestral": PaymentFrequency.SEMIANNUAL,
        "anual": PaymentFrequency.ANNUAL,
    }

    # Umbrales del clasificador de pagos
    CRITICAL_OVERDUE_DAYS = 7   # más de 7 días de retraso = crítico
    DUE_SOON_DAYS = 7

    # Horizontes de alerta
    PAYMENT_HORIZON_DAYS = 30
    RENEWAL_HORIZON_DAYS = 45

    # Ventanas ordenadas de la más estrecha a la más amplia (límite inclusivo)
    PAYMENT_BUCKETS: List[tuple] = [
        (7, Bucket.DAYS_7),
        (10, Bucket.DAYS_10),
        (15, Bucket.DAYS_15),
        (30, Bucket.DAYS_30),
    ]
    RENEWAL_BUCKETS: List[tuple] = [
        (7, Bucket.DAYS_7),
        (15, Bucket.DAYS_15),
        (30, Bucket.DAYS_30),
        (45, Bucket.DAYS_45),
    ]

    # Severidad por ventana (overdue de pagos escala aparte)
    PAYMENT_SEVERITY: Dict[Bucket, Severity] = {
        Bucket.OVERDUE: Severity.ERROR,
        Bucket.DAYS_7: Severity.ERROR,
        Bucket.DAYS_10: Severity.WARNING,
        Bucket.DAYS_15: Severity.WARNING,
        Bucket.DAYS_30: Severity.INFO,
    }
    RENEWAL_SEVERITY: Dict[Bucket, Severity] = {
        Bucket.OVERDUE: Severity.CRITICAL,
        Bucket.DAYS_7: Severity.ERROR,
        Bucket.DAYS_15: Severity.WARNING,
        Bucket.DAYS_30: Severity.WARNING,
        Bucket.DAYS_45: Severity.INFO,
    }

    # 0 = más urgente
    BUCKET_PRIORITY: Dict[Bucket, int] = {
        Bucket.OVERDUE: 0,
        Bucket.DAYS_7: 1,
        Bucket.DAYS_10: 2,
        Bucket.DAYS_15: 2,
        Bucket.DAYS_30: 3,
        Bucket.DAYS_45: 4,
    }

    PERSISTENT_BUCKETS = {Bucket.DAYS_7, Bucket.OVERDUE}

    # Estados que no generan alertas
    NON_ALERTING_STATUSES = {PolicyStatus.CANCELLED}

    # Estados que el clasificador nunca reescribe
    FROZEN_STATUSES = {PolicyStatus.CANCELLED, PolicyStatus.EXPIRED}

    # Ramo para estadísticas de productos de vida
    LIFE_LINE_OF_BUSINESS = "vida"

    DEFAULT_HOLDER_NAME = "Cliente sin nombre"


# ========== CONFIGURACIÓN POR ENTORNO ==========

DB_PATH = Path(os.getenv("POLICY_ALERTS_DB_PATH", "data/policy_logs.db"))

# Tope explícito del log de actividad
LOG_MAX_ENTRIES = int(os.getenv("POLICY_LOG_MAX_ENTRIES", "10000"))
LOG_RETENTION_DAYS = int(os.getenv("POLICY_LOG_RETENTION_DAYS", "90"))
LOG_PAGE_SIZE = 50

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "POLICY_ALERTS_CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if origin.strip()
]

API_VERSION = "1.0.0"
