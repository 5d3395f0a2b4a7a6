# src/policy_alerts/engine/messages.py
"""
Textos de presentación para las alertas.

El motor sólo expone campos estructurados; estas plantillas son las que usan
la API y la consola para mostrarlas al agente.
"""
from policy_alerts.models.alert import Alert
from policy_alerts.settings import AlertConfig, AlertKind

RENEWAL_KINDS = {AlertKind.RENEWAL_UPCOMING, AlertKind.RENEWAL_OVERDUE}


def _days(n: int) -> str:
    return f"{n} día{'s' if n != 1 else ''}"


def alert_message(alert: Alert) -> str:
    days = alert.days_until_due

    if alert.kind in RENEWAL_KINDS:
        if days < 0:
            return f"RENOVACIÓN VENCIDA - {_days(abs(days))} de retraso"
        if days == 0:
            return "Renovación vence HOY"
        if days <= 7:
            return f"Renovación próxima en {_days(days)} - ACCIÓN REQUERIDA"
        return f"Renovación próxima en {_days(days)}"

    if days < 0:
        overdue = abs(days)
        if overdue > AlertConfig.CRITICAL_OVERDUE_DAYS:
            return f"PAGO VENCIDO CRÍTICO - {_days(overdue)} de retraso"
        return f"Pago vencido - {_days(overdue)} de retraso"
    if days == 0:
        return "Pago vence HOY"
    return f"Pago próximo en {_days(days)}"
