# src/policy_alerts/utils/dates.py
"""
Normalización de fechas de pólizas.

Las fechas llegan como texto ISO desde la capa de datos, pero también se
aceptan los formatos que capturan los agentes a mano.
"""
from datetime import date, datetime
from typing import Optional, Union

_DATE_IN = ["%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d", "%d-%m-%Y"]

DateLike = Union[date, datetime, str, None]


def parse_date(value: DateLike) -> Optional[date]:
    """Convierte a `date`; devuelve None si está vacía o no se puede interpretar."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    t = str(value).strip()
    if not t:
        return None
    for f in _DATE_IN:
        try:
            return datetime.strptime(t, f).date()
        except ValueError:
            pass
    # timestamps completos: "2024-05-22T10:30:00Z"
    try:
        return datetime.fromisoformat(t.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def as_date(value: Union[date, datetime]) -> date:
    """`today` puede venir como datetime; el motor sólo trabaja con días."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    """Días naturales de `start` a `end` (negativo si `end` ya pasó)."""
    return (end - start).days
