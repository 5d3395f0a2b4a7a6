# src/policy_alerts/storage/policy_log.py
"""
Bitácora de actividad de pólizas.

Almacén de sólo-anexar respaldado por SQLite. Se construye explícitamente y
se pasa a quien lo necesite (API, CLI, tests); no existe una instancia global.
El tamaño está acotado por `max_entries` y toda lectura es paginada.
"""
from __future__ import annotations

import datetime
import json
import logging
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from policy_alerts.models.logs import LOG_ACTION_CONFIG, LogAction, LogEntry, LogStatistics
from policy_alerts.models.policy import PolicyRecord
from policy_alerts.settings import DB_PATH, LOG_MAX_ENTRIES, LOG_PAGE_SIZE, LOG_RETENTION_DAYS
from policy_alerts.storage.db import _now, get_conn, init_db

logger = logging.getLogger(__name__)


def _ts(value: Optional[datetime.datetime]) -> str:
    if value is None:
        return _now()
    return value.isoformat(timespec="seconds")


def _dump(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def _load(value: Optional[str]) -> Any:
    if value is None:
        return None
    return json.loads(value)


def generate_description(
    action: LogAction,
    policy: PolicyRecord,
    old_value: Any = None,
    new_value: Any = None,
) -> str:
    """Descripción automática para cambios de póliza."""
    number = policy.policy_number
    templates = {
        LogAction.CREATED: f"Póliza {number} creada para {policy.holder_name}",
        LogAction.UPDATED: f"Póliza {number} actualizada",
        LogAction.STATUS_CHANGED: f'Estado de póliza {number} cambiado de "{old_value}" a "{new_value}"',
        LogAction.PAYMENT_RECEIVED: f"Pago recibido para póliza {number} - ${new_value if new_value is not None else policy.total_amount}",
        LogAction.PAYMENT_OVERDUE: f"Pago vencido para póliza {number} - ${policy.total_amount}",
        LogAction.RENEWAL_PROCESSED: f"Renovación procesada para póliza {number}",
        LogAction.RENEWAL_DUE: f"Renovación próxima para póliza {number} - vence {new_value}",
        LogAction.DOCUMENT_UPLOADED: f'Documento "{new_value}" subido para póliza {number}',
        LogAction.DOCUMENT_REMOVED: f'Documento "{old_value}" eliminado de póliza {number}',
        LogAction.NOTE_ADDED: f'Nota agregada a póliza {number}: "{new_value}"',
        LogAction.NOTE_UPDATED: f"Nota actualizada en póliza {number}",
        LogAction.NOTE_DELETED: f"Nota eliminada de póliza {number}",
        LogAction.CONTACT_MADE: f"Contacto realizado con cliente de póliza {number}",
        LogAction.ALERT_CREATED: f"Alerta creada para póliza {number}: {new_value}",
        LogAction.ALERT_RESOLVED: f"Alerta resuelta para póliza {number}",
        LogAction.BULK_UPDATED: f"Actualización masiva aplicada a póliza {number}",
        LogAction.DELETED: f"Póliza {number} eliminada",
    }
    return templates.get(action, f"Acción {action.value} realizada en póliza {number}")


class PolicyLogStore:
    """
    Bitácora acotada de eventos por póliza.

    Args:
        db_path: Archivo SQLite (por defecto POLICY_ALERTS_DB_PATH)
        max_entries: Tope de registros; al rebasarlo se eliminan los más antiguos
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        max_entries: int = LOG_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries debe ser positivo: {max_entries}")
        self.db_path = Path(db_path) if db_path else DB_PATH
        self.max_entries = max_entries
        init_db(self.db_path)

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------

    def _insert(self, conn, entry: LogEntry, ignore_existing: bool = False) -> int:
        verb = "INSERT OR IGNORE" if ignore_existing else "INSERT"
        cur = conn.execute(
            f"""
            {verb} INTO policy_logs(id, policy_id, action, description, old_value, new_value,
                                    performed_by, performed_at, metadata, severity)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.policy_id,
                entry.action.value,
                entry.description,
                _dump(entry.old_value),
                _dump(entry.new_value),
                entry.performed_by,
                entry.performed_at,
                _dump(entry.metadata or {}),
                entry.severity.value,
            ),
        )
        return cur.rowcount

    def _prune(self, conn) -> int:
        cur = conn.execute(
            """
            DELETE FROM policy_logs
            WHERE seq NOT IN (SELECT seq FROM policy_logs ORDER BY seq DESC LIMIT ?)
            """,
            (self.max_entries,),
        )
        if cur.rowcount:
            logger.info(f"Bitácora recortada: {cur.rowcount} registros antiguos eliminados")
        return cur.rowcount

    def create_log(
        self,
        policy_id: str,
        action: LogAction,
        description: str,
        performed_by: str,
        old_value: Any = None,
        new_value: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
        performed_at: Optional[datetime.datetime] = None,
    ) -> LogEntry:
        action = LogAction(action)
        entry = LogEntry(
            id=f"log-{uuid.uuid4().hex}",
            policy_id=policy_id,
            action=action,
            description=description,
            old_value=old_value,
            new_value=new_value,
            performed_by=performed_by,
            performed_at=_ts(performed_at),
            metadata=metadata or {},
            severity=LOG_ACTION_CONFIG[action][1],
        )
        try:
            with get_conn(self.db_path) as conn:
                self._insert(conn, entry)
                self._prune(conn)
        except Exception as e:
            logger.error(f"Error al guardar log de la póliza {policy_id}: {e}")
            raise
        return entry

    def log_policy_change(
        self,
        policy: PolicyRecord,
        action: LogAction,
        performed_by: str,
        old_value: Any = None,
        new_value: Any = None,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        performed_at: Optional[datetime.datetime] = None,
    ) -> LogEntry:
        action = LogAction(action)
        return self.create_log(
            policy.id,
            action,
            description or generate_description(action, policy, old_value, new_value),
            performed_by,
            old_value=old_value,
            new_value=new_value,
            metadata=metadata,
            performed_at=performed_at,
        )

    def log_payment(self, policy: PolicyRecord, amount: float, payment_date: str,
                    performed_by: str, metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        return self.log_policy_change(
            policy,
            LogAction.PAYMENT_RECEIVED,
            performed_by,
            new_value=amount,
            description=f"Pago de ${amount} recibido el {payment_date}",
            metadata={**(metadata or {}), "paymentDate": payment_date, "amount": amount},
        )

    def log_renewal(self, policy: PolicyRecord, renewal_type: str, performed_by: str,
                    metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        return self.log_policy_change(
            policy,
            LogAction.RENEWAL_PROCESSED,
            performed_by,
            new_value=renewal_type,
            description=f"Renovación {renewal_type} procesada",
            metadata={**(metadata or {}), "renewalType": renewal_type},
        )

    def log_document(self, policy: PolicyRecord, action: LogAction, file_name: str,
                     performed_by: str, metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        action = LogAction(action)
        if action not in (LogAction.DOCUMENT_UPLOADED, LogAction.DOCUMENT_REMOVED):
            raise ValueError(f"Acción de documento inválida: {action.value}")
        removed = action == LogAction.DOCUMENT_REMOVED
        return self.log_policy_change(
            policy,
            action,
            performed_by,
            old_value=file_name if removed else None,
            new_value=None if removed else file_name,
            metadata={**(metadata or {}), "fileName": file_name},
        )

    def log_note(self, policy: PolicyRecord, action: LogAction, note_title: str,
                 performed_by: str, metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        action = LogAction(action)
        if action not in (LogAction.NOTE_ADDED, LogAction.NOTE_UPDATED, LogAction.NOTE_DELETED):
            raise ValueError(f"Acción de nota inválida: {action.value}")
        return self.log_policy_change(
            policy,
            action,
            performed_by,
            old_value=note_title if action == LogAction.NOTE_DELETED else None,
            new_value=note_title if action == LogAction.NOTE_ADDED else None,
            metadata={**(metadata or {}), "noteTitle": note_title},
        )

    def log_contact(self, policy: PolicyRecord, contact_type: str, performed_by: str,
                    metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        return self.log_policy_change(
            policy,
            LogAction.CONTACT_MADE,
            performed_by,
            new_value=contact_type,
            description=f"Contacto {contact_type} realizado",
            metadata={**(metadata or {}), "contactType": contact_type},
        )

    def log_alert(self, policy: PolicyRecord, action: LogAction, alert_message: str,
                  performed_by: str, metadata: Optional[Dict[str, Any]] = None) -> LogEntry:
        action = LogAction(action)
        if action not in (LogAction.ALERT_CREATED, LogAction.ALERT_RESOLVED):
            raise ValueError(f"Acción de alerta inválida: {action.value}")
        resolved = action == LogAction.ALERT_RESOLVED
        return self.log_policy_change(
            policy,
            action,
            performed_by,
            old_value=alert_message if resolved else None,
            new_value=None if resolved else alert_message,
            metadata={**(metadata or {}), "alertMessage": alert_message},
        )

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_entry(row) -> LogEntry:
        return LogEntry(
            id=row["id"],
            policy_id=row["policy_id"],
            action=row["action"],
            description=row["description"],
            old_value=_load(row["old_value"]),
            new_value=_load(row["new_value"]),
            performed_by=row["performed_by"],
            performed_at=row["performed_at"],
            metadata=_load(row["metadata"]) or {},
            severity=row["severity"],
        )

    def get_logs(
        self,
        policy_id: Optional[str] = None,
        action: Optional[LogAction] = None,
        performed_by: Optional[str] = None,
        start: Optional[datetime.datetime] = None,
        end: Optional[datetime.datetime] = None,
        limit: int = LOG_PAGE_SIZE,
        offset: int = 0,
    ) -> List[LogEntry]:
        """Registros más recientes primero, filtrados y paginados."""
        clauses, params = [], []
        if policy_id:
            clauses.append("policy_id = ?")
            params.append(policy_id)
        if action:
            clauses.append("action = ?")
            params.append(LogAction(action).value)
        if performed_by:
            clauses.append("performed_by = ?")
            params.append(performed_by)
        if start:
            clauses.append("performed_at >= ?")
            params.append(_ts(start))
        if end:
            clauses.append("performed_at <= ?")
            params.append(_ts(end))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with get_conn(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT * FROM policy_logs {where} ORDER BY performed_at DESC, seq DESC LIMIT ? OFFSET ?",
                (*params, limit, offset),
            ).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def get_policy_logs(self, policy_id: str, limit: int = LOG_PAGE_SIZE, offset: int = 0) -> List[LogEntry]:
        return self.get_logs(policy_id=policy_id, limit=limit, offset=offset)

    def count(self) -> int:
        with get_conn(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM policy_logs").fetchone()[0]

    # ------------------------------------------------------------------
    # Mantenimiento
    # ------------------------------------------------------------------

    def export_logs(self) -> str:
        with get_conn(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM policy_logs ORDER BY seq").fetchall()
        entries = [self._row_to_entry(r).model_dump(mode="json", by_alias=True) for r in rows]
        return json.dumps(entries, ensure_ascii=False, indent=2)

    def import_logs(self, logs_json: str) -> int:
        """Importa registros exportados; devuelve cuántos se agregaron."""
        try:
            data = json.loads(logs_json)
        except json.JSONDecodeError as e:
            logger.error(f"Error al importar logs: JSON inválido ({e})")
            return 0
        if not isinstance(data, list):
            logger.error("Error al importar logs: se esperaba una lista")
            return 0

        entries = []
        for item in data:
            try:
                entries.append(LogEntry.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Registro de log omitido: {e.error_count()} errores de validación")

        imported = 0
        with get_conn(self.db_path) as conn:
            for entry in sorted(entries, key=lambda e: e.performed_at):
                imported += self._insert(conn, entry, ignore_existing=True)
            self._prune(conn)
        logger.info(f"{imported} registros de log importados")
        return imported

    def clean_old_logs(
        self,
        days_to_keep: int = LOG_RETENTION_DAYS,
        now: Optional[datetime.datetime] = None,
    ) -> int:
        cutoff = (now or datetime.datetime.now()) - datetime.timedelta(days=days_to_keep)
        with get_conn(self.db_path) as conn:
            cur = conn.execute("DELETE FROM policy_logs WHERE performed_at <= ?", (_ts(cutoff),))
        logger.info(f"Limpieza de bitácora: {cur.rowcount} registros anteriores a {cutoff.date()}")
        return cur.rowcount

    def get_statistics(self, now: Optional[datetime.datetime] = None) -> LogStatistics:
        since = _ts((now or datetime.datetime.now()) - datetime.timedelta(hours=24))
        with get_conn(self.db_path) as conn:
            rows = conn.execute("SELECT action, severity, performed_by, performed_at FROM policy_logs").fetchall()

        by_action: Counter = Counter()
        by_severity: Counter = Counter()
        by_user: Counter = Counter()
        recent = 0
        for row in rows:
            by_action[row["action"]] += 1
            by_severity[row["severity"]] += 1
            by_user[row["performed_by"]] += 1
            if row["performed_at"] > since:
                recent += 1

        return LogStatistics(
            total_logs=len(rows),
            logs_by_action=dict(by_action),
            logs_by_severity=dict(by_severity),
            logs_by_user=dict(by_user),
            recent_activity=recent,
        )
