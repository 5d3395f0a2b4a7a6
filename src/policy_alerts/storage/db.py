# src/policy_alerts/storage/db.py
from __future__ import annotations
import sqlite3, datetime, logging
from pathlib import Path
from typing import Optional, Union

from policy_alerts.settings import DB_PATH

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


def get_conn(db_path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
    path = Path(db_path) if db_path else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[Union[str, Path]] = None) -> None:
    """Crea las tablas del log de actividad si no existen."""
    path = Path(db_path) if db_path else DB_PATH
    logger.info(f"Inicializando DB en {path.resolve()}")
    with get_conn(path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS policy_logs (
                seq          INTEGER PRIMARY KEY AUTOINCREMENT,
                id           TEXT    NOT NULL UNIQUE,
                policy_id    TEXT    NOT NULL,
                action       TEXT    NOT NULL,
                description  TEXT    NOT NULL,
                old_value    TEXT,
                new_value    TEXT,
                performed_by TEXT    NOT NULL,
                performed_at TEXT    NOT NULL,
                metadata     TEXT,
                severity     TEXT    NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_logs_policy ON policy_logs(policy_id);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_logs_performed_at ON policy_logs(performed_at);")
