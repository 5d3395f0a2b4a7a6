# src/policy_alerts/api/dependencies.py
from functools import lru_cache

from policy_alerts.storage.policy_log import PolicyLogStore


@lru_cache(maxsize=1)
def get_log_store() -> PolicyLogStore:
    """Bitácora compartida por la aplicación; los tests la sustituyen con dependency_overrides."""
    return PolicyLogStore()
