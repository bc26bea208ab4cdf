import logging
import sqlite3
import time

from core.config import settings

logger = logging.getLogger(__name__)

ROLES = ("admin", "project_manager", "member")
PERMISSION_TYPES = ("task", "project")
ACTIONS = ("create", "update", "delete", "view")


class PermissionCache:
    """
    Time-boxed cache of the permission_settings table.

    Pass one instance to every caller that needs permission checks and call
    invalidate() after the settings change.
    """

    def __init__(self, store, ttl_seconds: float | None = None, clock=time.monotonic):
        self.store = store
        self.ttl_seconds = settings.PERMISSION_CACHE_SECONDS if ttl_seconds is None else ttl_seconds
        self.clock = clock
        self._permissions = []
        self._loaded_at = None
        # writes from any store on the same feed drop the cache
        self._sub = store.feed.subscribe("permission_settings", lambda change: self.invalidate())

    def _fresh(self) -> bool:
        if not self._permissions or self._loaded_at is None:
            return False
        return (self.clock() - self._loaded_at) < self.ttl_seconds

    def get(self) -> list[dict]:
        if self._fresh():
            return self._permissions

        try:
            rows = self.store.select("permission_settings")
        except sqlite3.Error:
            logger.exception("Error fetching permissions")
            return []

        self._permissions = rows
        self._loaded_at = self.clock()
        logger.debug("Permission cache refreshed (%d rows)", len(rows))
        return self._permissions

    def invalidate(self):
        self._permissions = []
        self._loaded_at = None

    def has_permission(self, role: str, permission_type: str, action: str) -> bool:
        # admins always have all permissions
        if role == "admin":
            return True

        for p in self.get():
            if p["role"] == role and p["permission_type"] == permission_type and p["action"] == action:
                return bool(p["is_enabled"])
        return False

    def has_permissions(self, role: str, checks) -> dict:
        return {
            f"{permission_type}_{action}": self.has_permission(role, permission_type, action)
            for permission_type, action in checks
        }

    def role_permissions(self, role: str) -> list[dict]:
        return [p for p in self.get() if p["role"] == role]

    def set_permission(self, permission_id: str, is_enabled: bool) -> dict | None:
        row = self.store.update("permission_settings", permission_id, {"is_enabled": int(is_enabled)})
        self.invalidate()
        return row
