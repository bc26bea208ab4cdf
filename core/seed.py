import logging

logger = logging.getLogger(__name__)

# project managers may not delete projects; members only view projects and cannot delete tasks
DEFAULT_PERMISSIONS = [
    ("project_manager", "task", "create", True),
    ("project_manager", "task", "update", True),
    ("project_manager", "task", "delete", True),
    ("project_manager", "task", "view", True),
    ("project_manager", "project", "create", True),
    ("project_manager", "project", "update", True),
    ("project_manager", "project", "delete", False),
    ("project_manager", "project", "view", True),
    ("member", "task", "create", True),
    ("member", "task", "update", True),
    ("member", "task", "delete", False),
    ("member", "task", "view", True),
    ("member", "project", "create", False),
    ("member", "project", "update", False),
    ("member", "project", "delete", False),
    ("member", "project", "view", True),
]

DEFAULT_ADMIN = {
    "name": "Admin",
    "email": "admin@brokerage.local",
    "is_active": 1,
}


def seed_defaults(store):
    if store.count("permission_settings") == 0:
        for role, permission_type, action, enabled in DEFAULT_PERMISSIONS:
            store.insert("permission_settings", {
                "role": role,
                "permission_type": permission_type,
                "action": action,
                "is_enabled": int(enabled),
            })
        logger.info("Default permission settings created")

    if store.count("admins") == 0:
        store.insert("admins", DEFAULT_ADMIN)
        logger.info("Default admin created (%s)", DEFAULT_ADMIN["email"])
