from core.permissions import PermissionCache
from core.seed import DEFAULT_PERMISSIONS, seed_defaults


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _seeded(store, ttl=300):
    seed_defaults(store)
    clock = FakeClock()
    return PermissionCache(store, ttl_seconds=ttl, clock=clock), clock


def _row(store, role, permission_type, action):
    return store.select("permission_settings", role=role, permission_type=permission_type, action=action)[0]


def test_defaults(store):
    cache, _ = _seeded(store)

    assert len(cache.get()) == len(DEFAULT_PERMISSIONS) == 16
    assert cache.has_permission("project_manager", "task", "delete")
    assert not cache.has_permission("project_manager", "project", "delete")
    assert not cache.has_permission("member", "task", "delete")
    assert cache.has_permission("member", "project", "view")


def test_admin_always_allowed_and_unknown_denied(store):
    cache, _ = _seeded(store)

    assert cache.has_permission("admin", "project", "delete")
    assert not cache.has_permission("member", "deal", "create")
    assert not cache.has_permission("guest", "task", "view")


def test_cached_until_ttl_expires(store):
    cache, clock = _seeded(store, ttl=60)
    assert not cache.has_permission("member", "task", "delete")

    # a raw write that bypasses the store's feed
    row = _row(store, "member", "task", "delete")
    store.conn.execute("UPDATE permission_settings SET is_enabled=1 WHERE id=?", (row["id"],))
    store.conn.commit()

    clock.now += 59
    assert not cache.has_permission("member", "task", "delete")

    clock.now += 2
    assert cache.has_permission("member", "task", "delete")


def test_invalidate_and_store_writes_drop_the_cache(store):
    cache, _ = _seeded(store)
    cache.get()

    row = _row(store, "member", "project", "create")
    store.update("permission_settings", row["id"], {"is_enabled": 1})
    assert cache.has_permission("member", "project", "create")

    cache.set_permission(row["id"], False)
    assert not cache.has_permission("member", "project", "create")
    assert cache.set_permission("missing", True) is None


def test_has_permissions_and_role_permissions(store):
    cache, _ = _seeded(store)

    checks = cache.has_permissions("member", [("task", "create"), ("project", "delete")])

    assert checks == {"task_create": True, "project_delete": False}
    assert {p["role"] for p in cache.role_permissions("project_manager")} == {"project_manager"}
    assert len(cache.role_permissions("member")) == 8


def test_empty_table_is_not_cached(store):
    clock = FakeClock()
    cache = PermissionCache(store, ttl_seconds=300, clock=clock)
    assert cache.get() == []

    seed_defaults(store)
    assert len(cache.get()) == 16


def test_database_error_fails_closed(store, caplog):
    cache, _ = _seeded(store)
    store.conn.execute("DROP TABLE permission_settings")

    assert cache.get() == []
    assert not cache.has_permission("member", "task", "view")
    assert "Error fetching permissions" in caplog.text
