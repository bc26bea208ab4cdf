import logging
import os
import sqlite3
import threading
import uuid

from core.change_feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from core.config import settings

logger = logging.getLogger(__name__)


# =========================
# CONNECTION
# =========================
def get_conn(path: str | None = None):
    path = path or settings.DB_PATH
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


# =========================
# SCHEMA
# =========================
TABLES = {
    "members": """
    CREATE TABLE IF NOT EXISTS members (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT UNIQUE,
        phone TEXT,
        is_active INTEGER DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "admins": """
    CREATE TABLE IF NOT EXISTS admins (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT UNIQUE,
        phone TEXT,
        is_active INTEGER DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "project_managers": """
    CREATE TABLE IF NOT EXISTS project_managers (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT UNIQUE,
        phone TEXT,
        is_active INTEGER DEFAULT 1,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # brokers may carry a NULL is_active, which counts as active
    "brokers": """
    CREATE TABLE IF NOT EXISTS brokers (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT,
        phone TEXT,
        is_active INTEGER,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "leaves": """
    CREATE TABLE IF NOT EXISTS leaves (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        category TEXT NOT NULL,
        leave_type TEXT NOT NULL,
        leave_date DATE,
        from_date DATE,
        to_date DATE,
        reason TEXT,
        status TEXT DEFAULT 'pending',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "company_holidays": """
    CREATE TABLE IF NOT EXISTS company_holidays (
        id TEXT PRIMARY KEY,
        holiday_name TEXT NOT NULL,
        date DATE UNIQUE NOT NULL,
        description TEXT,
        is_recurring INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "notifications": """
    CREATE TABLE IF NOT EXISTS notifications (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        message TEXT,
        type TEXT,
        related_id TEXT,
        related_type TEXT,
        is_read INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # yearly allowance per member or project manager
    "leave_balances": """
    CREATE TABLE IF NOT EXISTS leave_balances (
        id TEXT PRIMARY KEY,
        person_id TEXT NOT NULL,
        person_kind TEXT NOT NULL,
        year INTEGER NOT NULL,
        sick_leaves INTEGER DEFAULT 0,
        casual_leaves INTEGER DEFAULT 0,
        paid_leaves INTEGER DEFAULT 0,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (person_id, year)
    )
    """,
    "permission_settings": """
    CREATE TABLE IF NOT EXISTS permission_settings (
        id TEXT PRIMARY KEY,
        role TEXT NOT NULL,
        permission_type TEXT NOT NULL,
        action TEXT NOT NULL,
        is_enabled INTEGER DEFAULT 0,
        UNIQUE (role, permission_type, action)
    )
    """,
}

# one row per person; kind_rank orders duplicate ids (lowest wins)
DIRECTORY_VIEW = """
CREATE VIEW IF NOT EXISTS directory AS
    SELECT id, name, email, 'project_manager' AS kind, 0 AS kind_rank
    FROM project_managers WHERE is_active = 1
    UNION ALL
    SELECT id, name, email, 'admin' AS kind, 1 AS kind_rank
    FROM admins WHERE is_active = 1
    UNION ALL
    SELECT id, name, email, 'member' AS kind, 2 AS kind_rank
    FROM members WHERE is_active = 1
    UNION ALL
    SELECT id, name, email, 'broker' AS kind, 3 AS kind_rank
    FROM brokers WHERE is_active IS NULL OR is_active = 1
"""


# =========================
# INIT DATABASE
# =========================
def init_db(conn=None):
    own = conn is None
    conn = conn or get_conn()
    c = conn.cursor()

    for ddl in TABLES.values():
        c.execute(ddl)
    c.execute(DIRECTORY_VIEW)

    conn.commit()
    if own:
        conn.close()


# =========================
# ROW STORE
# =========================
class RowStore:
    """
    Thin filter/insert/update/delete/select layer over one sqlite connection.
    Every write commits and is published to the attached change feed.

    A store may be shared between threads; statements on its connection
    run one at a time. Change events are published outside that lock.
    """

    def __init__(self, conn, feed: ChangeFeed | None = None):
        self.conn = conn
        self.feed = feed if feed is not None else ChangeFeed()
        self._columns = {}
        self._lock = threading.RLock()

    def close(self):
        with self._lock:
            self.conn.close()

    def _fetch(self, sql: str, params=()) -> list:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    def _write(self, sql: str, params=()):
        with self._lock:
            try:
                self.conn.execute(sql, params)
            except sqlite3.Error:
                self.conn.rollback()
                raise
            self.conn.commit()

    # ---------- schema guards ----------
    def columns(self, table: str) -> set:
        if table not in TABLES and table != "directory":
            raise ValueError(f"Unknown table: {table}")
        if table not in self._columns:
            rows = self._fetch(f"PRAGMA table_info({table})")
            self._columns[table] = {r["name"] for r in rows}
        return self._columns[table]

    def _check_columns(self, table: str, names):
        known = self.columns(table)
        unknown = [n for n in names if n not in known]
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    # ---------- reads ----------
    def select(self, table: str, order_by: str | None = None, descending: bool = False, **filters) -> list[dict]:
        self._check_columns(table, list(filters) + ([order_by] if order_by else []))

        sql = f"SELECT * FROM {table}"
        params = []
        if filters:
            clauses = []
            for name, value in filters.items():
                if value is None:
                    clauses.append(f"{name} IS NULL")
                else:
                    clauses.append(f"{name} = ?")
                    params.append(value)
            sql += " WHERE " + " AND ".join(clauses)
        if order_by:
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"

        return [dict(r) for r in self._fetch(sql, params)]

    def select_in(self, table: str, column: str, values) -> list[dict]:
        self._check_columns(table, [column])
        values = list(values)
        if not values:
            return []
        marks = ", ".join("?" for _ in values)
        rows = self._fetch(f"SELECT * FROM {table} WHERE {column} IN ({marks})", values)
        return [dict(r) for r in rows]

    def get(self, table: str, row_id) -> dict | None:
        rows = self.select(table, id=row_id)
        return rows[0] if rows else None

    # ---------- writes ----------
    def insert(self, table: str, values: dict) -> dict:
        values = dict(values)
        values.setdefault("id", str(uuid.uuid4()))
        self._check_columns(table, values)

        names = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._lock:
            self._write(f"INSERT INTO {table} ({names}) VALUES ({marks})", list(values.values()))
            row = self.get(table, values["id"])

        logger.info("Inserted %s %s", table, values["id"])
        self.feed.publish(ChangeEvent(table, INSERT, new=row))
        return row

    def update(self, table: str, row_id, values: dict) -> dict | None:
        self._check_columns(table, values)
        assignments = ", ".join(f"{name}=?" for name in values)

        with self._lock:
            old = self.get(table, row_id)
            if old is None:
                return None
            if not values:
                return old
            self._write(
                f"UPDATE {table} SET {assignments} WHERE id=?",
                list(values.values()) + [row_id],
            )
            row = self.get(table, row_id)

        logger.info("Updated %s %s (%s)", table, row_id, ", ".join(values))
        self.feed.publish(ChangeEvent(table, UPDATE, new=row, old=old))
        return row

    def delete(self, table: str, row_id) -> bool:
        with self._lock:
            old = self.get(table, row_id)
            if old is None:
                return False
            self._write(f"DELETE FROM {table} WHERE id=?", (row_id,))

        logger.info("Deleted %s %s", table, row_id)
        self.feed.publish(ChangeEvent(table, DELETE, old=old))
        return True

    def count(self, table: str) -> int:
        self.columns(table)
        return self._fetch(f"SELECT COUNT(*) FROM {table}")[0][0]
