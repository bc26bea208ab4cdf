import os
import tempfile

# keep the module-level settings away from the working copy's data/ folder
os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(), "backoffice.db"))

import pytest

from core.change_feed import ChangeFeed
from core.db import RowStore, get_conn, init_db
from core.leave_models import LeaveRequest


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "backoffice.db")


@pytest.fixture
def store(db_path):
    conn = get_conn(db_path)
    init_db(conn)
    s = RowStore(conn, ChangeFeed())
    yield s
    s.close()


def _iso(d):
    return d.isoformat() if d else None


@pytest.fixture
def add_leave(store):
    def _add(user_id="member-1", category="multi-day", status="pending", leave_type="Casual Leave",
             leave_date=None, from_date=None, to_date=None, created_at=None):
        values = {
            "user_id": user_id,
            "category": category,
            "status": status,
            "leave_type": leave_type,
            "leave_date": _iso(leave_date),
            "from_date": _iso(from_date),
            "to_date": _iso(to_date),
        }
        if created_at:
            values["created_at"] = created_at
        return LeaveRequest.from_row(store.insert("leaves", values))
    return _add


@pytest.fixture
def add_person(store):
    def _add(table, name, **extra):
        values = {"name": name, "email": f"{name.lower().replace(' ', '.')}@example.com"}
        values.update(extra)
        return store.insert(table, values)
    return _add
