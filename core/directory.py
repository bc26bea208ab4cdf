from dataclasses import dataclass
from enum import Enum


class DirectoryKind(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    BROKER = "broker"


@dataclass(frozen=True)
class DirectoryEntry:
    id: str
    kind: DirectoryKind
    name: str
    email: str | None = None


def _entries(rows) -> dict:
    # an id present in several tables keeps its lowest-ranked kind
    found = {}
    for r in sorted(rows, key=lambda r: r["kind_rank"]):
        found.setdefault(r["id"], DirectoryEntry(
            id=r["id"],
            kind=DirectoryKind(r["kind"]),
            name=r["name"],
            email=r["email"],
        ))
    return found


def lookup(store, ids) -> dict:
    """
    Resolve people across members, admins, project managers and brokers
    with one query against the directory view.
    """
    wanted = {i for i in ids if i}
    return _entries(store.select_in("directory", "id", wanted))


def display_name(store, user_id, default: str = "Unknown User") -> str:
    entry = lookup(store, [user_id]).get(user_id)
    return entry.name if entry else default


def everyone(store, kind: DirectoryKind | None = None) -> list[DirectoryEntry]:
    filters = {"kind": kind.value} if kind else {}
    people = _entries(store.select("directory", **filters))
    return sorted(people.values(), key=lambda e: e.name)
