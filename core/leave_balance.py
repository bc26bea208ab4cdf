import logging
from datetime import date
from typing import Optional

from pydantic import BaseModel

from core.directory import DirectoryKind, everyone, lookup

logger = logging.getLogger(__name__)

TABLE = "leave_balances"

# only members and project managers hold a leave allowance
BALANCE_KINDS = (DirectoryKind.MEMBER, DirectoryKind.PROJECT_MANAGER)
COUNTS = ("sick_leaves", "casual_leaves", "paid_leaves")


class LeaveBalance(BaseModel):
    id: Optional[str] = None
    person_id: str
    person_kind: str
    name: str
    year: int
    sick_leaves: int = 0
    casual_leaves: int = 0
    paid_leaves: int = 0


def _year(year: int | None) -> int:
    return year or date.today().year


def _balance(person, year: int, row: dict | None) -> LeaveBalance:
    row = row or {}
    return LeaveBalance(
        id=row.get("id"),
        person_id=person.id,
        person_kind=person.kind.value,
        name=person.name,
        year=year,
        **{k: row.get(k) or 0 for k in COUNTS},
    )


def _holder(store, person_id: str):
    person = lookup(store, [person_id]).get(person_id)
    if person is None or person.kind not in BALANCE_KINDS:
        return None
    return person


def get_balance(store, person_id: str, year: int | None = None) -> LeaveBalance | None:
    """
    Balance of one member or project manager for a year (default: this year).
    People without a stored row read as zero. None for anyone else.
    """
    person = _holder(store, person_id)
    if person is None:
        return None

    year = _year(year)
    rows = store.select(TABLE, person_id=person_id, year=year)
    return _balance(person, year, rows[0] if rows else None)


def list_balances(store, year: int | None = None) -> list[LeaveBalance]:
    year = _year(year)
    rows = {r["person_id"]: r for r in store.select(TABLE, year=year)}

    balances = []
    for kind in BALANCE_KINDS:
        for person in everyone(store, kind):
            balances.append(_balance(person, year, rows.get(person.id)))
    return balances


def set_balance(store, person_id: str, year: int | None = None, **counts) -> LeaveBalance | None:
    unknown = [k for k in counts if k not in COUNTS]
    if unknown:
        raise ValueError(f"Unknown balance field(s): {', '.join(unknown)}")
    if any(v is None or int(v) < 0 for v in counts.values()):
        raise ValueError("Balances must be zero or more")

    person = _holder(store, person_id)
    if person is None:
        return None

    year = _year(year)
    values = {k: int(v) for k, v in counts.items()}
    existing = store.select(TABLE, person_id=person_id, year=year)

    if existing:
        if values:
            values["updated_at"] = date.today().isoformat()
        store.update(TABLE, existing[0]["id"], values)
    else:
        store.insert(TABLE, {
            "person_id": person_id,
            "person_kind": person.kind.value,
            "year": year,
            **values,
        })

    logger.info("Leave balance set for %s (%s)", person_id, year)
    return get_balance(store, person_id, year)
