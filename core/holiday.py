import logging
from datetime import date

from core.leave_models import Holiday

logger = logging.getLogger(__name__)

TABLE = "company_holidays"


def _on_year(day: date, year: int) -> date | None:
    # 29 Feb only exists in leap years
    try:
        return day.replace(year=year)
    except ValueError:
        return None


def list_holidays(store, year: int | None = None) -> list[Holiday]:
    holidays = [Holiday.from_row(r) for r in store.select(TABLE, order_by="date")]
    if year is None:
        return holidays
    return [h for h in holidays if h.date.year == year or h.is_recurring]


def load_holidays(store, start: date | None = None, end: date | None = None) -> set:
    """
    Every company holiday as a set of calendar dates.
    With a range, only dates inside [start, end] are returned and
    recurring holidays are repeated for every year the range touches.
    """
    holidays = set()
    for h in list_holidays(store):
        if start is None or end is None:
            holidays.add(h.date)
            continue

        if not h.is_recurring:
            if start <= h.date <= end:
                holidays.add(h.date)
            continue

        for year in range(start.year, end.year + 1):
            day = _on_year(h.date, year)
            if day is not None and start <= day <= end:
                holidays.add(day)

    return holidays


def is_holiday(store, check_date: date) -> bool:
    return check_date in load_holidays(store, check_date, check_date)


def date_taken(store, day: date, exclude_id: str | None = None) -> bool:
    return any(r["id"] != exclude_id for r in store.select(TABLE, date=day.isoformat()))


def add_holiday(store, holiday_name: str, day: date, description: str | None = None,
                is_recurring: bool = False) -> Holiday:
    row = store.insert(TABLE, {
        "holiday_name": holiday_name,
        "date": day.isoformat(),
        "description": description,
        "is_recurring": int(is_recurring),
    })
    logger.info("Holiday added: %s on %s", holiday_name, day.isoformat())
    return Holiday.from_row(row)


def update_holiday(store, holiday_id: str, **values) -> Holiday | None:
    if isinstance(values.get("date"), date):
        values["date"] = values["date"].isoformat()
    if "is_recurring" in values:
        values["is_recurring"] = int(bool(values["is_recurring"]))

    row = store.update(TABLE, holiday_id, values)
    return Holiday.from_row(row) if row else None


def delete_holiday(store, holiday_id: str) -> bool:
    return store.delete(TABLE, holiday_id)
