from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class LeaveCategory(str, Enum):
    SINGLE_DAY = "single-day"
    MULTI_DAY = "multi-day"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# statuses that occupy a day for other requests
BLOCKING_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def to_calendar_date(value) -> Optional[date]:
    """
    Reduce a stored value to its calendar day.
    Accepts date, datetime or ISO strings ('2025-03-04', '2025-03-04T00:00:00+00:00').
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class LeaveRequest(BaseModel):
    id: Optional[str] = None
    user_id: str
    category: LeaveCategory
    leave_date: Optional[date] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    status: LeaveStatus = LeaveStatus.PENDING
    leave_type: str
    reason: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("leave_date", "from_date", "to_date", mode="before")
    @classmethod
    def _calendar_day(cls, v):
        return to_calendar_date(v)

    @classmethod
    def from_row(cls, row) -> "LeaveRequest":
        return cls.model_validate(dict(row))

    @property
    def is_multi_day(self) -> bool:
        return self.category == LeaveCategory.MULTI_DAY

    def covers(self, day: date) -> bool:
        if self.is_multi_day:
            if self.from_date is None or self.to_date is None:
                return False
            return self.from_date <= day <= self.to_date
        return self.leave_date == day

    def describe(self) -> str:
        if self.is_multi_day and self.from_date and self.to_date:
            return (
                f"Type: Multi-day | From: {self.from_date.isoformat()} "
                f"| To: {self.to_date.isoformat()} | Leave Type: {self.leave_type}"
            )
        day = self.leave_date.isoformat() if self.leave_date else "-"
        return f"Type: Single Day | Date: {day} | Leave Type: {self.leave_type}"


class Holiday(BaseModel):
    id: Optional[str] = None
    date: date
    holiday_name: Optional[str] = None
    description: Optional[str] = None
    is_recurring: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_day(cls, v):
        return to_calendar_date(v)

    @classmethod
    def from_row(cls, row) -> "Holiday":
        return cls.model_validate(dict(row))


class ClassificationResult(BaseModel):
    total_days: int = 0
    sundays: int = 0
    holidays: int = 0
    already_leave: int = 0
    countable_leave_days: int = 0
