import datetime
from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from core.leave_models import ClassificationResult, LeaveCategory, LeaveRequest


class CreateLeave(BaseModel):
    user_id: str
    leave_type: str = Field(min_length=1)
    category: LeaveCategory
    leave_date: Optional[date] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.category == LeaveCategory.MULTI_DAY:
            if self.from_date is None or self.to_date is None:
                raise ValueError("multi-day leave needs from_date and to_date")
            if self.from_date > self.to_date:
                raise ValueError("to_date cannot be earlier than from_date")
        elif self.leave_date is None:
            raise ValueError("single-day leave needs leave_date")
        return self


class UpdateLeave(BaseModel):
    leave_type: Optional[str] = Field(default=None, min_length=1)
    category: Optional[LeaveCategory] = None
    leave_date: Optional[date] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = None

    @field_validator("leave_type", "category", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class LeaveOut(LeaveRequest):
    user_name: str = "Unknown User"


class PendingLeaveOut(LeaveOut):
    breakdown: Optional[ClassificationResult] = None


class LeaveDecision(BaseModel):
    status: Literal["approved", "rejected"]


class BreakdownPreview(BaseModel):
    user_id: str
    from_date: date
    to_date: date
    leave_id: Optional[str] = None


class CreateHoliday(BaseModel):
    holiday_name: str = Field(min_length=1, max_length=255)
    date: datetime.date
    description: Optional[str] = None
    is_recurring: bool = False


class UpdateHoliday(BaseModel):
    holiday_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    date: Optional[datetime.date] = None
    description: Optional[str] = None
    is_recurring: Optional[bool] = None

    # may be left out, but not cleared
    @field_validator("holiday_name", "date", "is_recurring", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class DirectoryEntryOut(BaseModel):
    id: str
    kind: str
    name: str
    email: Optional[str] = None


class DirectoryOut(BaseModel):
    entries: Dict[str, DirectoryEntryOut]


class PermissionOut(BaseModel):
    id: str
    role: str
    permission_type: str
    action: str
    is_enabled: bool


class PermissionCheck(BaseModel):
    role: str
    permission_type: str
    action: str
    allowed: bool


class UpdatePermission(BaseModel):
    is_enabled: bool


class UpdateBalance(BaseModel):
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    sick_leaves: Optional[int] = Field(default=None, ge=0)
    casual_leaves: Optional[int] = Field(default=None, ge=0)
    paid_leaves: Optional[int] = Field(default=None, ge=0)


class NotificationOut(BaseModel):
    id: str
    user_id: str
    title: str
    message: Optional[str] = None
    type: Optional[str] = None
    related_id: Optional[str] = None
    related_type: Optional[str] = None
    is_read: bool = False
    created_at: Optional[str] = None


class NotificationList(BaseModel):
    notifications: List[NotificationOut]
