import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints, field_validator

from app.schemas.envelope import CamelModel


class CheckInItemType(str, Enum):
    CHECKIN = "CHECKIN"
    ASSIGNMENT = "ASSIGNMENT"
    RESPONSE = "RESPONSE"


class AssignmentStatus(str, Enum):
    """Persisted assignment states. `overdue` is derived at read time, see display_status()."""
    PENDING = "pending"
    COMPLETED = "completed"


OVERDUE = "overdue"

# date and time are both required; a bare date or an epoch number is rejected
ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")

QuestionText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
UserIdStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def display_status(status: str, due_date: datetime, now: datetime | None = None) -> str:
    """pending assignments past their due date display as overdue; nothing is written back"""
    now = now or datetime.now(timezone.utc)
    if status == AssignmentStatus.PENDING.value and _as_utc(due_date) < now:
        return OVERDUE
    return status


# ---------- records ----------

class Question(CamelModel):
    id: str
    text_content: str


class Answer(CamelModel):
    question_id: str = Field(min_length=1, max_length=64)
    response: str = Field(min_length=1, max_length=2000)


class CheckIn(CamelModel):
    id: str
    title: str
    description: str | None = None
    questions: list[Question]
    due_date: datetime
    created_by: str
    created_at: datetime
    updated_at: datetime


class Assignment(CamelModel):
    user_id: str
    status: str
    assigned_at: datetime
    assigned_by: str
    completed_at: datetime | None = None


class ResponseRecord(CamelModel):
    user_id: str
    answers: list[Answer]
    submitted_at: datetime
    updated_at: datetime


class CreateCheckInData(BaseModel):
    """Repository input; request-shape validation has already happened"""
    title: str
    description: str | None = None
    questions: list[str]
    due_date: datetime
    created_by: str
    assigned_user_ids: list[str]


# ---------- requests ----------

class CheckInCreateRequest(CamelModel):
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: str | None = Field(default=None, max_length=1000)
    questions: list[QuestionText] = Field(min_length=1, max_length=20)
    due_date: datetime
    assigned_user_ids: list[UserIdStr] = Field(min_length=1, max_length=100)

    @field_validator("due_date", mode="before")
    @classmethod
    def _iso_datetime_string(cls, v):
        if not isinstance(v, str) or not ISO_DATETIME.match(v):
            raise ValueError("dueDate must be an ISO 8601 datetime string")
        return v

    @field_validator("assigned_user_ids")
    @classmethod
    def _unique_user_ids(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("Duplicate user IDs are not allowed")
        return v


class ResponseSubmitRequest(CamelModel):
    answers: list[Answer] = Field(min_length=1, max_length=20)


# ---------- responses ----------

class AssignmentSummary(CamelModel):
    status: str
    display_status: str
    assigned_at: datetime
    assigned_by: str
    completed_at: datetime | None = None


class AssignedCheckIn(CamelModel):
    check_in: CheckIn
    assignment: AssignmentSummary


class AssignmentDetail(CamelModel):
    user_id: str
    user_name: str
    user_email: str
    status: str
    display_status: str
    assigned_at: datetime
    assigned_by: str
    completed_at: datetime | None = None
    responses: list[Answer] | None = None


class StatusCounts(BaseModel):
    pending: int = 0
    completed: int = 0


class CheckInDetails(CamelModel):
    check_in: CheckIn
    assignments: list[AssignmentDetail]
    status_counts: StatusCounts


class CheckInCreated(CamelModel):
    check_in: CheckIn


class CheckInList(CamelModel):
    check_ins: list[CheckIn]
    count: int


class AssignedCheckInList(CamelModel):
    assigned_check_ins: list[AssignedCheckIn]
    count: int


class ResponseSubmitted(CamelModel):
    check_in_id: str
    user_id: str
    submitted_at: datetime
