"""
Check-in data access over the single check-in table.

Three record kinds share one partition per check-in:

    PK = checkin#<id>   SK = meta                 type = CHECKIN
    PK = checkin#<id>   SK = assignment#<userId>  type = ASSIGNMENT
    PK = checkin#<id>   SK = response#<userId>    type = RESPONSE

Callers only ever see the records from app.schemas.checkin; the key layout
stays inside this module.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Union

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from app.db.table import CheckInTable, Item
from app.repositories.users import UserDirectory
from app.schemas.checkin import (
    Answer,
    AssignedCheckIn,
    Assignment,
    AssignmentDetail,
    AssignmentStatus,
    AssignmentSummary,
    CheckIn,
    CheckInDetails,
    CheckInItemType,
    CreateCheckInData,
    Question,
    ResponseRecord,
    StatusCounts,
    display_status,
)

logger = logging.getLogger(__name__)

META_SK = "meta"
ASSIGNMENT_PREFIX = "assignment#"
RESPONSE_PREFIX = "response#"
CHECKIN_PREFIX = "checkin#"

CREATED_BY_INDEX = "created-by-index"
USER_TYPE_INDEX = "user-type-index"

UNKNOWN_USER_NAME = "Unknown User"
UNKNOWN_USER_EMAIL = "unknown@example.com"


class CheckInNotFoundError(LookupError):
    pass


class AssignmentNotFoundError(LookupError):
    pass


class CheckInCreationError(RuntimeError):
    pass


def checkin_pk(checkin_id: str) -> str:
    return f"{CHECKIN_PREFIX}{checkin_id}"


def assignment_sk(user_id: str) -> str:
    return f"{ASSIGNMENT_PREFIX}{user_id}"


def response_sk(user_id: str) -> str:
    return f"{RESPONSE_PREFIX}{user_id}"


def _checkin_id(pk: str) -> str:
    return pk[len(CHECKIN_PREFIX):]


def _iso(value: datetime) -> str:
    return value.isoformat()


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------- row codec ----------

def encode_checkin(c: CheckIn) -> Item:
    return {
        "PK": checkin_pk(c.id),
        "SK": META_SK,
        "type": CheckInItemType.CHECKIN.value,
        "createdBy": c.created_by,
        "title": c.title,
        "description": c.description,
        "questions": [{"id": q.id, "textContent": q.text_content} for q in c.questions],
        "dueDate": _iso(c.due_date),
        "createdAt": _iso(c.created_at),
        "updatedAt": _iso(c.updated_at),
    }


def encode_assignment(checkin_id: str, a: Assignment) -> Item:
    item: Item = {
        "PK": checkin_pk(checkin_id),
        "SK": assignment_sk(a.user_id),
        "type": CheckInItemType.ASSIGNMENT.value,
        "userId": a.user_id,
        "status": a.status,
        "assignedAt": _iso(a.assigned_at),
        "assignedBy": a.assigned_by,
    }
    if a.completed_at:
        item["completedAt"] = _iso(a.completed_at)
    return item


def encode_response(checkin_id: str, r: ResponseRecord) -> Item:
    return {
        "PK": checkin_pk(checkin_id),
        "SK": response_sk(r.user_id),
        "type": CheckInItemType.RESPONSE.value,
        "userId": r.user_id,
        "answers": [a.model_dump(by_alias=True) for a in r.answers],
        "submittedAt": _iso(r.submitted_at),
        "updatedAt": _iso(r.updated_at),
    }


def _decode_checkin(item: Item) -> CheckIn:
    return CheckIn(
        id=_checkin_id(item["PK"]),
        title=item["title"],
        description=item.get("description"),
        questions=item.get("questions") or [],
        due_date=item["dueDate"],
        created_by=item["createdBy"],
        created_at=item["createdAt"],
        updated_at=item["updatedAt"],
    )


def _decode_assignment(item: Item) -> Assignment:
    return Assignment(
        user_id=item["userId"],
        status=item["status"],
        assigned_at=item["assignedAt"],
        assigned_by=item["assignedBy"],
        completed_at=item.get("completedAt"),
    )


def _decode_response(item: Item) -> ResponseRecord:
    return ResponseRecord(
        user_id=item["userId"],
        answers=item.get("answers") or [],
        submitted_at=item["submittedAt"],
        updated_at=item.get("updatedAt") or item["submittedAt"],
    )


Record = Union[CheckIn, Assignment, ResponseRecord]

_DECODERS: dict[str, Callable[[Item], BaseModel]] = {
    CheckInItemType.CHECKIN.value: _decode_checkin,
    CheckInItemType.ASSIGNMENT.value: _decode_assignment,
    CheckInItemType.RESPONSE.value: _decode_response,
}


def decode_item(item: Item) -> Record:
    """Pick the decoder from the item's `type` discriminator."""
    try:
        decoder = _DECODERS[item["type"]]
    except KeyError:
        raise ValueError(f"Unknown check-in item type: {item.get('type')!r}") from None
    return decoder(item)


# ---------- repository ----------

class CheckInRepository:
    def __init__(self, table: CheckInTable, users: UserDirectory):
        self.table = table
        self.users = users

    def create_checkin(self, data: CreateCheckInData) -> CheckIn:
        now = _now()
        checkin = CheckIn(
            id=str(uuid.uuid4()),
            title=data.title,
            description=data.description,
            questions=[Question(id=str(uuid.uuid4()), text_content=text) for text in data.questions],
            due_date=data.due_date,
            created_by=data.created_by,
            created_at=now,
            updated_at=now,
        )
        items = [encode_checkin(checkin)]
        items.extend(
            encode_assignment(
                checkin.id,
                Assignment(
                    user_id=user_id,
                    status=AssignmentStatus.PENDING.value,
                    assigned_at=now,
                    assigned_by=data.created_by,
                ),
            )
            for user_id in data.assigned_user_ids
        )

        try:
            self.table.batch_write(items)
        except SQLAlchemyError as exc:
            logger.exception("Batch write for check-in %s failed", checkin.id)
            raise CheckInCreationError("Failed to create check-in") from exc

        logger.info(
            "Created check-in %s by %s with %d assignment(s)",
            checkin.id, data.created_by, len(data.assigned_user_ids),
        )
        return checkin

    def get_checkins_by_manager(self, creator_id: str) -> list[CheckIn]:
        items = self.table.query_index(CREATED_BY_INDEX, creator_id, CheckInItemType.CHECKIN.value)
        return [decode_item(i) for i in items]

    def get_checkin(self, checkin_id: str) -> CheckIn:
        item = self.table.get(checkin_pk(checkin_id), META_SK)
        if not item:
            raise CheckInNotFoundError(f"Check-in with ID {checkin_id} not found")
        return decode_item(item)

    def get_assigned_checkins_for_user(self, user_id: str) -> list[AssignedCheckIn]:
        assignment_items = self.table.query_index(
            USER_TYPE_INDEX, user_id, CheckInItemType.ASSIGNMENT.value
        )
        if not assignment_items:
            return []

        parents = self.table.batch_get([(i["PK"], META_SK) for i in assignment_items])
        parent_by_pk = {p["PK"]: decode_item(p) for p in parents}

        out: list[AssignedCheckIn] = []
        for item in assignment_items:
            checkin = parent_by_pk.get(item["PK"])
            if checkin is None:
                logger.warning("Skipping assignment %s/%s: parent check-in missing", item["PK"], item["SK"])
                continue
            a = decode_item(item)
            out.append(
                AssignedCheckIn(
                    check_in=checkin,
                    assignment=AssignmentSummary(
                        status=a.status,
                        display_status=display_status(a.status, checkin.due_date),
                        assigned_at=a.assigned_at,
                        assigned_by=a.assigned_by,
                        completed_at=a.completed_at,
                    ),
                )
            )
        return out

    def get_checkin_details(self, checkin_id: str) -> CheckInDetails:
        checkin = self.get_checkin(checkin_id)
        pk = checkin_pk(checkin_id)

        assignments = [decode_item(i) for i in self.table.query(pk, ASSIGNMENT_PREFIX)]
        responses = [decode_item(i) for i in self.table.query(pk, RESPONSE_PREFIX)]
        answers_by_user = {r.user_id: r.answers for r in responses}

        # only the two persisted states are tallied
        counts = StatusCounts()
        for a in assignments:
            if a.status == AssignmentStatus.PENDING.value:
                counts.pending += 1
            elif a.status == AssignmentStatus.COMPLETED.value:
                counts.completed += 1

        users = {u.id: u for u in self.users.find_by_ids([a.user_id for a in assignments])}

        details = []
        for a in assignments:
            u = users.get(a.user_id)
            details.append(
                AssignmentDetail(
                    user_id=a.user_id,
                    user_name=u.name if u else UNKNOWN_USER_NAME,
                    user_email=u.email if u else UNKNOWN_USER_EMAIL,
                    status=a.status,
                    display_status=display_status(a.status, checkin.due_date),
                    assigned_at=a.assigned_at,
                    assigned_by=a.assigned_by,
                    completed_at=a.completed_at,
                    responses=answers_by_user.get(a.user_id),
                )
            )

        return CheckInDetails(check_in=checkin, assignments=details, status_counts=counts)

    def submit_response(self, checkin_id: str, user_id: str, answers: list[Answer]) -> ResponseRecord:
        """
        Store the user's answers and mark their assignment completed.

        Both writes go through the same session, so they commit or roll
        back together. A resubmission replaces the answers and keeps the
        first submittedAt.
        """
        pk = checkin_pk(checkin_id)
        if not self.table.get(pk, META_SK):
            raise CheckInNotFoundError(f"Check-in with ID {checkin_id} not found")

        now = _now()
        previous = self.table.get(pk, response_sk(user_id))
        submitted_at = decode_item(previous).submitted_at if previous else now

        updated = self.table.update(
            pk,
            assignment_sk(user_id),
            {"status": AssignmentStatus.COMPLETED.value, "completedAt": _iso(now)},
        )
        if updated is None:
            raise AssignmentNotFoundError(f"User {user_id} is not assigned to check-in {checkin_id}")

        record = ResponseRecord(user_id=user_id, answers=answers, submitted_at=submitted_at, updated_at=now)
        self.table.put(encode_response(checkin_id, record))

        logger.info("User %s %s check-in %s", user_id, "resubmitted" if previous else "submitted", checkin_id)
        return record
