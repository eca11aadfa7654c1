from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event

from app.repositories.checkins import (
    UNKNOWN_USER_EMAIL,
    UNKNOWN_USER_NAME,
    AssignmentNotFoundError,
    CheckInNotFoundError,
    assignment_sk,
    checkin_pk,
    decode_item,
    encode_assignment,
    encode_checkin,
    response_sk,
)
from app.schemas.checkin import Answer, Assignment, CheckIn, OVERDUE, Question, display_status
from tests.helpers import checkin_data, create_manager, create_member


def _answers(*pairs):
    return [Answer(question_id=q, response=r) for q, r in pairs]


def test_create_writes_meta_and_pending_assignments(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1", "U2"]))

    assert checkin.created_by == manager.id
    assert [q.text_content for q in checkin.questions] == ["What did you do?", "Any blockers?"]
    assert len({q.id for q in checkin.questions}) == 2
    assert checkin.created_at == checkin.updated_at

    rows = repo.table.query(checkin_pk(checkin.id))
    assert [r["SK"] for r in rows] == ["assignment#U1", "assignment#U2", "meta"]
    for row in rows[:2]:
        assert row["type"] == "ASSIGNMENT"
        assert row["status"] == "pending"
        assert row["assignedBy"] == manager.id


def test_get_checkin_not_found(repo):
    with pytest.raises(CheckInNotFoundError):
        repo.get_checkin("missing")


def test_manager_sees_only_own_checkins(repo, users):
    a = create_manager(users, email="a@local.test")
    b = create_manager(users, email="b@local.test")
    mine = repo.create_checkin(checkin_data(a.id, ["U1"], title="Mine"))
    repo.create_checkin(checkin_data(b.id, ["U1"], title="Theirs"))

    listed = repo.get_checkins_by_manager(a.id)
    assert [c.id for c in listed] == [mine.id]
    assert repo.get_checkins_by_manager("nobody") == []


def test_assigned_checkins_join_parent(repo, users):
    manager = create_manager(users)
    first = repo.create_checkin(checkin_data(manager.id, ["U1", "U2"], title="First"))
    second = repo.create_checkin(checkin_data(manager.id, ["U1"], title="Second"))
    repo.create_checkin(checkin_data(manager.id, ["U2"], title="Not mine"))

    assigned = repo.get_assigned_checkins_for_user("U1")
    assert {a.check_in.id for a in assigned} == {first.id, second.id}
    for a in assigned:
        assert a.assignment.status == "pending"
        assert a.assignment.display_status == "pending"
        assert a.assignment.assigned_by == manager.id

    assert repo.get_assigned_checkins_for_user("nobody") == []


def test_orphan_assignment_is_skipped(repo, users):
    manager = create_manager(users)
    real = repo.create_checkin(checkin_data(manager.id, ["U1"]))
    repo.table.put({
        "PK": checkin_pk("gone"),
        "SK": assignment_sk("U1"),
        "type": "ASSIGNMENT",
        "userId": "U1",
        "status": "pending",
        "assignedAt": datetime.now(timezone.utc).isoformat(),
        "assignedBy": manager.id,
    })

    assigned = repo.get_assigned_checkins_for_user("U1")
    assert [a.check_in.id for a in assigned] == [real.id]


def test_past_due_pending_displays_overdue(repo, users):
    manager = create_manager(users)
    past = datetime.now(timezone.utc) - timedelta(days=1)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1", "U2"], due_date=past))
    repo.submit_response(checkin.id, "U2", _answers(("q1", "done")))

    [assigned] = repo.get_assigned_checkins_for_user("U1")
    assert assigned.assignment.status == "pending"
    assert assigned.assignment.display_status == OVERDUE

    details = repo.get_checkin_details(checkin.id)
    by_user = {a.user_id: a for a in details.assignments}
    assert by_user["U1"].display_status == OVERDUE
    assert by_user["U2"].display_status == "completed"
    # derived only, the stored status stays pending
    assert repo.table.get(checkin_pk(checkin.id), assignment_sk("U1"))["status"] == "pending"
    assert details.status_counts.pending == 1
    assert details.status_counts.completed == 1


def test_display_status_rules():
    now = datetime(2026, 1, 10, tzinfo=timezone.utc)
    earlier = datetime(2026, 1, 9, tzinfo=timezone.utc)
    later = datetime(2026, 1, 11, tzinfo=timezone.utc)
    assert display_status("pending", earlier, now) == OVERDUE
    assert display_status("pending", later, now) == "pending"
    assert display_status("completed", earlier, now) == "completed"
    # naive datetimes are read as UTC
    assert display_status("pending", earlier.replace(tzinfo=None), now) == OVERDUE


def test_details_counts_and_user_fallback(repo, users):
    manager = create_manager(users)
    alice = create_member(users, manager, email="alice@local.test", name="Alice")
    checkin = repo.create_checkin(checkin_data(manager.id, [alice.id, "ghost"]))
    repo.submit_response(checkin.id, alice.id, _answers(("q1", "fine")))

    details = repo.get_checkin_details(checkin.id)
    assert details.check_in.id == checkin.id
    assert details.status_counts.pending == 1
    assert details.status_counts.completed == 1
    assert details.status_counts.pending + details.status_counts.completed == len(details.assignments)

    by_user = {a.user_id: a for a in details.assignments}
    assert by_user[alice.id].user_name == "Alice"
    assert by_user[alice.id].user_email == "alice@local.test"
    assert by_user[alice.id].responses == _answers(("q1", "fine"))
    assert by_user["ghost"].user_name == UNKNOWN_USER_NAME
    assert by_user["ghost"].user_email == UNKNOWN_USER_EMAIL
    assert by_user["ghost"].responses is None


def test_details_ignores_unrecognised_status_in_counts(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1", "U2"]))
    repo.table.update(checkin_pk(checkin.id), assignment_sk("U2"), {"status": "overdue"})

    details = repo.get_checkin_details(checkin.id)
    assert len(details.assignments) == 2
    assert details.status_counts.pending == 1
    assert details.status_counts.completed == 0


def test_details_not_found(repo):
    with pytest.raises(CheckInNotFoundError):
        repo.get_checkin_details("missing")


def test_submit_completes_assignment(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1"]))

    record = repo.submit_response(checkin.id, "U1", _answers(("q1", "a"), ("q2", "b")))
    assert record.submitted_at == record.updated_at

    assignment = decode_item(repo.table.get(checkin_pk(checkin.id), assignment_sk("U1")))
    assert assignment.status == "completed"
    assert assignment.completed_at is not None

    stored = decode_item(repo.table.get(checkin_pk(checkin.id), response_sk("U1")))
    assert [a.response for a in stored.answers] == ["a", "b"]


def test_resubmission_overwrites_answers(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1"]))

    first = repo.submit_response(checkin.id, "U1", _answers(("q1", "first")))
    second = repo.submit_response(checkin.id, "U1", _answers(("q1", "second")))

    assert second.submitted_at == first.submitted_at
    assert second.updated_at >= first.updated_at

    responses = repo.table.query(checkin_pk(checkin.id), "response#")
    assert len(responses) == 1
    assert decode_item(responses[0]).answers == _answers(("q1", "second"))


def test_submit_unassigned_writes_nothing(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1"]))

    with pytest.raises(AssignmentNotFoundError):
        repo.submit_response(checkin.id, "stranger", _answers(("q1", "x")))

    assert repo.table.get(checkin_pk(checkin.id), response_sk("stranger")) is None
    assert repo.table.get(checkin_pk(checkin.id), assignment_sk("stranger")) is None


def test_submit_missing_checkin(repo):
    with pytest.raises(CheckInNotFoundError):
        repo.submit_response("missing", "U1", _answers(("q1", "x")))


def test_decode_rejects_unknown_type():
    with pytest.raises(ValueError):
        decode_item({"PK": "checkin#1", "SK": "meta", "type": "MYSTERY"})


def test_decode_checkin_strips_key_prefix(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1"]))
    decoded = decode_item(repo.table.get(checkin_pk(checkin.id), "meta"))
    assert isinstance(decoded, CheckIn)
    assert decoded.id == checkin.id


def test_create_is_a_single_insert_batch(repo, users, engine):
    manager = create_manager(users)
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    try:
        repo.create_checkin(checkin_data(manager.id, [f"U{i}" for i in range(100)]))
    finally:
        event.remove(engine, "before_cursor_execute", _record)

    assert statements
    assert not [s for s in statements if s.lstrip().upper().startswith("SELECT")]


def test_assigned_checkins_for_many_assignments(repo):
    now = datetime.now(timezone.utc)
    items = []
    for i in range(1100):
        checkin = CheckIn(
            id=f"c{i:04d}",
            title=f"Check-in {i}",
            questions=[Question(id="q1", text_content="How are things?")],
            due_date=now + timedelta(days=1),
            created_by="M1",
            created_at=now,
            updated_at=now,
        )
        items.append(encode_checkin(checkin))
        items.append(
            encode_assignment(
                checkin.id,
                Assignment(user_id="U1", status="pending", assigned_at=now, assigned_by="M1"),
            )
        )
    repo.table.batch_write(items)

    assigned = repo.get_assigned_checkins_for_user("U1")
    assert len(assigned) == 1100
    assert len({a.check_in.id for a in assigned}) == 1100


def test_batch_get_mixed_sort_keys_and_missing(repo, users):
    manager = create_manager(users)
    checkin = repo.create_checkin(checkin_data(manager.id, ["U1"]))
    pk = checkin_pk(checkin.id)

    items = repo.table.batch_get([
        (pk, "meta"),
        (pk, assignment_sk("U1")),
        (pk, "meta"),
        (pk, assignment_sk("nobody")),
        (checkin_pk("missing"), "meta"),
    ])
    assert sorted(i["SK"] for i in items) == [assignment_sk("U1"), "meta"]
    assert repo.table.batch_get([]) == []
