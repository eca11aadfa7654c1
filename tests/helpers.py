from datetime import datetime, timedelta, timezone

from app.core.config import Settings
from app.core.tokens import TokenService
from app.models.user import User
from app.repositories.users import UserDirectory
from app.schemas.checkin import CreateCheckInData

TEST_SETTINGS = Settings(
    _env_file=None,
    DATABASE_URL="sqlite://",
    JWT_SECRET="test-secret",
    LOG_LEVEL="WARNING",
)

tokens = TokenService.from_settings(TEST_SETTINGS)

PASSWORD = "secret123"


def create_manager(users: UserDirectory, email="manager@local.test", name="Manager") -> User:
    return users.create_user(email=email, password=PASSWORD, name=name, role="manager")


def create_member(users: UserDirectory, manager: User, email="member@local.test", name="Member") -> User:
    return users.create_user(email=email, password=PASSWORD, name=name, role="member", manager_id=manager.id)


def auth_headers(user: User) -> dict[str, str]:
    token = tokens.issue_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def future(days=7) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def checkin_data(created_by: str, assigned: list[str], questions=None, due_date=None, title="Weekly Sync") -> CreateCheckInData:
    return CreateCheckInData(
        title=title,
        description="How is the week going?",
        questions=questions or ["What did you do?", "Any blockers?"],
        due_date=due_date or future(),
        created_by=created_by,
        assigned_user_ids=assigned,
    )


def checkin_payload(assigned: list[str], **overrides) -> dict:
    body = {
        "title": "Weekly Sync",
        "description": "How is the week going?",
        "questions": ["What did you do?", "Any blockers?"],
        "dueDate": future().isoformat(),
        "assignedUserIds": assigned,
    }
    body.update(overrides)
    return body
