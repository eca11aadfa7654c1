import logging

from sqlalchemy.orm import Session

from app.core.security import hash_password, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)

ROLES = ("manager", "member")


class UserDirectoryError(ValueError):
    pass


class UserExistsError(UserDirectoryError):
    pass


class UserDirectory:
    """CRUD over the users table."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(
        self,
        *,
        email: str,
        password: str,
        name: str,
        role: str,
        manager_id: str | None = None,
        team_id: str | None = None,
    ) -> User:
        if role not in ROLES:
            raise UserDirectoryError(f"Invalid role: {role}. Must be 'manager' or 'member'")
        if role == "member" and not manager_id:
            raise UserDirectoryError("Members must have a managerId")
        if role == "manager" and manager_id:
            raise UserDirectoryError("Managers cannot have a managerId")

        email = email.strip().lower()
        if self.exists(email):
            raise UserExistsError(f"User with email {email} already exists")

        u = User(
            email=email,
            password_hash=hash_password(password),
            name=name.strip(),
            role=role,
            manager_id=manager_id,
            team_id=team_id,
        )
        self.db.add(u)
        self.db.flush()
        logger.info("Created %s %s (%s)", role, u.id, email)
        return u

    def exists(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.strip().lower()).one_or_none()

    def find_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def find_by_ids(self, user_ids: list[str]) -> list[User]:
        """One query for the whole id list; unknown ids are simply absent."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        return self.db.query(User).filter(User.id.in_(ids)).all()

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.created_at, User.email).all()

    def list_members(self, manager_id: str) -> list[User]:
        return (
            self.db.query(User)
            .filter(User.manager_id == manager_id)
            .order_by(User.name)
            .all()
        )

    def has_members(self, manager_id: str) -> bool:
        return self.db.query(User.id).filter(User.manager_id == manager_id).first() is not None

    def authenticate(self, email: str, password: str) -> User | None:
        u = self.find_by_email(email)
        if not u:
            return None
        return u if verify_password(password, u.password_hash) else None

    def remove_by_id(self, user_id: str) -> bool:
        u = self.find_by_id(user_id)
        if not u:
            return False
        self.db.delete(u)
        self.db.flush()
        return True

    def remove_by_email(self, email: str) -> bool:
        u = self.find_by_email(email)
        if not u:
            return False
        return self.remove_by_id(u.id)

    def remove_all(self) -> int:
        count = self.db.query(User).delete()
        self.db.flush()
        return count
