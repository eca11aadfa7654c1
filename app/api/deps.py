from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.tokens import TokenService
from app.db.session import get_db
from app.db.table import CheckInTable
from app.repositories.checkins import CheckInRepository
from app.repositories.users import UserDirectory


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_checkin_repository(
    db: Session = Depends(get_db),
    users: UserDirectory = Depends(get_user_directory),
) -> CheckInRepository:
    return CheckInRepository(CheckInTable(db), users)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service
