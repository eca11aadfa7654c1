from fastapi import HTTPException

from app.core.security import Identity
from app.schemas.checkin import CheckIn


def assert_user_is_creator(identity: Identity, checkin: CheckIn):
    if checkin.created_by != identity.id:
        raise HTTPException(status_code=403, detail="Only the manager who created this check-in can view it")
