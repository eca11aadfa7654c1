from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_user_directory
from app.core.security import Identity, get_current_identity
from app.repositories.users import UserDirectory
from app.schemas.auth import MeOut
from app.schemas.envelope import ApiResponse

router = APIRouter(tags=["auth"])


@router.get("/me", response_model=ApiResponse[MeOut])
def me(
    current: Identity = Depends(get_current_identity),
    users: UserDirectory = Depends(get_user_directory),
):
    """Get current user information"""
    u = users.find_by_id(current.id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return ApiResponse(
        message="User fetched successfully",
        data=MeOut(
            id=u.id,
            email=u.email,
            name=u.name,
            role=u.role,
            manager_id=u.manager_id,
            team_id=u.team_id,
        ),
    )
