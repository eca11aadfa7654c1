from fastapi import APIRouter, Depends

from app.api.deps import get_user_directory
from app.core.rbac import MANAGER, require_roles
from app.core.security import Identity, get_current_identity
from app.models.user import User
from app.repositories.users import UserDirectory
from app.schemas.envelope import ApiResponse
from app.schemas.user import MemberList, MemberOut, UserList, UserOut

router = APIRouter(prefix="/users", tags=["users"])


def to_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        email=u.email,
        name=u.name,
        role=u.role,
        manager_id=u.manager_id,
        team_id=u.team_id,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


@router.get("", response_model=ApiResponse[UserList])
def list_users(
    users: UserDirectory = Depends(get_user_directory),
    _: Identity = Depends(get_current_identity),
):
    # password hashes never leave the directory
    items = [to_out(u) for u in users.list_users()]
    return ApiResponse(message="Users fetched successfully", data=UserList(users=items, count=len(items)))


@router.get("/manager/members", response_model=ApiResponse[MemberList])
def list_my_members(
    users: UserDirectory = Depends(get_user_directory),
    current: Identity = Depends(require_roles(MANAGER)),
):
    """Team members reporting to the calling manager, for assignment pickers."""
    members = [MemberOut(id=m.id, name=m.name, email=m.email) for m in users.list_members(current.id)]
    return ApiResponse(
        message="Members fetched successfully",
        data=MemberList(manager_id=current.id, members=members, count=len(members)),
    )
