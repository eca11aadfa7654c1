import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_token_service, get_user_directory
from app.core.tokens import REFRESH, TokenError, TokenService
from app.models.user import User
from app.repositories.users import UserDirectory
from app.schemas.auth import AuthUser, LoginRequest, RefreshRequest, TokenPair
from app.schemas.envelope import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_pair(tokens: TokenService, u: User) -> TokenPair:
    access, refresh = tokens.issue_token_pair(user_id=u.id, email=u.email, role=u.role)
    return TokenPair(
        access_token=access,
        refresh_token=refresh,
        user=AuthUser(id=u.id, email=u.email, role=u.role),
    )


@router.post("/login", response_model=ApiResponse[TokenPair])
def login(
    payload: LoginRequest,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    u = users.authenticate(payload.email, payload.password)
    if not u:
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return ApiResponse(message="Login successful", data=_token_pair(tokens, u))


@router.post("/refresh", response_model=ApiResponse[TokenPair])
def refresh(
    payload: RefreshRequest,
    users: UserDirectory = Depends(get_user_directory),
    tokens: TokenService = Depends(get_token_service),
):
    try:
        claims = tokens.verify(payload.refresh_token, expected_kind=REFRESH)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)

    # role comes from the directory, not from the old token
    u = users.find_by_id(claims.id)
    if not u:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return ApiResponse(message="Tokens refreshed successfully", data=_token_pair(tokens, u))
