import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.tokens import ACCESS, TokenError, TokenService, parse_bearer

logger = logging.getLogger(__name__)

PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/auth/login",
    "/auth/refresh",
    "/docs",
    "/docs/oauth2-redirect",
    "/redoc",
    "/openapi.json",
})


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


class Identity(BaseModel):
    """Verified caller, attached to request.state by AuthMiddleware"""
    id: str
    email: str
    role: str


def authentication_failed(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "error": "Authentication failed", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Verifies the access token on every non-public request and stores the
    caller on `request.state.identity`. Route handlers never see a request
    that failed authentication.
    """

    def __init__(self, app, token_service: TokenService, public_paths=PUBLIC_PATHS):
        super().__init__(app)
        self.token_service = token_service
        self.public_paths = public_paths

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in self.public_paths:
            return await call_next(request)

        try:
            token = parse_bearer(request.headers.get("Authorization"))
            claims = self.token_service.verify(token, expected_kind=ACCESS)
        except TokenError as exc:
            logger.info("Authentication failed for %s %s: %s", request.method, request.url.path, exc.message)
            return authentication_failed(exc.message)

        request.state.identity = Identity(id=claims.id, email=claims.email, role=claims.role)
        return await call_next(request)


def get_current_identity(request: Request) -> Identity:
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return identity
