from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, Union

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, ValidationError

from app.core.config import Settings

ACCESS = "access"
REFRESH = "refresh"


class AccessClaims(BaseModel):
    id: str
    email: str
    role: Literal["manager", "member"]
    type: Literal["access"]
    iat: int
    exp: int


class RefreshClaims(BaseModel):
    id: str
    email: str
    type: Literal["refresh"]
    iat: int
    exp: int


Claims = Union[AccessClaims, RefreshClaims]

_CLAIM_MODELS: dict[str, type[BaseModel]] = {
    ACCESS: AccessClaims,
    REFRESH: RefreshClaims,
}


class TokenError(Exception):
    """Base for every way a bearer token can fail verification."""
    message = "Invalid token"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class MissingTokenError(TokenError):
    message = "Authorization header is required"


class InvalidTokenError(TokenError):
    message = "Invalid token"


class TokenExpiredError(TokenError):
    message = "Token has expired"


class TokenNotYetValidError(TokenError):
    message = "Token not yet valid"


class WrongTokenTypeError(TokenError):
    message = "Invalid token type"


class InvalidClaimsError(TokenError):
    message = "Invalid token payload"


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an `Authorization: Bearer <token>` header."""
    if not authorization:
        raise MissingTokenError()
    if not authorization.startswith("Bearer "):
        raise MissingTokenError("Authorization header must start with 'Bearer '")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise MissingTokenError("Access token is required")
    return token


class TokenService:
    """Signs and verifies HS256 access/refresh tokens with one shared secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def sign(self, claims: dict, kind: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = dict(claims)
        to_encode.update({
            "type": kind,
            "iat": int(now.timestamp()),
            "exp": int((now + expires_delta).timestamp()),
        })
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def issue_access_token(self, *, user_id: str, email: str, role: str) -> str:
        return self.sign({"id": user_id, "email": email, "role": role}, ACCESS, self.access_ttl)

    def issue_refresh_token(self, *, user_id: str, email: str) -> str:
        return self.sign({"id": user_id, "email": email}, REFRESH, self.refresh_ttl)

    def issue_token_pair(self, *, user_id: str, email: str, role: str) -> tuple[str, str]:
        return (
            self.issue_access_token(user_id=user_id, email=email, role=role),
            self.issue_refresh_token(user_id=user_id, email=email),
        )

    def verify(self, token: str, expected_kind: str | None = None) -> Claims:
        """
        Decode `token` and validate its claim shape.

        Raises a TokenError subclass naming the failure; when
        `expected_kind` is given, a token of the other kind is rejected
        with WrongTokenTypeError.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTClaimsError as exc:
            if "nbf" in str(exc):
                raise TokenNotYetValidError()
            raise InvalidClaimsError(str(exc))
        except JWTError as exc:
            raise InvalidTokenError(f"JWT validation failed: {exc}")

        kind = payload.get("type")
        model = _CLAIM_MODELS.get(kind)
        if model is None:
            raise WrongTokenTypeError()
        if expected_kind is not None and kind != expected_kind:
            raise WrongTokenTypeError(f"Invalid token type - {expected_kind} token required")

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise InvalidClaimsError(f"Invalid token payload: {exc.error_count()} field error(s)")
