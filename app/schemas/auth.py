from pydantic import Field

from app.schemas.envelope import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(min_length=1, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class AuthUser(CamelModel):
    id: str
    email: str
    role: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    user: AuthUser


class MeOut(CamelModel):
    id: str
    email: str
    name: str
    role: str
    manager_id: str | None = None
    team_id: str | None = None
