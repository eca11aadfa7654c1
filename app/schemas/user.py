from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.envelope import CamelModel

Role = Literal["manager", "member"]


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: Role
    manager_id: str | None = None
    team_id: str | None = None
    created_at: datetime
    updated_at: datetime


class MemberOut(CamelModel):
    id: str
    name: str
    email: str


class UserList(CamelModel):
    users: list[UserOut]
    count: int


class MemberList(CamelModel):
    manager_id: str
    members: list[MemberOut]
    count: int


class UserCreate(CamelModel):
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=100)
    role: Role
    manager_id: str | None = None
    team_id: str | None = Field(default=None, max_length=50)
