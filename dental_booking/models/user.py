from datetime import UTC, datetime

from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class UserBase(SQLModel):
    name: str
    email: str = Field(unique=True, index=True)
    role: str
    overview: str | None = None
    avatar: str | None = None


class User(UserBase, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    created_at: NaiveDatetime = Field(default_factory=_utc_naive_now, sa_type=DateTime())


class UserCreate(SQLModel):
    name: str
    email: str
    password: str
    role: str
    overview: str | None = None
    avatar: str | None = None


class UserPublic(SQLModel):
    id: int
    name: str
    email: str
    role: str
    overview: str | None = None
    avatar: str | None = None
