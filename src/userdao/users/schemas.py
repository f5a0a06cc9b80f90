"""
Pydantic schemas for user records.

Field declaration order matters: it is the order in which update and filter
columns appear in generated statements.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "admin"
    MAINTAINER = "maintainer"
    USER = "user"


class UserBase(BaseModel):
    """Fields shared by every user variant."""

    name: str = Field(..., min_length=1, max_length=255, description="Unique user name")
    email: str = Field(..., min_length=1, max_length=255, description="Unique email")
    role: Role = Field(..., description="User role")


class UserCreate(UserBase):
    """Creation input; id and timestamps are assigned by the store."""

    model_config = ConfigDict(extra="forbid")

    password: str = Field(..., min_length=1, max_length=255, description="Stored as given")


class UserUpdate(BaseModel):
    """Partial update input. Only fields explicitly supplied are written."""

    model_config = ConfigDict(extra="forbid")

    id: int = Field(..., description="User ID")
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, min_length=1, max_length=255)
    password: str | None = Field(None, min_length=1, max_length=255)
    role: Role | None = None

    def to_update_data(self) -> dict[str, Any]:
        """Mapping of id plus supplied non-null fields, in declaration order."""
        data = self.model_dump(
            mode="json",
            exclude={"id"},
            exclude_unset=True,
            exclude_none=True,
        )
        return {"id": self.id, **data}


class UserRead(UserBase):
    """Public view of a user, without the password."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    created_at: datetime
    updated_at: datetime


class User(UserBase):
    """A user row with complete attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    password: str
    created_at: datetime
    updated_at: datetime

    def to_read(self) -> UserRead:
        """Drop the password for outward-facing use."""
        return UserRead.model_validate(self.model_dump(exclude={"password"}))


class UserFilter(BaseModel):
    """Case-insensitive pattern filters for paginated listing.

    Values use ILIKE syntax: `%text%` for substring, plain text for an exact
    case-insensitive match.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    email: str | None = None
    role: str | None = None

    def to_predicates(self) -> list[tuple[str, str]]:
        """(column, pattern) pairs for every filter that is set."""
        return [
            (column, pattern)
            for column, pattern in self.model_dump(exclude_none=True).items()
        ]


class UserPage(BaseModel):
    """One page of users plus the total number of matching rows."""

    items: list[User] = Field(default_factory=list)
    total_count: int = Field(0, ge=0)
