"""
User data-access object.

Builds parameterized PostgreSQL statements for the users table, executes them
through a `QueryExecutor` and maps rows to `User` records. Column names in
statement text come from the table definition and the schema models only;
every value is bound as a positional `$n` parameter.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from userdao.exceptions import (
    AddUserError,
    DeleteUserError,
    DuplicateRecordError,
    EmptyUpdateError,
    InvalidQueryError,
    MissingIdError,
    UpdateUserError,
)
from userdao.shared.database import QueryExecutor, Row
from userdao.shared.logging import get_logger
from userdao.users.models import TABLE_NAME
from userdao.users.schemas import User, UserCreate, UserFilter, UserPage, UserUpdate

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class UpdateQuery:
    """Statement text plus its positional parameters."""

    text: str
    values: list[Any] = field(default_factory=list)


def build_update_query(table: str, data: Mapping[str, Any]) -> UpdateQuery:
    """Build an UPDATE ... RETURNING * statement from a field mapping.

    Every key except `id` becomes a `column=$n` assignment in the order given;
    `id` is bound last and used in the WHERE clause.

    Args:
        table: Target table name.
        data: Field values; must contain `id`.

    Returns:
        UpdateQuery with the statement text and ordered values.

    Raises:
        MissingIdError: `data` has no `id` key.
        EmptyUpdateError: `data` has nothing to update besides `id`.
    """
    if "id" not in data:
        raise MissingIdError()

    columns = [key for key in data if key != "id"]
    if not columns:
        raise EmptyUpdateError()

    assignments = ", ".join(f"{column}=${i}" for i, column in enumerate(columns, start=1))
    text = f"UPDATE {table} SET {assignments} WHERE id=${len(columns) + 1} RETURNING *;"
    values = [data[column] for column in columns]
    values.append(data["id"])

    return UpdateQuery(text=text, values=values)


def map_user_row(row: Row) -> User:
    """Project one result row onto a User; extra columns are ignored."""
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        password=row["password"],
        role=row["role"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_user_rows(rows: Iterable[Row]) -> list[User]:
    return [map_user_row(row) for row in rows]


class UserDao:
    """Data-access operations on the users table.

    The executor is passed to every call; the DAO holds no connection state.
    """

    def __init__(self, table: str = TABLE_NAME) -> None:
        """Initialize the DAO for a table with the users shape.

        Args:
            table: Table name. Must be a plain SQL identifier.
        """
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        self._table = table

    @property
    def table(self) -> str:
        return self._table

    async def find_all(self, executor: QueryExecutor) -> list[User]:
        """Get every user ordered by id."""
        rows = await executor.fetch(f"SELECT * FROM {self._table} ORDER BY id;")
        return map_user_rows(rows)

    async def find_all_by(
        self,
        executor: QueryExecutor,
        offset: int,
        limit: int,
        filters: UserFilter | Mapping[str, str] | None = None,
    ) -> UserPage:
        """Get one page of users matching the filters.

        Args:
            executor: Statement executor.
            offset: Number of matching rows to skip.
            limit: Maximum number of rows to return.
            filters: ILIKE patterns per column, ANDed together.

        Returns:
            UserPage with the page items and the pre-pagination match count.
        """
        if offset < 0 or limit < 0:
            raise InvalidQueryError(f"offset and limit must be >= 0, got {offset}, {limit}")

        predicates = self._filter_predicates(filters)

        # $1 and $2 are offset and limit; filter patterns start at $3
        parts = [f"SELECT *, count(*) OVER() AS total_count FROM {self._table}"]
        if predicates:
            parts.append(
                "WHERE "
                + " AND ".join(
                    f"{column} ILIKE ${i}" for i, (column, _) in enumerate(predicates, start=3)
                )
            )
        parts.append("ORDER BY id OFFSET $1 LIMIT $2;")
        query = " ".join(parts)
        rows = await executor.fetch(query, offset, limit, *(pattern for _, pattern in predicates))

        total_count = int(rows[0]["total_count"]) if rows else 0
        return UserPage(items=map_user_rows(rows), total_count=total_count)

    async def find_by_id(self, executor: QueryExecutor, user_id: int) -> User | None:
        """Get user by ID, or None."""
        return await self._find_one_by(executor, "id", user_id)

    async def find_by_name(self, executor: QueryExecutor, name: str) -> User | None:
        """Get user by name, or None."""
        return await self._find_one_by(executor, "name", name)

    async def find_by_email(self, executor: QueryExecutor, email: str) -> User | None:
        """Get user by email, or None."""
        return await self._find_one_by(executor, "email", email)

    async def add(self, executor: QueryExecutor, user: UserCreate) -> User:
        """Insert a user and return the stored row.

        Raises:
            AddUserError: The insert did not return exactly one row.
        """
        query = (
            f"INSERT INTO {self._table}(name, email, password, role) "
            f"VALUES($1, $2, $3, $4) RETURNING *;"
        )
        rows = await executor.fetch(query, user.name, user.email, user.password, user.role.value)
        users = map_user_rows(rows)
        if len(users) != 1:
            raise AddUserError("add", len(users))
        return users[0]

    async def update(self, executor: QueryExecutor, user: UserUpdate) -> User:
        """Write the supplied fields of a user and return the updated row.

        `updated_at` is left untouched.

        Raises:
            EmptyUpdateError: Only `id` was supplied.
            UpdateUserError: No row (or more than one) has that id.
        """
        query = build_update_query(self._table, user.to_update_data())
        rows = await executor.fetch(query.text, *query.values)
        users = map_user_rows(rows)
        if len(users) != 1:
            raise UpdateUserError("update", len(users))
        return users[0]

    async def delete_by_id(self, executor: QueryExecutor, user_id: int) -> User:
        """Delete a user and return its final state.

        Raises:
            DeleteUserError: No row (or more than one) has that id.
        """
        rows = await executor.fetch(
            f"DELETE FROM {self._table} WHERE id=$1 RETURNING *;",
            user_id,
        )
        users = map_user_rows(rows)
        if len(users) != 1:
            raise DeleteUserError("delete", len(users))
        logger.info("User deleted", extra={"table": self._table, "user_id": user_id})
        return users[0]

    async def _find_one_by(self, executor: QueryExecutor, column: str, value: Any) -> User | None:
        rows = await executor.fetch(f"SELECT * FROM {self._table} WHERE {column} = $1;", value)
        users = map_user_rows(rows)
        if not users:
            return None
        if len(users) > 1:
            raise DuplicateRecordError(column, value, len(users))
        return users[0]

    @staticmethod
    def _filter_predicates(
        filters: UserFilter | Mapping[str, str] | None,
    ) -> list[tuple[str, str]]:
        if filters is None:
            return []
        if not isinstance(filters, UserFilter):
            try:
                filters = UserFilter.model_validate(dict(filters))
            except ValidationError as e:
                raise InvalidQueryError(f"Invalid filter: {e}") from e
        return filters.to_predicates()


__all__ = [
    "UpdateQuery",
    "UserDao",
    "build_update_query",
    "map_user_row",
    "map_user_rows",
]
