"""
SQLAlchemy model for the users table.

Only used to describe the table and render its DDL; queries go through
`userdao.users.dao` as plain parameterized SQL.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, MetaData, String, Table, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.schema import CreateTable, DropTable

from userdao.shared.database import QueryExecutor

TABLE_NAME = "users"


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class UserRow(Base):
    """A persisted user row."""

    __tablename__ = TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    # admin | maintainer | user
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.current_timestamp(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.current_timestamp(),
    )

    def __repr__(self) -> str:
        return f"<UserRow(id={self.id}, name={self.name!r}, role={self.role!r})>"


USER_COLUMNS: tuple[str, ...] = tuple(UserRow.__table__.columns.keys())


def users_table(table_name: str = TABLE_NAME) -> Table:
    """Copy of the users table definition under another name."""
    if table_name == TABLE_NAME:
        return UserRow.__table__  # type: ignore[return-value]
    return UserRow.__table__.to_metadata(MetaData(), name=table_name)


def create_table_sql(table_name: str = TABLE_NAME) -> str:
    """Render CREATE TABLE IF NOT EXISTS for the users table shape."""
    ddl = CreateTable(users_table(table_name), if_not_exists=True)
    return str(ddl.compile(dialect=postgresql.dialect())).strip()


def drop_table_sql(table_name: str = TABLE_NAME) -> str:
    """Render DROP TABLE IF EXISTS for the users table shape."""
    ddl = DropTable(users_table(table_name), if_exists=True)
    return str(ddl.compile(dialect=postgresql.dialect())).strip()


async def create_users_table(executor: QueryExecutor, table_name: str = TABLE_NAME) -> None:
    """Create the users table if it does not exist yet."""
    await executor.fetch(create_table_sql(table_name))


async def drop_users_table(executor: QueryExecutor, table_name: str = TABLE_NAME) -> None:
    """Drop the users table if it exists."""
    await executor.fetch(drop_table_sql(table_name))
