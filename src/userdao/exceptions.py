"""
Exception hierarchy for the user data-access layer.

Not-found is never an exception: find operations return None.
"""

from typing import Any


class UserDaoError(Exception):
    """Base exception for data-access errors."""

    pass


class DuplicateRecordError(UserDaoError):
    """A lookup on a unique column matched more than one row."""

    def __init__(self, column: str, value: Any, row_count: int) -> None:
        super().__init__("duplicate users")
        self.column = column
        self.value = value
        self.row_count = row_count


class MutationCardinalityError(UserDaoError):
    """A mutation returned a row count other than exactly one."""

    default_message = "mutation error"

    def __init__(self, operation: str, row_count: int, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.operation = operation
        self.row_count = row_count


class AddUserError(MutationCardinalityError):
    """Insert did not return exactly one row."""

    default_message = "add user error"


class UpdateUserError(MutationCardinalityError):
    """Update affected none or multiple rows."""

    default_message = "update user error"


class DeleteUserError(MutationCardinalityError):
    """Delete affected none or multiple rows."""

    default_message = "delete user error"


class InvalidUpdateError(UserDaoError, ValueError):
    """Update request rejected before any statement was sent."""

    pass


class MissingIdError(InvalidUpdateError):
    """Update data has no id field."""

    def __init__(self) -> None:
        super().__init__("Update data should have `id` property!")


class EmptyUpdateError(InvalidUpdateError):
    """Update data has no field besides id."""

    def __init__(self) -> None:
        super().__init__("Update data should have at least one field besides `id`!")


class InvalidQueryError(UserDaoError, ValueError):
    """Pagination or filter arguments rejected before execution."""

    pass


class StoreError(UserDaoError):
    """Failure raised by the underlying connection or database."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query
