"""
Pytest configuration and fixtures for the user data-access tests.
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from userdao.users.dao import UserDao


@pytest.fixture
def executor() -> AsyncMock:
    """Executor double; set `executor.fetch.return_value` to the rows to return."""
    mock = AsyncMock(name="executor")
    mock.fetch.return_value = []
    return mock


@pytest.fixture
def dao() -> UserDao:
    return UserDao()


@pytest.fixture
def make_row() -> Callable[..., dict[str, Any]]:
    """Factory for rows shaped like `SELECT * FROM users`."""

    def _make_row(user_id: int = 1, **overrides: Any) -> dict[str, Any]:
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        row: dict[str, Any] = {
            "id": user_id,
            "name": f"user{user_id}",
            "email": f"user{user_id}@example.com",
            "password": "secret",
            "role": "user",
            "created_at": now,
            "updated_at": now,
        }
        row.update(overrides)
        return row

    return _make_row
