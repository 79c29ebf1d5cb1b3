"""Shared fixtures.

Provides:
- A FastAPI app whose lifespan is entered against a temporary SQLite file
- An async HTTP client over ASGITransport
- A started DIContainer for store-level tests
- Helpers for creating users and meetings through the API
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from database import DIContainer
from main import create_app


def iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def in_days(days: float, hours: float = 0) -> str:
    return iso(datetime.now(timezone.utc) + timedelta(days=days, hours=hours))


@pytest_asyncio.fixture
async def app(tmp_path):
    """App with its store opened for the duration of the test."""
    application = create_app(database_path=str(tmp_path / "api.db"))
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def container(tmp_path) -> AsyncGenerator[DIContainer, None]:
    di_container = DIContainer(str(tmp_path / "store.db"))
    await di_container.start()
    yield di_container
    await di_container.close()


@pytest_asyncio.fixture
async def create_user(client):
    """Create a user through the API and return its JSON."""
    counter = {"n": 0}

    async def _create(name: str | None = None, email: str | None = None) -> dict[str, Any]:
        counter["n"] += 1
        payload = {
            "name": name or f"User {counter['n']}",
            "email": email or f"user{counter['n']}@example.com",
        }
        response = await client.post("/api/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest_asyncio.fixture
async def create_meeting(client):
    """Create a meeting through the API and return its JSON."""

    async def _create(organizer: str, attendees: list[str] | None = None, **fields: Any) -> dict[str, Any]:
        payload = {
            "title": "Standup",
            "startDate": in_days(1),
            "endDate": in_days(1, hours=1),
            "organizer": organizer,
            "attendees": attendees or [],
        }
        payload.update(fields)
        response = await client.post("/api/meetings", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
