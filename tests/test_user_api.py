"""Integration tests for the user endpoints and app-wide behavior."""

import pytest

from dependencies import get_user_service


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Meetings API Service is running!"}


@pytest.mark.asyncio
async def test_create_and_read_user(client):
    response = await client.post("/api/users", json={"name": " Ada ", "email": "Ada@Example.com"})

    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "Ada"
    assert created["email"] == "ada@example.com"
    assert set(created) == {"id", "name", "email", "createdAt", "updatedAt"}

    fetched = await client.get(f"/api/users/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


@pytest.mark.asyncio
async def test_create_user_reports_all_validation_errors(client):
    response = await client.post("/api/users", json={"name": "", "email": "nope"})

    assert response.status_code == 400
    assert response.json() == {
        "errors": [
            {"field": "name", "message": "Name is required"},
            {"field": "email", "message": "Valid email is required"},
        ]
    }


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected_case_insensitively(client, create_user):
    first = await create_user(email="bob@example.com")

    response = await client.post("/api/users", json={"name": "Bobby", "email": " BOB@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email already exists"}
    users = (await client.get("/api/users")).json()
    assert [u["id"] for u in users] == [first["id"]]


@pytest.mark.asyncio
async def test_list_users_newest_first(client, create_user):
    first = await create_user()
    second = await create_user()
    third = await create_user()

    response = await client.get("/api/users")

    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [third["id"], second["id"], first["id"]]


@pytest.mark.asyncio
async def test_unknown_and_malformed_user_ids_are_404(client):
    for user_id in ("0" * 32, "not-an-id"):
        response = await client.get(f"/api/users/{user_id}")
        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
async def test_malformed_json_body(client):
    response = await client.post(
        "/api/users", content=b'{"name": ', headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "body"


@pytest.mark.asyncio
async def test_non_object_body(client):
    response = await client.post("/api/users", json=["Ada", "ada@example.com"])

    assert response.status_code == 400
    assert response.json() == {
        "errors": [{"field": "body", "message": "Request body must be a JSON object"}]
    }


@pytest.mark.asyncio
async def test_unmatched_routes_are_404(client):
    for method, path in (("GET", "/api/nothing"), ("PATCH", "/api/users"), ("POST", "/")):
        response = await client.request(method, path)
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}


@pytest.mark.asyncio
async def test_unexpected_errors_are_generic_500(app, client):
    class BrokenUserService:
        async def list_users(self):
            raise RuntimeError("connection reset by peer")

    app.dependency_overrides[get_user_service] = lambda: BrokenUserService()
    try:
        response = await client.get("/api/users")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong!"}


@pytest.mark.asyncio
async def test_store_failures_are_500(app, client):
    await app.state.container.close()

    response = await client.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"error": "Document store is not connected"}
