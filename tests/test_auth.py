"""
Auth endpoint tests: registration, login, ``/auth/me`` and the bearer
guard's failure modes.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.security import create_access_token


@pytest.mark.asyncio
async def test_register_and_me(async_client: AsyncClient, register):
    headers = await register("carol")
    resp = await async_client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    user = resp.json()
    assert user["username"] == "carol"
    assert user["email"] == "carol@example.com"
    assert user["role"] == "user"
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_register_duplicate_returns_409(async_client: AsyncClient, register):
    await register("dup")
    resp = await async_client.post("/auth/register", json={
        "username": "dup", "email": "other@example.com", "password": "pw",
    })
    assert resp.status_code == 409

    resp = await async_client.post("/auth/register", json={
        "username": "other", "email": "DUP@example.com", "password": "pw",
    })
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_missing_fields_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={"username": "nopass", "email": "n@example.com"})
    assert resp.status_code == 400
    assert "password" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_login(async_client: AsyncClient, register):
    await register("dave")
    resp = await async_client.post("/auth/login", json={
        "email": "dave@example.com", "password": "dave-password",
    })
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, register):
    await register("erin")
    resp = await async_client.post("/auth/login", json={
        "email": "erin@example.com", "password": "wrong",
    })
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [
    None,
    "Token abc",
    "Bearer ",
    "Bearer not-a-jwt",
])
async def test_me_rejects_bad_credentials(async_client: AsyncClient, header):
    headers = {"Authorization": header} if header is not None else {}
    resp = await async_client.get("/auth/me", headers=headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_rejected(async_client: AsyncClient):
    token = create_access_token(424242)
    resp = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(async_client: AsyncClient, register):
    await register("frank")
    token = create_access_token(1, expires_delta=timedelta(seconds=-5))
    resp = await async_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path,kwargs", [
    ("PUT", "/posts/1", {"data": {"title": "x"}}),
    ("DELETE", "/posts/1", {}),
    ("PUT", "/comments/1", {"json": {"content": "x"}}),
    ("DELETE", "/comments/1", {}),
])
async def test_write_routes_require_token(async_client: AsyncClient, register, method, path, kwargs):
    """Without a token the guard answers 401 before ownership is considered."""
    alice = await register("alice")
    post = await async_client.post("/posts", data={"title": "T", "content": "C"}, headers=alice)
    assert post.status_code == 201
    comment = await async_client.post(
        "/comments", json={"content": "c", "post_id": post.json()["id"]}, headers=alice
    )
    assert comment.status_code == 201

    resp = await async_client.request(method, path, **kwargs)
    assert resp.status_code == 401
