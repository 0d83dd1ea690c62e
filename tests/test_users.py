"""
User endpoint tests: registration, login, refresh-token rotation, logout,
and self-service profile read / update / delete.
"""
import pytest
from httpx import AsyncClient

from app.services import token_service


def _auth(auth: dict) -> dict:
    return {"Authorization": f"Bearer {auth['accessToken']}"}


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_user_and_tokens(async_client: AsyncClient):
    """Registration returns 201 with the user and a token pair."""
    resp = await async_client.post("/api/users/register", json={
        "email": "newuser@example.com",
        "password": "long-enough-pw",
        "name": "New User",
        "avatarUrl": "https://example.com/avatars/new.png",
    })
    assert resp.status_code == 201
    body = resp.json()
    user = body["user"]
    assert user["email"] == "newuser@example.com"
    assert user["name"] == "New User"
    assert user["avatarUrl"] == "https://example.com/avatars/new.png"
    assert "passwordHash" not in user and "password" not in user
    assert token_service.decode_access_token(body["accessToken"]) == user["id"]
    assert len(body["refreshToken"]) == 64


@pytest.mark.asyncio
async def test_register_without_avatar(async_client: AsyncClient):
    resp = await async_client.post("/api/users/register", json={
        "email": "plain@example.com",
        "password": "long-enough-pw",
        "name": "Plain",
    })
    assert resp.status_code == 201
    assert resp.json()["user"]["avatarUrl"] is None


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_409(async_client: AsyncClient, register):
    await register("dup")
    resp = await async_client.post("/api/users/register", json={
        "email": "dup@example.com",
        "password": "another-password",
        "name": "Someone Else",
    })
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email already exists"


@pytest.mark.asyncio
async def test_register_short_password_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/api/users/register", json={
        "email": "short@example.com",
        "password": "short",
        "name": "Short",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Validation failed"


@pytest.mark.asyncio
async def test_register_invalid_email_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/api/users/register", json={
        "email": "not-an-email",
        "password": "long-enough-pw",
        "name": "Bad Email",
    })
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_with_correct_credentials(async_client: AsyncClient, register):
    registered = await register("alice")
    resp = await async_client.post("/api/users/login", json={
        "email": "alice@example.com",
        "password": "s3cret-password",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["id"] == registered["user"]["id"]
    assert token_service.decode_access_token(body["accessToken"]) == registered["user"]["id"]
    assert body["refreshToken"] != registered["refreshToken"]


@pytest.mark.asyncio
async def test_login_with_mixed_case_email_as_registered(async_client: AsyncClient):
    """Whatever form the address was registered in, the same form logs in."""
    reg = await async_client.post("/api/users/register", json={
        "email": "Alice@Example.COM",
        "password": "long-enough-pw",
        "name": "Alice",
    })
    assert reg.status_code == 201
    stored = reg.json()["user"]["email"]
    assert stored == "Alice@example.com"

    for email in ("Alice@Example.COM", stored):
        resp = await async_client.post("/api/users/login", json={
            "email": email,
            "password": "long-enough-pw",
        })
        assert resp.status_code == 200, email
        assert resp.json()["user"]["id"] == reg.json()["user"]["id"]

    dup = await async_client.post("/api/users/register", json={
        "email": "Alice@EXAMPLE.com",
        "password": "long-enough-pw",
        "name": "Alice Again",
    })
    assert dup.status_code == 409


@pytest.mark.asyncio
async def test_update_email_to_mixed_case_variant_of_taken_address(
    async_client: AsyncClient, register
):
    await register("owner")
    auth = await register("mover")
    resp = await async_client.put(
        f"/api/users/{auth['user']['id']}",
        json={"email": "owner@EXAMPLE.com"},
        headers=_auth(auth),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_fail_alike(
    async_client: AsyncClient, register
):
    """Both failures are 401 with the same body, so existence does not leak."""
    await register("bob")
    wrong_pw = await async_client.post("/api/users/login", json={
        "email": "bob@example.com",
        "password": "not-the-password",
    })
    unknown = await async_client.post("/api/users/login", json={
        "email": "nobody@example.com",
        "password": "not-the-password",
    })
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json() == unknown.json() == {"error": "Invalid credentials"}


# ---------------------------------------------------------------------------
# Refresh token rotation
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_refresh_rotates_token(async_client: AsyncClient, register):
    """A refresh token works once; the replacement works afterwards."""
    auth = await register("carol")
    first = await async_client.post(
        "/api/users/refresh-token", json={"refreshToken": auth["refreshToken"]}
    )
    assert first.status_code == 200
    rotated = first.json()
    assert rotated["refreshToken"] != auth["refreshToken"]
    assert rotated["user"]["id"] == auth["user"]["id"]

    replay = await async_client.post(
        "/api/users/refresh-token", json={"refreshToken": auth["refreshToken"]}
    )
    assert replay.status_code == 401

    second = await async_client.post(
        "/api/users/refresh-token", json={"refreshToken": rotated["refreshToken"]}
    )
    assert second.status_code == 200


@pytest.mark.asyncio
async def test_refresh_with_unknown_token_returns_401(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/users/refresh-token", json={"refreshToken": "f" * 64}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid or expired refresh token"


@pytest.mark.asyncio
async def test_refresh_with_missing_body_returns_400(async_client: AsyncClient):
    resp = await async_client.post("/api/users/refresh-token", json={})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_logout_revokes_every_refresh_token(async_client: AsyncClient, register):
    auth = await register("dave")
    login = await async_client.post("/api/users/login", json={
        "email": "dave@example.com",
        "password": "s3cret-password",
    })
    second_session = login.json()["refreshToken"]

    resp = await async_client.post("/api/users/logout", headers=_auth(auth))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully"}

    for token in (auth["refreshToken"], second_session):
        refresh = await async_client.post(
            "/api/users/refresh-token", json={"refreshToken": token}
        )
        assert refresh.status_code == 401

    # Logging out again is harmless.
    again = await async_client.post("/api/users/logout", headers=_auth(auth))
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_logout_requires_access_token(async_client: AsyncClient):
    resp = await async_client.post("/api/users/logout")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_bearer_token_returns_401(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/users/logout", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid access token"


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_user(async_client: AsyncClient, register):
    auth = await register("erin")
    user_id = auth["user"]["id"]
    resp = await async_client.get(f"/api/users/{user_id}", headers=_auth(auth))
    assert resp.status_code == 200
    assert resp.json()["email"] == "erin@example.com"


@pytest.mark.asyncio
async def test_get_user_requires_auth(async_client: AsyncClient, register):
    auth = await register("frank")
    resp = await async_client.get(f"/api/users/{auth['user']['id']}")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_get_unknown_user_returns_404(async_client: AsyncClient, register):
    auth = await register("gina")
    resp = await async_client.get("/api/users/does-not-exist", headers=_auth(auth))
    assert resp.status_code == 404
    assert resp.json()["error"] == "User not found"


@pytest.mark.asyncio
async def test_partial_update_changes_only_supplied_fields(
    async_client: AsyncClient, register
):
    auth = await register("hank")
    user_id = auth["user"]["id"]
    resp = await async_client.put(
        f"/api/users/{user_id}", json={"name": "Henry"}, headers=_auth(auth)
    )
    assert resp.status_code == 200
    user = resp.json()
    assert user["name"] == "Henry"
    assert user["email"] == "hank@example.com"


@pytest.mark.asyncio
async def test_password_change_replaces_hash(async_client: AsyncClient, register):
    auth = await register("ivy")
    user_id = auth["user"]["id"]
    resp = await async_client.put(
        f"/api/users/{user_id}",
        json={"password": "brand-new-password"},
        headers=_auth(auth),
    )
    assert resp.status_code == 200

    old = await async_client.post("/api/users/login", json={
        "email": "ivy@example.com", "password": "s3cret-password",
    })
    new = await async_client.post("/api/users/login", json={
        "email": "ivy@example.com", "password": "brand-new-password",
    })
    assert old.status_code == 401
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_clear_avatar_with_null(async_client: AsyncClient):
    reg = await async_client.post("/api/users/register", json={
        "email": "pic@example.com",
        "password": "long-enough-pw",
        "name": "Pic",
        "avatarUrl": "https://example.com/pic.png",
    })
    auth = reg.json()
    resp = await async_client.put(
        f"/api/users/{auth['user']['id']}", json={"avatarUrl": None}, headers=_auth(auth)
    )
    assert resp.status_code == 200
    assert resp.json()["avatarUrl"] is None


@pytest.mark.asyncio
async def test_update_email_to_taken_address_returns_409(async_client: AsyncClient, register):
    await register("jack")
    auth = await register("jill")
    resp = await async_client.put(
        f"/api/users/{auth['user']['id']}",
        json={"email": "jack@example.com"},
        headers=_auth(auth),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_update_other_user_is_forbidden(async_client: AsyncClient, register):
    victim = await register("kate")
    attacker = await register("liam")
    resp = await async_client.put(
        f"/api/users/{victim['user']['id']}",
        json={"name": "Hacked"},
        headers=_auth(attacker),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_self(async_client: AsyncClient, register):
    auth = await register("mia")
    other = await register("noah")
    user_id = auth["user"]["id"]

    resp = await async_client.delete(f"/api/users/{user_id}", headers=_auth(auth))
    assert resp.status_code == 200
    assert resp.json() == {"message": "User deleted successfully"}

    gone = await async_client.get(f"/api/users/{user_id}", headers=_auth(other))
    assert gone.status_code == 404

    # Refresh tokens went with the account.
    refresh = await async_client.post(
        "/api/users/refresh-token", json={"refreshToken": auth["refreshToken"]}
    )
    assert refresh.status_code == 401


@pytest.mark.asyncio
async def test_delete_other_user_is_forbidden(async_client: AsyncClient, register):
    victim = await register("olga")
    attacker = await register("pete")
    resp = await async_client.delete(
        f"/api/users/{victim['user']['id']}", headers=_auth(attacker)
    )
    assert resp.status_code == 403
