"""Tests for Google OAuth: user info extraction and the login/callback round trip."""

from unittest.mock import AsyncMock

from fastapi.responses import RedirectResponse
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.oauth import get_google_user_info, oauth
from app.auth.passwords import hash_password
from app.models.user import User


def _google_token(email: str = "alice@gmail.com", sub: str = "google-uid-123") -> dict:
    return {
        "access_token": "ya29.test",
        "userinfo": {
            "email": email,
            "name": "Alice Doe",
            "picture": "https://example.com/avatar.jpg",
            "sub": sub,
        },
    }


class TestGetGoogleUserInfo:
    """Test get_google_user_info extracts standardized user info from token."""

    async def test_extracts_full_userinfo(self):
        info = await get_google_user_info(_google_token())
        assert info["email"] == "alice@gmail.com"
        assert info["name"] == "Alice Doe"
        assert info["avatar_url"] == "https://example.com/avatar.jpg"
        assert info["provider"] == "google"
        assert info["provider_id"] == "google-uid-123"

    async def test_handles_missing_fields(self):
        info = await get_google_user_info({"userinfo": {}})
        assert info["email"] == ""
        assert info["name"] == ""
        assert info["avatar_url"] is None
        assert info["provider"] == "google"

    async def test_handles_no_userinfo(self):
        info = await get_google_user_info({})
        assert info["email"] == ""
        assert info["provider_id"] == ""


class TestGoogleCallback:
    """GET /api/v1/auth/google and /google/callback with the provider mocked out."""

    async def test_new_user_defaults_to_renter(self, client: AsyncClient, db_session: AsyncSession, monkeypatch):
        monkeypatch.setattr(oauth.google, "authorize_access_token", AsyncMock(return_value=_google_token()))

        response = await client.get("/api/v1/auth/google/callback")
        assert response.status_code in (302, 307)
        location = response.headers["location"]
        assert "/auth/callback?access_token=" in location
        assert "&refresh_token=" in location

        user = (await db_session.execute(select(User).where(User.email == "alice@gmail.com"))).scalar_one()
        assert user.role == "renter"
        assert user.auth_provider == "google"
        assert user.hashed_password is None

    async def test_role_chosen_before_redirect_applies(
        self, client: AsyncClient, db_session: AsyncSession, monkeypatch
    ):
        monkeypatch.setattr(
            oauth.google,
            "authorize_redirect",
            AsyncMock(return_value=RedirectResponse("https://accounts.google.com/o/oauth2/v2/auth")),
        )
        monkeypatch.setattr(
            oauth.google,
            "authorize_access_token",
            AsyncMock(return_value=_google_token(email="newhost@gmail.com", sub="google-uid-456")),
        )

        response = await client.get("/api/v1/auth/google", params={"role": "host"})
        assert response.status_code in (302, 307)

        await client.get("/api/v1/auth/google/callback")
        user = (await db_session.execute(select(User).where(User.email == "newhost@gmail.com"))).scalar_one()
        assert user.role == "host"

    async def test_invalid_role_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/google", params={"role": "admin"})
        assert response.status_code == 422

    async def test_existing_user_is_linked(self, client: AsyncClient, db_session: AsyncSession, monkeypatch):
        existing = User(
            email="alice@gmail.com",
            hashed_password=hash_password("testpass123"),
            name="Alice",
            auth_provider="local",
            role="host",
        )
        db_session.add(existing)
        await db_session.flush()
        monkeypatch.setattr(oauth.google, "authorize_access_token", AsyncMock(return_value=_google_token()))

        await client.get("/api/v1/auth/google/callback")
        await db_session.refresh(existing)
        assert existing.auth_provider == "google"
        assert existing.auth_provider_id == "google-uid-123"
        assert existing.role == "host"

    async def test_provider_failure_returns_401(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(
            oauth.google, "authorize_access_token", AsyncMock(side_effect=RuntimeError("state mismatch"))
        )
        response = await client.get("/api/v1/auth/google/callback")
        assert response.status_code == 401

    async def test_missing_email_returns_401(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(oauth.google, "authorize_access_token", AsyncMock(return_value={"userinfo": {}}))
        response = await client.get("/api/v1/auth/google/callback")
        assert response.status_code == 401
        assert response.json()["detail"] == "Google account has no email address"
