from __future__ import annotations

from typing import Any, AsyncGenerator, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from avocado.core.app_factory import create_application
from avocado.core.config import Settings

CRON_API_KEY = "test-cron-key"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"


@pytest.fixture
def settings(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings pointing at a throwaway database with cheap bcrypt and no SMTP."""
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "avocado-test.db"))
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("CRON_API_KEY", CRON_API_KEY)
    for key in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM_EMAIL", "CORS_ALLOW_ORIGINS"):
        monkeypatch.delenv(key, raising=False)
    return Settings()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = create_application(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture(name="client")
async def client_fixture(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client


@pytest.fixture
def make_user(client: AsyncClient):
    """Register (and by default verify and log in) a student through the API."""

    async def _make(
        name: str = "Ana",
        personal_email: str = "a@x.com",
        uni_email: str = "a@uni.edu",
        password: str = "secret1",
        verify: bool = True,
    ) -> Dict[str, Any]:
        response = await client.post(
            "/api/auth/register",
            json={
                "name": name,
                "personal_email": personal_email,
                "uni_email": uni_email,
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        body = response.json()
        user: Dict[str, Any] = {
            "user_id": body["user_id"],
            "verification_token": body["verification_token"],
            "email": personal_email,
            "password": password,
        }
        if not verify:
            return user

        response = await client.post("/api/auth/verify", json={"token": body["verification_token"]})
        assert response.status_code == 200, response.text
        response = await client.post(
            "/api/auth/login", json={"email": personal_email, "password": password}
        )
        assert response.status_code == 200, response.text
        user["token"] = response.json()["token"]
        user["headers"] = {"Authorization": f"Bearer {user['token']}"}
        return user

    return _make


@pytest.fixture
def make_item(client: AsyncClient):
    async def _make(owner: Dict[str, Any], **overrides: Any) -> int:
        payload = {
            "title": "Mini Fridge",
            "description": "Works great",
            "category": "sell",
            "item_type": "appliance",
            "price": 45.0,
            "dorm_location": "Dorm I",
        }
        payload.update(overrides)
        response = await client.post("/api/marketplace/create", json=payload, headers=owner["headers"])
        assert response.status_code == 201, response.text
        return response.json()["item_id"]

    return _make
