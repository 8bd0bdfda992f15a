import time
import pytest
import httpx
from uuid import uuid4

from app.main import app
from helpers import make_token


@pytest.mark.asyncio
async def test_health():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/")
        assert r.status_code == 200
        assert r.json()["message"] == "Property Bookings API is running"


@pytest.mark.asyncio
async def test_expired_token_is_rejected(client):
    token = make_token(uuid4(), exp=int(time.time()) - 60)
    r = await client.get("/api/v1/property/my/bookings", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Token expired. Please login again."
