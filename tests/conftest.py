"""Shared test fixtures."""

import os

# Settings requires a JWT secret at import time
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest_asyncio.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints (no lifespan, no DB)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
