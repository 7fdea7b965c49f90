import os
import random
import pytest

# Set env vars for testing, before anything imports app.main
os.environ["LIVEKIT_URL"] = "ws://localhost:7880"
os.environ["LIVEKIT_API_KEY"] = "devkey"
os.environ["LIVEKIT_API_SECRET"] = "devsecret-0123456789abcdef0123456789abcdef"
os.environ.pop("TOKEN_TTL", None)

from fastapi.testclient import TestClient
from app.livekit.tokens import SigningContext


@pytest.fixture
def ctx():
    return SigningContext(
        url="ws://localhost:7880",
        api_key="devkey",
        api_secret="devsecret-0123456789abcdef0123456789abcdef",
        ttl=3600,
    )


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def client():
    from app.main import app
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
