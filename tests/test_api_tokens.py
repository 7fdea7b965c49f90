import logging
import re
import pytest
from livekit import api
from app.api.tokens import get_signing_context
from app.livekit.tokens import SigningContext, verify_token

GUEST_RE = re.compile(r"^guest-[a-z0-9]{6}$")


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "url": "ws://localhost:7880"}


def test_token_host(client, ctx):
    resp = client.post("/token", json={"room": "studio", "name": "alice", "role": "host"})
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"url", "token", "identity", "role", "room"}
    assert data["identity"] == "alice"
    assert data["role"] == "host"
    assert data["room"] == "studio"
    assert data["url"] == "ws://localhost:7880"
    assert verify_token(data["token"], ctx).video.can_publish is True


def test_token_empty_body(client, ctx):
    resp = client.post("/token")
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] == "viewer"
    assert data["room"] == "broadcast"
    assert GUEST_RE.match(data["identity"])
    assert verify_token(data["token"], ctx).video.can_publish is False


def test_token_malformed_bodies_are_defaults(client):
    for content in [b"{not json", b"[1, 2]", b"\"host\"", b"null"]:
        resp = client.post("/token", content=content, headers={"content-type": "application/json"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "viewer"


def test_role_case_sensitive(client):
    resp = client.post("/token", json={"role": "Host"})
    assert resp.json()["role"] == "viewer"


def test_host_shortcut_overrides_role(client, ctx):
    resp = client.post("/token/host", json={"role": "viewer", "room": "stage", "name": "bob"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] == "host"
    assert data["room"] == "stage"
    assert data["identity"] == "bob"
    assert verify_token(data["token"], ctx).video.can_publish is True


def test_viewer_shortcut_overrides_role(client, ctx):
    resp = client.post("/token/viewer", json={"role": "host"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] == "viewer"
    assert verify_token(data["token"], ctx).video.can_publish is False


def test_metadata_passed_through(client, ctx):
    resp = client.post("/token", json={"name": "carol", "metadata": {"seat": 1}})
    claims = verify_token(resp.json()["token"], ctx)
    assert claims.metadata == '{"seat":1}'


def test_signing_failure_is_opaque_500(client, monkeypatch):
    def boom(self):
        raise ValueError("secret leaked devsecret-0123456789abcdef0123456789abcdef")

    monkeypatch.setattr(api.AccessToken, "to_jwt", boom)
    resp = client.post("/token", json={"name": "alice"})
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to issue token"}
    assert "devsecret" not in resp.text


def test_context_is_injected(client):
    from app.main import app
    fake = SigningContext(url="wss://media.example", api_key="k2", api_secret="s2-0123456789abcdef0123456789abcdef")
    app.dependency_overrides[get_signing_context] = lambda: fake
    data = client.post("/token/host").json()
    assert data["url"] == "wss://media.example"
    assert verify_token(data["token"], fake).identity == data["identity"]


def test_security_headers(client):
    resp = client.get("/health")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "SAMEORIGIN"
    assert resp.headers["referrer-policy"] == "no-referrer"


def test_cors_preflight(client):
    resp = client.options(
        "/token",
        headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_deeply_nested_body_is_defaults(client):
    depth = 100_000
    body = b'{"metadata": ' + b"[" * depth + b"]" * depth + b"}"
    resp = client.post("/token", content=body, headers={"content-type": "application/json"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] == "viewer"
    assert data["room"] == "broadcast"
    assert GUEST_RE.match(data["identity"])


def test_access_log_line(client, caplog):
    caplog.set_level(logging.INFO, logger="app.access")
    client.get("/health")
    lines = [r.getMessage() for r in caplog.records if r.name == "app.access"]
    assert any(re.match(r"^GET /health 200 - \d+\.\d{3} ms$", line) for line in lines)


def test_create_app_exits_without_required_config(monkeypatch):
    from app.core.config import get_settings
    from app.main import create_app

    monkeypatch.delenv("LIVEKIT_API_SECRET")
    get_settings.cache_clear()
    try:
        with pytest.raises(SystemExit) as exc:
            create_app()
        assert exc.value.code == 1
    finally:
        get_settings.cache_clear()
