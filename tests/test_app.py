"""Tests for the HTTP surface.

Uses ``httpx.ASGITransport`` to test Starlette in-process without
starting a real server.
"""

import httpx
import pytest
from handler.config import Settings
from handler.registry import MethodRegistry
from handler.server import app, create_app


@pytest.fixture
def client():
    """In-process async test client."""
    transport = httpx.ASGITransport(app=app)  # type: ignore[arg-type]
    return httpx.AsyncClient(transport=transport, base_url="http://test")


# ── JSON-RPC exchanges ───────────────────────────────────────────────


@pytest.mark.anyio
async def test_insert_ok(client):
    resp = await client.post(
        "/", json={"jsonrpc": "2.0", "method": "insert", "params": ["v", "v"], "id": 1}
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.json() == {"result": "Params are OK!", "error": None, "id": 1}


@pytest.mark.anyio
async def test_insert_mismatch(client):
    resp = await client.post(
        "/", json={"jsonrpc": "2.0", "method": "insert", "params": ["v", "w"], "id": 2}
    )
    assert resp.status_code == 500
    assert resp.json() == {"result": None, "error": "Params doesn't match!", "id": 2}


@pytest.mark.anyio
async def test_method_not_found(client):
    resp = await client.post("/", json={"jsonrpc": "2.0", "method": "missing", "id": 3})
    assert resp.status_code == 500
    assert resp.json() == {"result": None, "error": "Invalid request method", "id": 3}


@pytest.mark.anyio
async def test_echo_v1_request(client):
    resp = await client.post("/", json={"method": "echo", "params": ["hi"], "id": "a"})
    assert resp.status_code == 200
    assert resp.json() == {"result": ["hi"], "error": None, "id": "a"}


@pytest.mark.anyio
async def test_add(client):
    resp = await client.post("/", json={"jsonrpc": "2.0", "method": "add", "params": [3, 4], "id": 4})
    assert resp.json()["result"] == 7


@pytest.mark.anyio
async def test_notification(client):
    resp = await client.post("/", json={"jsonrpc": "2.0", "method": "insert", "params": ["v", "v"]})
    assert resp.status_code == 200
    assert resp.content == b""
    assert "content-type" not in resp.headers


@pytest.mark.anyio
async def test_parse_error(client):
    resp = await client.post(
        "/",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 500
    assert resp.content == b""


@pytest.mark.anyio
async def test_invalid_utf8(client):
    resp = await client.post("/", content=b'{"method": "\xff", "id": 1}')
    assert resp.status_code == 500
    assert resp.content == b""


@pytest.mark.anyio
async def test_runtime_error_is_redacted(client):
    resp = await client.post("/", json={"method": "insert", "params": [], "id": 5})
    assert resp.status_code == 500
    assert resp.json() == {"result": None, "error": "Runtime error", "id": 5}


@pytest.mark.anyio
async def test_greeting(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello world!"


# ── App factory ──────────────────────────────────────────────────────


@pytest.mark.anyio
async def test_custom_methods_and_debug():
    methods = MethodRegistry()

    @methods.method("divide")
    def divide(rpc, params):
        rpc.respond(params[0] / params[1])

    custom = create_app(methods, Settings(debug=True))
    transport = httpx.ASGITransport(app=custom)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        ok = await client.post("/", json={"method": "divide", "params": [6, 3], "id": 1})
        bad = await client.post("/", json={"method": "divide", "params": [1, 0], "id": 2})
        gone = await client.post("/", json={"method": "insert", "params": ["v", "v"], "id": 3})

    assert ok.json()["result"] == 2
    assert bad.json()["error"] == "division by zero"
    assert gone.json()["error"] == "Invalid request method"


@pytest.mark.anyio
async def test_body_size_limit():
    custom = create_app(settings=Settings(max_body_size=32))
    transport = httpx.ASGITransport(app=custom)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(
            "/", json={"method": "echo", "params": ["x" * 64], "id": 1}
        )
    assert resp.status_code == 500
    assert resp.content == b""
