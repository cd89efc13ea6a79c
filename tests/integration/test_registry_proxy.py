import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_proxy_passes_params_and_body(client: AsyncClient, registry):
    body = {"servers": [{"server": {"name": "com.acme/pg"}}], "metadata": {"nextCursor": "n1"}}
    registry.proxy_servers.return_value = (200, body)

    response = await client.get("/api/servers?cursor=c0&limit=50&q=pg")

    assert response.status_code == 200
    assert response.json() == body
    registry.proxy_servers.assert_awaited_once_with(cursor="c0", limit=50, query="pg")


@pytest.mark.asyncio
async def test_proxy_default_limit(client: AsyncClient, registry):
    await client.get("/api/servers")

    registry.proxy_servers.assert_awaited_once_with(cursor=None, limit=100, query=None)


@pytest.mark.asyncio
async def test_proxy_keeps_upstream_status(client: AsyncClient, registry):
    registry.proxy_servers.return_value = (429, {"error": "Registry fetch failed: 429"})

    response = await client.get("/api/servers")

    assert response.status_code == 429
    assert response.json() == {"error": "Registry fetch failed: 429"}


@pytest.mark.asyncio
async def test_proxy_transport_failure(client: AsyncClient, registry):
    registry.proxy_servers.return_value = (500, {"error": "Failed to fetch registry", "details": "dns failure"})

    response = await client.get("/api/servers")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch registry"
    assert response.headers["X-Frame-Options"] == "DENY"
