import pytest
from httpx import AsyncClient

from mcp_hub.core.exceptions import TransportError
from tests.factories import make_server


@pytest.mark.asyncio
async def test_catalog_search(client: AsyncClient):
    """Test searching the categorized catalog."""
    response = await client.get("/api/catalog?q=postgres")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == "com.acme/pg"
    assert data["items"][0]["category"] == "Database"
    assert data["is_fallback"] is False


@pytest.mark.asyncio
async def test_catalog_filters(client: AsyncClient):
    by_category = await client.get("/api/catalog", params={"category": "Dev Tools"})
    by_package = await client.get("/api/catalog", params={"package_type": "oci"})

    assert [s["id"] for s in by_category.json()["items"]] == ["com.acme/github-helper"]
    assert [s["id"] for s in by_package.json()["items"]] == ["com.acme/crawler"]


@pytest.mark.asyncio
async def test_catalog_pagination_validation(client: AsyncClient):
    response = await client.get("/api/catalog?limit=0")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_catalog_falls_back_when_registry_down(client: AsyncClient, registry):
    registry.fetch_all.side_effect = TransportError("Registry fetch failed: 503", status_code=503)

    response = await client.get("/api/catalog?limit=100")

    assert response.status_code == 200
    data = response.json()
    assert data["is_fallback"] is True
    assert data["total"] == 12


@pytest.mark.asyncio
async def test_catalog_stats(client: AsyncClient):
    response = await client.get("/api/catalog/stats")

    assert response.status_code == 200
    assert response.json() == {"total": 3, "npm": 1, "pypi": 1, "docker": 1}


@pytest.mark.asyncio
async def test_catalog_facets(client: AsyncClient):
    response = await client.get("/api/catalog/facets")

    assert response.status_code == 200
    assert response.json() == {
        "categories": ["Database", "Dev Tools", "Web & Search"],
        "package_types": ["docker", "npm", "pypi"],
    }


@pytest.mark.asyncio
async def test_catalog_get_server(client: AsyncClient):
    """Test getting a specific server, IDs contain slashes."""
    response = await client.get("/api/catalog/com.acme/github-helper")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "com.acme/github-helper"
    assert data["category"] == "Dev Tools"
    assert data["install_command"] == "npx @acme/github-helper"


@pytest.mark.asyncio
async def test_catalog_get_server_from_registry(client: AsyncClient, registry):
    registry.fetch_server.return_value = make_server("com.acme/mailer", "Send email")

    response = await client.get("/api/catalog/com.acme/mailer")

    assert response.status_code == 200
    assert response.json()["category"] == "Productivity"
    assert response.json()["install_command"] is None


@pytest.mark.asyncio
async def test_catalog_get_server_not_found(client: AsyncClient):
    response = await client.get("/api/catalog/com.acme/nonexistent")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_catalog_get_server_upstream_failure(client: AsyncClient, registry):
    registry.fetch_server.side_effect = TransportError("Registry fetch failed: 500", status_code=500)

    response = await client.get("/api/catalog/com.acme/elsewhere")

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_compose(client: AsyncClient):
    response = await client.post("/api/compose", json={
        "servers": [
            {"id": "com.acme/pg", "env": {"PGHOST": "localhost", "PGPASSWORD": ""}},
            {"id": "com.acme/ghost"},
        ]
    })

    assert response.status_code == 200
    assert response.json() == {
        "config": {"mcpServers": {"pg": {"command": "uvx", "args": ["acme-pg"], "env": {"PGHOST": "localhost"}}}},
        "missing": ["com.acme/ghost"],
    }


@pytest.mark.asyncio
async def test_compose_rejects_bad_body(client: AsyncClient):
    response = await client.post("/api/compose", json={"servers": [{"env": {}}]})

    assert response.status_code == 422
