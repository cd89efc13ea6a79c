from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mcp_hub.api.catalog import get_catalog_service
from mcp_hub.api.registry import get_registry_service
from mcp_hub.main import app
from mcp_hub.services.catalog_service import CatalogService
from mcp_hub.services.registry_service import RegistryService
from tests.factories import make_server


@pytest.fixture
def registry():
    """RegistryService stand-in; tests set return values per call."""
    mock_registry = MagicMock(spec=RegistryService)
    mock_registry.fetch_all = AsyncMock(return_value=[
        make_server("com.acme/github-helper", "Manage GitHub issues", [("npm", "@acme/github-helper")]),
        make_server("com.acme/pg", "Query Postgres", [("pypi", "acme-pg")]),
        make_server("com.acme/crawler", "Crawl websites", [("docker", "ghcr.io/acme/crawler")]),
    ])
    mock_registry.fetch_server = AsyncMock(return_value=None)
    mock_registry.proxy_servers = AsyncMock(return_value=(200, {"servers": []}))
    return mock_registry


@pytest.fixture
def catalog(registry):
    return CatalogService(registry=registry, cache_ttl=300)


@pytest_asyncio.fixture
async def client(registry, catalog) -> AsyncGenerator[AsyncClient, None]:
    """Provide an AsyncClient for the FastAPI app with the services overridden."""
    app.dependency_overrides[get_registry_service] = lambda: registry
    app.dependency_overrides[get_catalog_service] = lambda: catalog

    # Use ASGITransport for testing FastAPI apps
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()
