import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from mcp_hub.core.exceptions import TransportError
from mcp_hub.schemas.catalog import (
    CatalogFacets,
    CatalogPage,
    CatalogSearchParams,
    CatalogServerDetail,
    CatalogStats,
    ComposeRequest,
    ComposeResponse,
)
from mcp_hub.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_catalog_service():
    return CatalogService.get_instance()


@router.get("/catalog", response_model=CatalogPage)
async def search_catalog(
    q: Optional[str] = None,
    category: Optional[str] = None,
    package_type: Optional[str] = None,
    limit: int = Query(default=24, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: CatalogService = Depends(get_catalog_service)
):
    """Search and filter the categorized server catalog."""
    params = CatalogSearchParams(
        query=q, category=category, package_type=package_type, limit=limit, offset=offset
    )
    return await service.search(params)


@router.get("/catalog/stats", response_model=CatalogStats)
async def catalog_stats(service: CatalogService = Depends(get_catalog_service)):
    return await service.stats()


@router.get("/catalog/facets", response_model=CatalogFacets)
async def catalog_facets(service: CatalogService = Depends(get_catalog_service)):
    """Categories and package types present in the catalog, for filter menus."""
    return await service.facets()


@router.get("/catalog/{server_id:path}", response_model=CatalogServerDetail)
async def get_catalog_server(
    server_id: str,
    service: CatalogService = Depends(get_catalog_service)
):
    """Get details for a specific MCP server by ID (e.g. 'io.github.user/server')."""
    try:
        server = await service.get_server(server_id)
    except TransportError as e:
        logger.error(f"Registry lookup for '{server_id}' failed: {e}")
        raise HTTPException(status_code=502, detail=f"Registry lookup failed: {e}")
    if not server:
        raise HTTPException(
            status_code=404,
            detail=f"Server '{server_id}' not found in MCP registry",
        )
    return service.describe(server)


@router.post("/compose", response_model=ComposeResponse)
async def compose_config(
    request: ComposeRequest,
    service: CatalogService = Depends(get_catalog_service)
):
    """Build a Claude Desktop config for the selected servers."""
    try:
        return await service.compose(request)
    except TransportError as e:
        logger.error(f"Registry lookup during compose failed: {e}")
        raise HTTPException(status_code=502, detail=f"Registry lookup failed: {e}")
