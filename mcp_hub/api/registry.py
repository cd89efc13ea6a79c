from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from mcp_hub.services.registry_service import RegistryService

router = APIRouter()


def get_registry_service():
    return RegistryService.get_instance()


@router.get("")
async def proxy_servers(
    cursor: Optional[str] = None,
    limit: int = Query(default=100, ge=1),
    q: Optional[str] = None,
    service: RegistryService = Depends(get_registry_service)
):
    """Same-origin proxy for the registry's /v0/servers listing, passed through as-is."""
    status_code, body = await service.proxy_servers(cursor=cursor, limit=limit, query=q)
    return JSONResponse(content=body, status_code=status_code)
