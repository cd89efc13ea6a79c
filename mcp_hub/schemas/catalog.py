from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from mcp_hub.schemas.registry import RegistryServer


class CatalogSearchParams(BaseModel):
    query: Optional[str] = None
    category: Optional[str] = None
    package_type: Optional[str] = None
    limit: int = Field(default=24, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class CatalogPage(BaseModel):
    items: List[RegistryServer]
    total: int
    offset: int
    limit: int
    is_fallback: bool = False


class CatalogServerDetail(RegistryServer):
    install_command: Optional[str] = None


class CatalogStats(BaseModel):
    total: int
    npm: int
    pypi: int
    docker: int


class CatalogFacets(BaseModel):
    categories: List[str]
    package_types: List[str]


class ComposeSelection(BaseModel):
    id: str
    env: Dict[str, str] = Field(default_factory=dict)


class ComposeRequest(BaseModel):
    servers: List[ComposeSelection] = Field(default_factory=list)


class ComposeResponse(BaseModel):
    # Claude Desktop config, e.g. {"mcpServers": {"server-git": {...}}}
    config: Dict[str, Any]
    missing: List[str] = Field(default_factory=list)
