import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from mcp_hub.core.config import settings
from mcp_hub.core.exceptions import MalformedRecord, TransportError
from mcp_hub.schemas.catalog import (
    CatalogFacets,
    CatalogPage,
    CatalogSearchParams,
    CatalogServerDetail,
    CatalogStats,
    ComposeRequest,
    ComposeResponse,
)
from mcp_hub.schemas.registry import NormalizedPackage, RegistryServer
from mcp_hub.services.categories import DEFAULT_CATEGORY, with_category
from mcp_hub.services.fallback import get_fallback_servers
from mcp_hub.services.normalizer import normalize_package_type
from mcp_hub.services.registry_service import RegistryService

logger = logging.getLogger(__name__)

# How each package type is launched from a shell
INSTALL_COMMANDS = {
    "npm": "npx {identifier}",
    "pypi": "uvx {identifier}",
    "docker": "docker run {identifier}",
}


def _compose_entry(package: NormalizedPackage) -> Dict[str, object]:
    if package.type == "npm":
        return {"command": "npx", "args": ["-y", package.identifier]}
    if package.type == "pypi":
        return {"command": "uvx", "args": [package.identifier]}
    if package.type == "docker":
        return {"command": "docker", "args": ["run", "-i", "--rm", package.identifier]}
    return {}


class CatalogService:
    """
    The categorized server catalog the API serves.

    Aggregates the registry through RegistryService, classifies every server
    and keeps the result for ``cache_ttl`` seconds. When the registry cannot
    provide anything, a static fallback catalog is served instead so the
    catalog never comes back empty.
    """

    _instance: Optional["CatalogService"] = None

    def __init__(self, registry: Optional[RegistryService] = None, cache_ttl: Optional[int] = None):
        self.registry = registry or RegistryService.get_instance()
        ttl = cache_ttl if cache_ttl is not None else settings.REGISTRY_CACHE_TTL_SECONDS
        self._cache_ttl = timedelta(seconds=ttl)
        self._servers: List[RegistryServer] = []
        self._index: Dict[str, RegistryServer] = {}
        self._last_updated: Optional[datetime] = None
        self.is_fallback = False
        self._refresh_lock = asyncio.Lock()  # One registry walk at a time

    @classmethod
    def get_instance(cls) -> "CatalogService":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    async def get_servers(self, force_refresh: bool = False) -> List[RegistryServer]:
        """Get the whole catalog, using the cache if still fresh."""
        if not force_refresh and self._is_cache_valid():
            return list(self._servers)

        async with self._refresh_lock:
            # Another caller may have refreshed while this one waited
            if force_refresh or not self._is_cache_valid():
                await self._refresh()
        return list(self._servers)

    def _is_cache_valid(self) -> bool:
        if not self._last_updated:
            return False
        return datetime.now() - self._last_updated < self._cache_ttl

    async def _refresh(self) -> None:
        logger.info("Fetching catalog from the MCP registry...")
        try:
            fetched = await self.registry.fetch_all()
        except TransportError as e:
            logger.error(f"Registry fetch error: {e}", exc_info=True)
            self._keep_or_fallback()
            return

        catalog = self._build_catalog(fetched)
        if not catalog:
            logger.warning("Registry returned 0 valid servers")
            self._keep_or_fallback()
            return

        self._set_catalog(catalog, is_fallback=False)
        self._last_updated = datetime.now()
        logger.info(f"Catalog updated with {len(catalog)} servers.")

    def _keep_or_fallback(self) -> None:
        # A stale registry catalog beats the fallback; _last_updated is left alone
        # so the next call retries the registry.
        if self._servers and not self.is_fallback:
            logger.warning(f"Serving stale catalog of {len(self._servers)} servers")
            return
        logger.warning("Serving fallback catalog")
        self._set_catalog(get_fallback_servers(), is_fallback=True)

    def _set_catalog(self, servers: List[RegistryServer], is_fallback: bool) -> None:
        self._servers = servers
        self._index = {s.id: s for s in servers}
        self.is_fallback = is_fallback

    @staticmethod
    def _build_catalog(servers: List[RegistryServer]) -> List[RegistryServer]:
        """Classify servers and drop id-less or repeated ones (first occurrence wins)."""
        seen: Dict[str, RegistryServer] = {}
        for server in servers:
            if not server.id:
                continue
            if server.id in seen:
                logger.warning(f"Duplicate server id '{server.id}' in registry, keeping the first")
                continue
            seen[server.id] = with_category(server)
        return list(seen.values())

    async def search(self, params: CatalogSearchParams) -> CatalogPage:
        """Text search plus category and package-type filters, then offset pagination."""
        servers = await self.get_servers()

        filtered = servers
        if params.query and params.query.strip():
            q = params.query.strip().lower()
            filtered = [
                s for s in filtered
                if q in s.name.lower() or q in s.description.lower()
            ]

        if params.category:
            filtered = [s for s in filtered if s.category == params.category]

        if params.package_type:
            wanted = normalize_package_type(params.package_type)
            filtered = [s for s in filtered if any(p.type == wanted for p in s.packages)]

        start = params.offset
        end = params.offset + params.limit
        return CatalogPage(
            items=filtered[start:end],
            total=len(filtered),
            offset=params.offset,
            limit=params.limit,
            is_fallback=self.is_fallback,
        )

    async def get_server(self, server_id: str) -> Optional[RegistryServer]:
        """
        Get a single server by its ID.

        Served from the catalog when present, otherwise looked up in the
        registry directly. Raises TransportError if that lookup fails.
        """
        await self.get_servers()
        if server_id in self._index:
            return self._index[server_id]

        try:
            server = await self.registry.fetch_server(server_id)
        except MalformedRecord as e:
            logger.warning(f"Registry record for '{server_id}' could not be normalized: {e}")
            return None
        return with_category(server) if server else None

    async def facets(self) -> CatalogFacets:
        servers = await self.get_servers()
        categories = sorted({s.category or DEFAULT_CATEGORY for s in servers})
        package_types = sorted({p.type for s in servers for p in s.packages if p.type})
        return CatalogFacets(categories=categories, package_types=package_types)

    async def stats(self) -> CatalogStats:
        servers = await self.get_servers()

        def count(package_type: str) -> int:
            return sum(1 for s in servers if any(p.type == package_type for p in s.packages))

        return CatalogStats(
            total=len(servers),
            npm=count("npm"),
            pypi=count("pypi"),
            docker=count("docker"),
        )

    @staticmethod
    def install_command(server: RegistryServer) -> Optional[str]:
        """Shell command that runs the server's first package, if it has a known type."""
        if not server.packages:
            return None
        package = server.packages[0]
        template = INSTALL_COMMANDS.get(package.type)
        if not template or not package.identifier:
            return None
        return template.format(identifier=package.identifier)

    def describe(self, server: RegistryServer) -> CatalogServerDetail:
        return CatalogServerDetail(**server.model_dump(), install_command=self.install_command(server))

    async def compose(self, request: ComposeRequest) -> ComposeResponse:
        """
        Build a Claude Desktop ``mcpServers`` config from selected servers.

        Entries are keyed by the last path segment of the server name. Blank
        env values are left out; unknown ids are reported in ``missing``.
        """
        mcp_servers: Dict[str, Dict[str, object]] = {}
        missing: List[str] = []

        for selection in request.servers:
            server = await self.get_server(selection.id)
            if server is None:
                missing.append(selection.id)
                continue

            if not server.packages:
                logger.info(f"Server '{server.id}' has no package to launch, leaving it out")
                continue

            short_name = server.name.split("/")[-1] or server.name
            entry = _compose_entry(server.packages[0])

            env = {k: v for k, v in selection.env.items() if v.strip() != ""}
            if env:
                entry["env"] = env

            mcp_servers[short_name] = entry

        return ComposeResponse(config={"mcpServers": mcp_servers}, missing=missing)
