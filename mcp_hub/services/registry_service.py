import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mcp_hub.core.config import settings
from mcp_hub.core.exceptions import TransportError
from mcp_hub.schemas.registry import RawRegistryPage, RegistryPage, RegistryServer
from mcp_hub.services.normalizer import normalize, normalize_many

logger = logging.getLogger(__name__)

SERVERS_PATH = "/v0/servers"


class RegistryService:
    """
    Client for the MCP registry API.

    Fetches single pages, single records, and walks cursor pagination to
    aggregate the catalog. Every record goes through the normalizer, so callers
    only ever see canonical RegistryServer objects regardless of which schema
    generation the registry answered with.
    """

    _instance: Optional["RegistryService"] = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        page_limit: Optional[int] = None,
        max_pages: Optional[int] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.REGISTRY_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REGISTRY_TIMEOUT_SECONDS
        self.page_limit = page_limit or settings.REGISTRY_PAGE_LIMIT
        self.max_pages = max_pages or settings.REGISTRY_MAX_PAGES
        self.user_agent = user_agent or settings.REGISTRY_USER_AGENT
        # Injected in tests (httpx.MockTransport); None means a real network transport
        self.transport = transport

    @classmethod
    def get_instance(cls) -> "RegistryService":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json", "User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out fetching {path} (exceeded {self.timeout}s)") from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error fetching {path}: {e}") from e

        if response.is_error:
            raise TransportError(
                f"Registry fetch failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Registry returned a non-JSON body for {path}",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _build_params(cursor: Optional[str], limit: Optional[int], query: Optional[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if cursor:
            params["cursor"] = cursor
        if limit:
            params["limit"] = limit
        if query:
            params["q"] = query
        return params

    @staticmethod
    def _parse_page(data: Any) -> RegistryPage:
        """
        Turn a list response into a RegistryPage.

        The current schema reports the cursor and count under ``metadata``
        (``nextCursor``, ``count``); the legacy schema used top-level
        ``next_cursor`` and ``total_count``. Items that cannot be normalized
        are dropped.
        """
        if not isinstance(data, dict):
            raise TransportError(f"Registry returned {type(data).__name__} instead of a page object")
        try:
            raw_page = RawRegistryPage.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"Registry page envelope is malformed: {e.error_count()} error(s)") from e

        metadata = raw_page.metadata
        next_cursor = (metadata.nextCursor if metadata else None) or raw_page.next_cursor or None
        total_count = metadata.count if metadata and metadata.count is not None else raw_page.total_count

        return RegistryPage(
            servers=normalize_many(raw_page.servers or []),
            next_cursor=next_cursor,
            total_count=total_count,
        )

    async def fetch_servers(
        self,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        query: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> RegistryPage:
        """
        Fetch and normalize one page of servers.

        Raises:
            TransportError: the request failed or the body was unreadable.
        """
        params = self._build_params(cursor, limit or self.page_limit, query)
        if client is not None:
            data = await self._get_json(client, SERVERS_PATH, params)
        else:
            async with self._client() as own_client:
                data = await self._get_json(own_client, SERVERS_PATH, params)
        return self._parse_page(data)

    async def fetch_server(self, server_id: str) -> Optional[RegistryServer]:
        """
        Get a single server by its ID (e.g. 'io.github.user/server').

        Returns None when the registry answers 404. Raises TransportError for
        other failures and MalformedRecord when the record cannot be normalized.
        """
        path = f"{SERVERS_PATH}/{quote(server_id, safe='')}"
        async with self._client() as client:
            try:
                data = await self._get_json(client, path)
            except TransportError as e:
                if e.status_code == 404:
                    logger.info(f"Registry has no server '{server_id}'")
                    return None
                raise
        return normalize(data)

    async def fetch_all(self, query: Optional[str] = None, limit: Optional[int] = None) -> List[RegistryServer]:
        """
        Walk the registry's cursor pagination and return every normalized server.

        Stops when a page carries no cursor or after ``max_pages`` pages. A
        failed first page raises TransportError; a failed later page ends the
        walk and whatever was collected so far is returned.
        """
        limit = limit or self.page_limit
        servers: List[RegistryServer] = []

        async with self._client() as client:
            page = await self.fetch_servers(limit=limit, query=query, client=client)
            servers.extend(page.servers)
            pages_fetched = 1
            cursor = page.next_cursor
            logger.info(f"Registry page 1: {len(page.servers)} servers")

            while cursor and pages_fetched < self.max_pages:
                try:
                    page = await self.fetch_servers(cursor=cursor, limit=limit, query=query, client=client)
                except TransportError as e:
                    logger.warning(
                        f"Registry page {pages_fetched + 1} failed, keeping {len(servers)} servers: {e}"
                    )
                    break
                servers.extend(page.servers)
                pages_fetched += 1
                cursor = page.next_cursor
                logger.info(f"Registry page {pages_fetched}: {len(page.servers)} servers")
            else:
                if cursor:
                    logger.warning(f"Stopped registry pagination at the {self.max_pages}-page limit")

        return servers

    async def proxy_servers(
        self,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        query: Optional[str] = None,
    ) -> Tuple[int, Any]:
        """
        Forward a list request to the registry untouched.

        Returns (status_code, body). Upstream errors keep the upstream status
        with an ``error`` body; transport failures become a 500.
        """
        params = self._build_params(cursor, limit, query)
        try:
            async with self._client() as client:
                response = await client.get(SERVERS_PATH, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Registry proxy request failed: {e}")
            return 500, {"error": "Failed to fetch registry", "details": str(e)}

        if response.is_error:
            logger.warning(f"Registry proxy got upstream status {response.status_code}")
            return response.status_code, {"error": f"Registry fetch failed: {response.status_code}"}

        try:
            return response.status_code, response.json()
        except ValueError as e:
            return 500, {"error": "Failed to fetch registry", "details": str(e)}
