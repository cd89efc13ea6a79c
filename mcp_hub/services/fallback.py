"""
Static catalog served when the registry is unreachable or returns nothing.
"""
from typing import List

from mcp_hub.schemas.registry import NormalizedPackage, RegistryServer, Repository, VersionDetail

REFERENCE_REPO = "https://github.com/modelcontextprotocol/servers"


def _reference_server(slug: str, description: str, category: str) -> RegistryServer:
    return RegistryServer(
        id=f"io.github.modelcontextprotocol/{slug}",
        name=f"modelcontextprotocol/{slug}",
        description=description,
        created_at="2024-11-01T00:00:00Z",
        updated_at="2025-11-01T00:00:00Z",
        version_detail=VersionDetail(version="0.6.2", release_date="2025-11-01T00:00:00Z", is_latest=True),
        packages=[NormalizedPackage(type="npm", identifier=f"@modelcontextprotocol/{slug}")],
        repository=Repository(url=REFERENCE_REPO, source="github"),
        category=category,
    )


def get_fallback_servers() -> List[RegistryServer]:
    """Well-known servers, already categorized."""
    return [
        RegistryServer(
            id="io.github.github/github-mcp-server",
            name="github/github-mcp-server",
            description="GitHub's official MCP Server: manage repos, issues, PRs, and code via natural language.",
            created_at="2025-04-01T00:00:00Z",
            updated_at="2025-12-01T00:00:00Z",
            version_detail=VersionDetail(version="0.3.0", release_date="2025-12-01T00:00:00Z", is_latest=True),
            packages=[NormalizedPackage(type="docker", identifier="ghcr.io/github/github-mcp-server")],
            repository=Repository(url="https://github.com/github/github-mcp-server", source="github"),
            category="Dev Tools",
        ),
        _reference_server(
            "server-filesystem",
            "Secure file operations with configurable access controls for local filesystem.",
            "Files & Storage",
        ),
        _reference_server(
            "server-fetch",
            "Web content fetching and conversion for efficient LLM usage.",
            "Web & Search",
        ),
        _reference_server(
            "server-memory",
            "Knowledge graph-based persistent memory system for AI agents.",
            "Memory",
        ),
        _reference_server(
            "server-git",
            "Tools to read, search, and manipulate Git repositories.",
            "Dev Tools",
        ),
        _reference_server(
            "server-sequential-thinking",
            "Dynamic and reflective problem-solving through thought sequences.",
            "AI & ML",
        ),
        _reference_server(
            "server-postgres",
            "Read-only database access with schema inspection and SQL query execution.",
            "Database",
        ),
        _reference_server(
            "server-slack",
            "Channel management and messaging capabilities for Slack workspaces.",
            "Productivity",
        ),
        _reference_server(
            "server-brave-search",
            "Web and local search using Brave's Search API.",
            "Web & Search",
        ),
        _reference_server(
            "server-puppeteer",
            "Browser automation and web scraping using Puppeteer.",
            "Web & Search",
        ),
        _reference_server(
            "server-google-maps",
            "Location services, directions, and place details via Google Maps API.",
            "Data & APIs",
        ),
        _reference_server(
            "server-aws-kb-retrieval",
            "Retrieval from AWS Knowledge Base using Bedrock Agent Runtime.",
            "Cloud & Infra",
        ),
    ]
