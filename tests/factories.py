from mcp_hub.schemas.registry import NormalizedPackage, RegistryServer


def make_server(server_id, description="", packages=()):
    """Canonical server; packages are (type, identifier) pairs."""
    return RegistryServer(
        id=server_id,
        name=server_id,
        description=description,
        created_at="2025-01-01T00:00:00Z",
        updated_at="2025-01-01T00:00:00Z",
        packages=[NormalizedPackage(type=t, identifier=i) for t, i in packages],
    )
