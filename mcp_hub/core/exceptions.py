"""
Error types raised while talking to the MCP registry.

MalformedRecord and UpstreamSchemaDrift are recovered per record (the record is
dropped); TransportError is raised for any failed HTTP exchange.
"""
from typing import Optional


class MalformedRecord(ValueError):
    """A registry item lacks the fields needed to identify a server."""


class UpstreamSchemaDrift(MalformedRecord):
    """A registry item matches neither the legacy nor the current shape."""


class TransportError(Exception):
    """HTTP failure (non-2xx status, network error or unreadable body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
