"""
Registry record normalization.

Turns one raw registry item, in either the legacy flat shape or the current
``{"server", "_meta"}`` shape, into a canonical ``RegistryServer``.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from mcp_hub.core.exceptions import MalformedRecord, UpstreamSchemaDrift
from mcp_hub.schemas.registry import (
    CurrentRecord,
    EnvVar,
    LegacyRecord,
    NormalizedPackage,
    RawEnvVar,
    RawPackage,
    RegistryServer,
    VersionDetail,
    raw_record_adapter,
)

logger = logging.getLogger(__name__)

# Registry types that are spelled differently across schema generations
PACKAGE_TYPE_ALIASES = {"oci": "docker"}


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def normalize_package_type(value: Optional[str]) -> str:
    """Lowercase a registry type and fold known aliases ("oci" -> "docker")."""
    if value is None:
        return ""
    lowered = value.strip().lower()
    return PACKAGE_TYPE_ALIASES.get(lowered, lowered)


def _default_text(value: Any) -> Optional[str]:
    """Env var defaults are text; other JSON values keep their JSON spelling."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def _normalize_env_var(raw: RawEnvVar) -> EnvVar:
    return EnvVar(
        name=raw.name or "",
        description=raw.description,
        required=bool(_first(raw.is_required, raw.isRequired, False)),
        secret=bool(_first(raw.isSecret, raw.is_secret, False)),
        default=_default_text(raw.default),
    )


def _normalize_package(raw: RawPackage) -> NormalizedPackage:
    env_vars = _first(raw.environmentVariables, raw.environment_variables) or []
    return NormalizedPackage(
        type=normalize_package_type(_first(raw.registryType, raw.registry_name)),
        identifier=_first(raw.identifier, raw.name) or "",
        version=raw.version,
        env_vars=[_normalize_env_var(env) for env in env_vars],
    )


def _from_current(record: CurrentRecord, now: Callable[[], str]) -> RegistryServer:
    body = record.server
    if not body.name:
        raise MalformedRecord("record has no server.name")

    official = record.meta.official if record.meta else None
    published_at = official.publishedAt if official else None
    updated_at = official.updatedAt if official else None
    is_latest = official.isLatest if official else None

    version_detail = None
    if body.version:
        version_detail = VersionDetail(
            version=body.version,
            release_date=updated_at,
            is_latest=True if is_latest is None else is_latest,
        )

    return RegistryServer(
        id=body.name,
        name=body.name,
        description=body.description or body.title or "",
        created_at=published_at or now(),
        updated_at=updated_at or now(),
        version_detail=version_detail,
        packages=[_normalize_package(pkg) for pkg in body.packages or []],
        repository=body.repository,
        remotes=body.remotes or [],
        website_url=body.websiteUrl,
    )


def _from_legacy(record: LegacyRecord, now: Callable[[], str]) -> RegistryServer:
    identity = record.id or record.name
    if not identity:
        raise MalformedRecord("record has neither id nor name")

    version_detail = None
    raw_version = record.version_detail
    if raw_version and raw_version.version:
        version_detail = VersionDetail(
            version=raw_version.version,
            release_date=raw_version.release_date,
            is_latest=True if raw_version.is_latest is None else raw_version.is_latest,
        )

    return RegistryServer(
        id=identity,
        name=record.name or identity,
        description=record.description or record.title or "",
        created_at=record.created_at or now(),
        updated_at=record.updated_at or now(),
        version_detail=version_detail,
        packages=[_normalize_package(pkg) for pkg in record.packages or []],
        repository=record.repository,
        remotes=record.remotes or [],
        website_url=record.websiteUrl,
    )


def normalize(raw: Any, now: Callable[[], str] = utc_now_iso) -> RegistryServer:
    """
    Convert one raw registry item into a canonical RegistryServer.

    Args:
        raw: A decoded JSON object in either registry shape.
        now: Supplies the timestamp used when the registry omits one.

    Raises:
        UpstreamSchemaDrift: the item is not a JSON object.
        MalformedRecord: the item has no identifying name.
    """
    if not isinstance(raw, Mapping):
        raise UpstreamSchemaDrift(f"expected a JSON object, got {type(raw).__name__}")

    try:
        record = raw_record_adapter.validate_python(dict(raw))
    except ValidationError as e:
        raise UpstreamSchemaDrift(f"record matches no known shape: {e.error_count()} error(s)") from e

    if isinstance(record, CurrentRecord):
        return _from_current(record, now)
    return _from_legacy(record, now)


def normalize_many(items: Iterable[Any], now: Callable[[], str] = utc_now_iso) -> List[RegistryServer]:
    """Normalize a page of items, dropping the ones that cannot be normalized."""
    servers: List[RegistryServer] = []
    for index, raw in enumerate(items):
        try:
            servers.append(normalize(raw, now=now))
        except MalformedRecord as e:
            logger.warning(f"Dropping registry item #{index}: {e}")
    return servers
