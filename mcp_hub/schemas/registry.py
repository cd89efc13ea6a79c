"""
Pydantic models for the MCP registry.

Two families live here:

* Raw models decode what the registry sends. The registry has shipped two
  incompatible record shapes: a legacy flat record and the current
  ``{"server": {...}, "_meta": {...}}`` wrapper. ``RawRecord`` is a tagged union
  over both, discriminated by the presence of a ``server`` object. Every
  optional field is lenient: a value of the wrong type decodes as None, and a
  bad entry inside a list is skipped, so one odd field never costs the record.
* Canonical models (``RegistryServer`` and friends) are what the rest of the
  application works with, whatever shape the registry used.
"""
from typing import Annotated, Any, List, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    WrapValidator,
)

OFFICIAL_META_KEY = "io.modelcontextprotocol.registry/official"

T = TypeVar("T")


def _or_none(value: Any, handler) -> Any:
    try:
        return handler(value)
    except ValidationError:
        return None


def _skip_invalid(value: Any, handler) -> Any:
    """Decode a list, dropping the entries that decoded to None."""
    try:
        items = handler(value)
    except ValidationError:
        return None
    if items is None:
        return None
    return [item for item in items if item is not None]


Lenient = Annotated[Optional[T], WrapValidator(_or_none)]
LenientList = Annotated[Optional[List[Lenient[T]]], WrapValidator(_skip_invalid)]


class _RawModel(BaseModel):
    # Numeric versions ("version": 2) are read as text
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


# --- Raw registry payloads -------------------------------------------------

class RawEnvVar(_RawModel):
    name: Lenient[str] = None
    description: Lenient[str] = None
    is_required: Lenient[bool] = None
    isRequired: Lenient[bool] = None
    is_secret: Lenient[bool] = None
    isSecret: Lenient[bool] = None
    default: Any = None


class RawPackage(_RawModel):
    # Current schema
    registryType: Lenient[str] = None
    identifier: Lenient[str] = None
    environmentVariables: LenientList[RawEnvVar] = None
    # Legacy schema
    registry_name: Lenient[str] = None
    name: Lenient[str] = None
    environment_variables: LenientList[RawEnvVar] = None
    # Both
    version: Lenient[str] = None


class Repository(_RawModel):
    url: Lenient[str] = None
    source: Lenient[str] = None
    id: Lenient[str] = None
    subfolder: Lenient[str] = None


class Remote(_RawModel):
    type: Lenient[str] = ""
    url: Lenient[str] = ""


class RawVersionDetail(_RawModel):
    version: Lenient[str] = None
    release_date: Lenient[str] = None
    is_latest: Lenient[bool] = None


class OfficialMeta(_RawModel):
    status: Lenient[str] = None
    publishedAt: Lenient[str] = None
    updatedAt: Lenient[str] = None
    isLatest: Lenient[bool] = None


class RegistryMeta(_RawModel):
    official: Lenient[OfficialMeta] = Field(default=None, alias=OFFICIAL_META_KEY)


class RawServerBody(_RawModel):
    name: Lenient[str] = None
    title: Lenient[str] = None
    description: Lenient[str] = None
    version: Lenient[str] = None
    websiteUrl: Lenient[str] = None
    repository: Lenient[Repository] = None
    packages: LenientList[RawPackage] = None
    remotes: LenientList[Remote] = None


class CurrentRecord(_RawModel):
    """Nested record: ``{"server": {...}, "_meta": {...}}``."""
    server: RawServerBody
    meta: Lenient[RegistryMeta] = Field(default=None, alias="_meta")


class LegacyRecord(_RawModel):
    """Flat record used by the first registry API generation."""
    id: Lenient[str] = None
    name: Lenient[str] = None
    title: Lenient[str] = None
    description: Lenient[str] = None
    created_at: Lenient[str] = None
    updated_at: Lenient[str] = None
    version_detail: Lenient[RawVersionDetail] = None
    websiteUrl: Lenient[str] = None
    repository: Lenient[Repository] = None
    packages: LenientList[RawPackage] = None
    remotes: LenientList[Remote] = None


def _record_shape(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return "current" if isinstance(value.get("server"), dict) else "legacy"
    if isinstance(value, CurrentRecord):
        return "current"
    if isinstance(value, LegacyRecord):
        return "legacy"
    return None


RawRecord = Annotated[
    Union[
        Annotated[CurrentRecord, Tag("current")],
        Annotated[LegacyRecord, Tag("legacy")],
    ],
    Discriminator(_record_shape),
]

raw_record_adapter: TypeAdapter = TypeAdapter(RawRecord)


class PageMetadata(_RawModel):
    nextCursor: Optional[str] = None
    count: Optional[int] = None


class RawRegistryPage(_RawModel):
    """List response envelope. Items stay undecoded so one bad item cannot sink the page."""
    servers: Optional[List[Any]] = None
    metadata: Optional[PageMetadata] = None
    # Legacy envelope
    next_cursor: Optional[str] = None
    total_count: Optional[int] = None


# --- Canonical models -------------------------------------------------------

class EnvVar(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    required: bool = False
    secret: bool = False
    default: Optional[str] = None


class NormalizedPackage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str  # lowercased; "oci" is folded into "docker"
    identifier: str
    version: Optional[str] = None
    env_vars: List[EnvVar] = Field(default_factory=list)


class VersionDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    release_date: Optional[str] = None
    is_latest: bool = True


class RegistryServer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str  # the registry name, e.g. "io.github.user/server"
    name: str
    description: str = ""
    created_at: str
    updated_at: str
    version_detail: Optional[VersionDetail] = None
    packages: List[NormalizedPackage] = Field(default_factory=list)
    repository: Optional[Repository] = None
    remotes: List[Remote] = Field(default_factory=list)
    website_url: Optional[str] = None

    # Derived, set by the category classifier
    category: Optional[str] = None


class RegistryPage(BaseModel):
    servers: List[RegistryServer] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    total_count: Optional[int] = None
