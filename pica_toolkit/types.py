"""Pica Toolkit types and data models.

This module defines all Pydantic models for the toolkit:
- Parsed identifier value types (action system IDs, connection keys)
- Remote catalog, knowledge and vault shapes
- Request descriptors and tagged execution results
"""

from enum import Enum
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class PicaModel(BaseModel):
    """Base model speaking the camelCase wire format of the Pica API."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Enums
# =============================================================================

class Environment(str, Enum):
    """Connection environment."""
    LIVE = "live"
    TEST = "test"


class Permission(str, Enum):
    """Permission level controlling which HTTP methods are discoverable."""
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


class IdentityType(str, Enum):
    """Identity scope used to filter vault connections."""
    USER = "user"
    TEAM = "team"
    ORGANIZATION = "organization"
    PROJECT = "project"


class PayloadEncoding(str, Enum):
    """Body encoding for passthrough requests."""
    JSON = "json"
    MULTIPART = "multipart"
    FORM_URLENCODED = "form_urlencoded"


# =============================================================================
# Identifier Value Types
# =============================================================================

class ActionSystemIdParts(PicaModel):
    model_config = ConfigDict(frozen=True)

    prefix: str     # e.g. 'conn_mod_def'
    metadata: str   # e.g. 'GEoTH7-tRU0'
    suffix: str     # e.g. 'RbyDQmffR5C14QTGEdELhg'


class ActionSystemId(PicaModel):
    """Validated action identifier of the form prefix::metadata::suffix."""
    model_config = ConfigDict(frozen=True)

    full_id: str
    parts: ActionSystemIdParts

    def __str__(self) -> str:
        return self.full_id


class ConnectionKeyParts(PicaModel):
    model_config = ConfigDict(frozen=True)

    environment: Environment
    platform: str           # e.g. 'postgresql'
    namespace: str          # e.g. 'default'
    id: str
    identity: Optional[str] = None


class ConnectionKey(PicaModel):
    """Validated connection key of the form environment::platform::namespace::id[|identity]."""
    model_config = ConfigDict(frozen=True)

    full_key: str
    parts: ConnectionKeyParts

    def __str__(self) -> str:
        return self.full_key


# =============================================================================
# Remote API Shapes
# =============================================================================

class Page(PicaModel, Generic[T]):
    """One page of a paginated list endpoint."""
    rows: List[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 0


class PlatformAction(PicaModel):
    """Action row returned by the search endpoint."""
    system_id: str
    title: str
    key: str = ""
    method: str
    path: str
    tags: List[str] = Field(default_factory=list)


class ActionReference(PicaModel):
    """Action as exposed to the agent after filtering."""
    title: str
    method: str
    path: str
    system_id: ActionSystemId


class ActionKnowledge(PicaModel):
    """Execution metadata and documentation for a single action."""
    id: Optional[int] = None
    system_id: str = Field(alias="_id")
    connection_platform: str
    title: str = ""
    path: str
    knowledge: str = ""
    method: str
    base_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    active: bool = True


class ActionKnowledgeEntry(PicaModel):
    title: str
    knowledge: str
    platform: str


class AvailableAction(PicaModel):
    title: str
    key: str
    method: str
    platform: str


class Connector(PicaModel):
    id: Optional[int] = None
    name: str
    key: str = ""
    platform: str
    platform_version: Optional[str] = None
    status: Optional[str] = None
    description: str = ""
    category: Optional[str] = None
    image: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    oauth: bool = False
    tools: int = 0
    version: Optional[str] = None
    active: bool = True


class PicaIntegration(PicaModel):
    name: str
    platform: str


class Connection(PicaModel):
    """Vault connection as listed by the remote service."""
    id: str
    platform_version: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    key: str
    environment: Environment
    platform: str
    identity: Optional[str] = None
    identity_type: Optional[str] = None
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    version: Optional[str] = None
    active: bool = True
    created_at: Optional[str] = None


class ConnectionReference(PicaModel):
    platform: str
    key: ConnectionKey


# =============================================================================
# Template Resolution
# =============================================================================

class TemplateResolution(PicaModel):
    """Outcome of reconciling a path template against a payload."""
    resolved_path: str
    cleaned_data: Any = None
    resolved_path_variables: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Request Descriptor & Execution Results
# =============================================================================

class RequestConfig(PicaModel):
    """Fully built passthrough request, as echoed back to the caller."""
    url: str
    method: str
    headers: Dict[str, Any] = Field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None
    data: Any = None


class ExecutionPreview(PicaModel):
    """Request built but never sent."""
    status: Literal["preview"] = "preview"
    executed: bool = False
    request_config: RequestConfig
    platform: Optional[str] = None


class ExecutionSuccess(PicaModel):
    status: Literal["success"] = "success"
    success: bool = True
    response_data: Any = None
    request_config: RequestConfig
    platform: Optional[str] = None


class ExecutionFailure(PicaModel):
    """Passthrough call failed; the error is captured, not raised."""
    status: Literal["failure"] = "failure"
    success: bool = False
    error: str
    platform: Optional[str] = None


ExecuteActionResult = Annotated[
    Union[ExecutionPreview, ExecutionSuccess, ExecutionFailure],
    Field(discriminator="status"),
]
