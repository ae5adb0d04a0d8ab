"""Pica Toolkit - Pica integration actions as callable tools for LLM agents.

This package provides:
- Identifier Parser: validated action IDs and connection keys
- Template Resolver: path placeholder reconciliation
- Action Resolver: action lookup, search and knowledge retrieval
- Connection Validator: caller visibility checks for connections
- Passthrough Executor: request building, encoding, preview and redaction
- Pagination Aggregator: draining page-based list endpoints
- Tool Registry: the agent-facing tool surface
"""

from .types import (
    # Enums
    Environment,
    Permission,
    IdentityType,
    PayloadEncoding,
    # Identifiers
    ActionSystemId,
    ActionSystemIdParts,
    ConnectionKey,
    ConnectionKeyParts,
    # Remote shapes
    Page,
    PlatformAction,
    ActionReference,
    ActionKnowledge,
    ActionKnowledgeEntry,
    AvailableAction,
    Connector,
    PicaIntegration,
    Connection,
    ConnectionReference,
    # Execution
    TemplateResolution,
    RequestConfig,
    ExecutionPreview,
    ExecutionSuccess,
    ExecutionFailure,
    ExecuteActionResult,
)
from .errors import (
    PicaError,
    FormatError,
    MissingVariableError,
    AccessError,
    UnknownActionError,
    RemoteError,
)
from .config import Settings, get_settings
from .identifiers import normalize_action_id, parse_action_id, parse_connection_key
from .templates import (
    resolve_template_variables,
    replace_path_variables,
    replace_base_url_in_knowledge,
)
from .pagination import paginate_results
from .client import PicaApiClient
from .actions import ActionResolver, clean_actions, filter_by_permissions, filter_by_allowed_actions
from .connections import ConnectionValidator, ConnectorCatalog, clean_connections
from .executor import PassthroughExecutor, PREVIEW_SECRET_PLACEHOLDER, REDACTED_SECRET
from .schemas import (
    ExecuteActionParams,
    GetActionsKnowledgeParams,
    SearchPlatformActionsParams,
    PromptToConnectIntegrationParams,
)
from .tool_registry import ToolDefinition, ToolRegistry, ToolSchemaGenerator
from .toolkit import Pica, get_toolkit

__all__ = [
    # Enums
    "Environment",
    "Permission",
    "IdentityType",
    "PayloadEncoding",
    # Identifiers
    "ActionSystemId",
    "ActionSystemIdParts",
    "ConnectionKey",
    "ConnectionKeyParts",
    "normalize_action_id",
    "parse_action_id",
    "parse_connection_key",
    # Remote shapes
    "Page",
    "PlatformAction",
    "ActionReference",
    "ActionKnowledge",
    "ActionKnowledgeEntry",
    "AvailableAction",
    "Connector",
    "PicaIntegration",
    "Connection",
    "ConnectionReference",
    # Execution
    "TemplateResolution",
    "RequestConfig",
    "ExecutionPreview",
    "ExecutionSuccess",
    "ExecutionFailure",
    "ExecuteActionResult",
    # Errors
    "PicaError",
    "FormatError",
    "MissingVariableError",
    "AccessError",
    "UnknownActionError",
    "RemoteError",
    # Configuration
    "Settings",
    "get_settings",
    # Core Components
    "resolve_template_variables",
    "replace_path_variables",
    "replace_base_url_in_knowledge",
    "paginate_results",
    "PicaApiClient",
    "ActionResolver",
    "clean_actions",
    "filter_by_permissions",
    "filter_by_allowed_actions",
    "ConnectionValidator",
    "ConnectorCatalog",
    "clean_connections",
    "PassthroughExecutor",
    "PREVIEW_SECRET_PLACEHOLDER",
    "REDACTED_SECRET",
    # Tool surface
    "ExecuteActionParams",
    "GetActionsKnowledgeParams",
    "SearchPlatformActionsParams",
    "PromptToConnectIntegrationParams",
    "ToolDefinition",
    "ToolRegistry",
    "ToolSchemaGenerator",
    "Pica",
    "get_toolkit",
]
