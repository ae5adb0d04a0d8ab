"""Pica Toolkit - agent-facing facade over the passthrough pipeline.

Composes the action resolver, connection validator and passthrough
executor around one HTTP client and exposes them as a ToolRegistry for an
LLM agent runtime.
"""

import logging
from typing import Dict, List, Optional

import httpx

from .actions import ActionResolver
from .client import PicaApiClient
from .config import Settings, WILDCARD, get_settings
from .connections import ConnectionValidator, ConnectorCatalog, clean_connections
from .errors import AccessError
from .executor import PassthroughExecutor
from .schemas import (
    ExecuteActionParams,
    GetActionsKnowledgeParams,
    ListPicaConnectionsParams,
    PromptToConnectIntegrationParams,
    SearchPlatformActionsParams,
)
from .tool_registry import ToolDefinition, ToolRegistry
from .types import (
    ActionKnowledgeEntry,
    ActionReference,
    AvailableAction,
    Connection,
    ConnectionReference,
    Connector,
    ExecuteActionResult,
    PicaIntegration,
)


class LogMessages:
    """Initialization messages emitted through the toolkit logger."""
    KNOWLEDGE_AGENT_INITIALIZED = "[Pica] Knowledge Agent Mode Initialized"
    KNOWLEDGE_AGENT_ACTIONS_ACCESS = "[Pica] Agent has access to all actions for knowledge discovery"
    KNOWLEDGE_AGENT_EXECUTE_CONFIG = "[Pica] Execute tool returns request configurations without execution"
    KNOWLEDGE_AGENT_CONNECTIONS_DISABLED = "[Pica] Connection management tools are disabled in knowledge mode"
    ALL_CONNECTORS_ACCESS = "[Pica] Initialized client with access to all connectors"
    LIST_CONNECTIONS_ENABLED = "[Pica] The `listPicaConnections` tool is enabled"
    LIST_CONNECTIONS_DISABLED = "[Pica] The `listPicaConnections` tool is disabled"
    ALL_ACTIONS_ACCESS = "[Pica] Initialized client with access to all actions"
    AUTHKIT_ENABLED = "[Pica] AuthKit enabled - The `promptToConnectIntegration` tool is available"

    @staticmethod
    def connector_count(count: int) -> str:
        return f"[Pica] Initialized client with access to {count} {pluralize(count, 'connector')}"

    @staticmethod
    def action_count(count: int) -> str:
        return f"[Pica] Initialized client with access to {count} {pluralize(count, 'action')}"


def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")


class Pica:
    """
    Entry point for agent integrations.

    Modes:
    - Standard: tools search, document and execute actions for real
    - Knowledge agent: all actions are discoverable and ``execute`` only
      returns request previews
    """

    def __init__(
        self,
        settings: Settings,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self._logger = logger or logging.getLogger(__name__)

        self._api = PicaApiClient(settings, http_client)
        self.actions = ActionResolver(self._api)
        self.connections = ConnectionValidator(self._api, settings)
        self.connectors = ConnectorCatalog(self._api, settings)
        self.executor = PassthroughExecutor(self._api, settings, self.actions, self.connections)

        self._log_initialization()

    def _log_initialization(self) -> None:
        log = self._logger.info

        if self.settings.knowledge_agent:
            log(LogMessages.KNOWLEDGE_AGENT_INITIALIZED)
            log(LogMessages.KNOWLEDGE_AGENT_ACTIONS_ACCESS)
            log(LogMessages.KNOWLEDGE_AGENT_EXECUTE_CONFIG)
            log(LogMessages.KNOWLEDGE_AGENT_CONNECTIONS_DISABLED)
        else:
            if self.settings.all_connectors:
                log(LogMessages.ALL_CONNECTORS_ACCESS)
                log(LogMessages.LIST_CONNECTIONS_ENABLED)
            else:
                log(LogMessages.connector_count(len(self.settings.connectors)))
                log(LogMessages.LIST_CONNECTIONS_DISABLED)

            if self.settings.all_actions:
                log(LogMessages.ALL_ACTIONS_ACCESS)
            else:
                log(LogMessages.action_count(len(self.settings.actions or [])))

        if self.settings.authkit:
            log(LogMessages.AUTHKIT_ENABLED)

    async def close(self) -> None:
        await self._api.close()

    @property
    def _allowed_actions(self) -> Optional[List[str]]:
        if self.settings.knowledge_agent:
            return [WILDCARD]
        return self.settings.actions

    # -------------------------------------------------------------------------
    # Catalog browsing
    # -------------------------------------------------------------------------

    async def get_connected_integrations(self) -> List[Connection]:
        return await self.connections.list_connections()

    async def list_connection_references(self) -> List[ConnectionReference]:
        return clean_connections(await self.connections.list_connections())

    async def get_available_connectors(self) -> List[Connector]:
        return await self.connectors.get_available_connectors()

    async def list_pica_integrations(self) -> List[PicaIntegration]:
        return await self.connectors.list_pica_integrations()

    async def get_available_actions(self, platform: str) -> List[AvailableAction]:
        return await self.actions.get_available_actions(platform, self.settings.page_size)

    # -------------------------------------------------------------------------
    # Tool operations
    # -------------------------------------------------------------------------

    async def search_platform_actions(self, platform: str, query: str) -> List[ActionReference]:
        """
        Search a platform's actions visible to this client.

        Raises:
            AccessError: If the client was configured with an empty action list
        """
        if not self.settings.knowledge_agent and self.settings.actions == []:
            raise AccessError(
                "No actions are available. Please initialize the client with "
                "specific action ids or ['*'] for all actions."
            )

        return await self.actions.search_platform_actions(
            platform,
            query,
            permissions=self.settings.permissions,
            allowed_actions=self._allowed_actions,
        )

    async def get_actions_knowledge(self, system_ids: List[str]) -> Dict[str, ActionKnowledgeEntry]:
        return await self.actions.get_actions_knowledge(system_ids)

    async def execute(self, params: ExecuteActionParams) -> ExecuteActionResult:
        """Execute an action; knowledge agents only ever get a preview."""
        return await self.executor.execute_action(
            action_system_id=params.action_system_id,
            connection_key=params.connection_key,
            data=params.data,
            path_variables=params.path_variables,
            query_params=params.query_params,
            headers=params.headers,
            encoding=params.encoding,
            preview_only=self.settings.knowledge_agent,
        )

    async def prompt_to_connect_integration(self, platform_name: str) -> Dict[str, str]:
        return {"response": platform_name}

    def tools(self) -> ToolRegistry:
        """Build the tool set for the configured mode."""
        registry = ToolRegistry()

        if not self.settings.knowledge_agent and self.settings.all_connectors:
            registry.register_tool(ToolDefinition(
                tool_name="listPicaConnections",
                description=(
                    "List all connected integrations in the user's Pica account. IMPORTANT: "
                    "Keys are opaque identifiers and must be shown VERBATIM. Do NOT drop "
                    "prefixes (e.g., 'test::'). When summarizing, include the `fullKey` "
                    "exactly as returned."
                ),
                input_model=ListPicaConnectionsParams,
                handler=lambda _: self.list_connection_references(),
            ))

        registry.register_tool(ToolDefinition(
            tool_name="searchPlatformActions",
            description=(
                "Search for available actions on a specific platform. Results are filtered "
                "based on your permission level: 'read' shows only GET methods, 'write' "
                "shows POST/PUT/PATCH methods, 'admin' shows all methods."
            ),
            input_model=SearchPlatformActionsParams,
            handler=lambda p: self.search_platform_actions(p.platform, p.query),
        ))

        registry.register_tool(ToolDefinition(
            tool_name="getActionsKnowledge",
            description=(
                "Get detailed knowledge and documentation for specific actions using their "
                "system IDs. Call this after searching for actions."
            ),
            input_model=GetActionsKnowledgeParams,
            handler=lambda p: self.get_actions_knowledge(p.system_ids),
        ))

        if self.settings.knowledge_agent:
            execute_description = (
                "Generate request configuration for an action without executing it. "
                "Method and path are fetched automatically using actionSystemId."
            )
        else:
            execute_description = (
                "Execute an action on a connected platform. Method and path are fetched "
                "automatically using actionSystemId. Provide the actionSystemId, connection "
                "key, and any required data."
            )
        registry.register_tool(ToolDefinition(
            tool_name="execute",
            description=execute_description,
            input_model=ExecuteActionParams,
            handler=self.execute,
        ))

        if self.settings.authkit:
            registry.register_tool(ToolDefinition(
                tool_name="promptToConnectIntegration",
                description=(
                    "Prompt the user to connect to a platform that they do not currently "
                    "have access to via AuthKit"
                ),
                input_model=PromptToConnectIntegrationParams,
                handler=lambda p: self.prompt_to_connect_integration(p.platform_name),
            ))

        return registry


# Singleton instance
_toolkit: Optional[Pica] = None


def get_toolkit() -> Pica:
    """Get or create the toolkit singleton from environment settings."""
    global _toolkit
    if _toolkit is None:
        _toolkit = Pica(get_settings())
    return _toolkit


async def reset_toolkit() -> None:
    """Close and drop the toolkit singleton."""
    global _toolkit
    if _toolkit is not None:
        await _toolkit.close()
        _toolkit = None
