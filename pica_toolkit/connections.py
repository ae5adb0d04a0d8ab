"""Connection Validator - vault connection listing and access checks.

An action must never run against a connection the caller cannot see,
even when the key is guessed correctly. Visibility is decided by the
remote vault listing, scoped by the connector allow-list and the
identity filters from Settings.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .client import PicaApiClient
from .config import Settings
from .errors import AccessError
from .identifiers import parse_connection_key
from .pagination import paginate_results
from .types import (
    Connection,
    ConnectionKey,
    ConnectionReference,
    Connector,
    PicaIntegration,
)

logger = logging.getLogger(__name__)

CONNECTIONS_URL = "/v1/vault/connections"
AVAILABLE_CONNECTORS_URL = "/v1/available-connectors"


def clean_connections(connections: List[Connection]) -> List[ConnectionReference]:
    """Keep active connections and expose their parsed keys."""
    references = []
    for conn in connections:
        if not conn.active:
            continue
        key = parse_connection_key(conn.key)
        references.append(ConnectionReference(platform=key.parts.platform, key=key))
    return references


class ConnectionValidator:
    """
    Lists connections visible to the caller and enforces access.

    The connector allow-list is sent as the ``keys`` filter; an empty
    allow-list sees no connections at all and makes no remote call.
    """

    def __init__(self, api: PicaApiClient, settings: Settings):
        self._api = api
        self.settings = settings

    def _list_params(self) -> Optional[Dict[str, Any]]:
        params: Dict[str, Any] = {}

        if not self.settings.all_connectors:
            if not self.settings.connectors:
                return None
            params["keys"] = ",".join(self.settings.connectors)

        if self.settings.identity_type:
            params["identityType"] = self.settings.identity_type.value
        if self.settings.identity:
            params["identity"] = self.settings.identity

        return params

    async def list_connections(self) -> List[Connection]:
        """List every connection visible to the caller."""
        params = self._list_params()
        if params is None:
            return []

        async def fetch_page(page: int, limit: int):
            return await self._api.get_json(
                CONNECTIONS_URL,
                params={**params, "page": page, "limit": limit},
            )

        rows = await paginate_results(fetch_page, self.settings.page_size)
        return [Connection.model_validate(row) for row in rows]

    async def assert_connection_accessible(self, connection_key: Union[ConnectionKey, str]) -> None:
        """
        Ensure the connection is among those visible to the caller.

        Raises:
            AccessError: If the key is not listed
            RemoteError: If the listing itself fails
        """
        key = connection_key
        if not isinstance(key, ConnectionKey):
            key = parse_connection_key(key)
        connections = await self.list_connections()

        if not any(conn.key == key.full_key for conn in connections):
            logger.warning(f"Rejected inaccessible connection on platform '{key.parts.platform}'")
            raise AccessError(f"Connection key '{key.full_key}' does not exist or is not accessible.")


class ConnectorCatalog:
    """Browse the connectors offered by Pica."""

    def __init__(self, api: PicaApiClient, settings: Settings):
        self._api = api
        self.settings = settings

    async def get_available_connectors(self) -> List[Connector]:
        async def fetch_page(page: int, limit: int):
            return await self._api.get_json(
                AVAILABLE_CONNECTORS_URL,
                params={"page": page, "limit": limit},
            )

        rows = await paginate_results(fetch_page, self.settings.page_size)
        return [Connector.model_validate(row) for row in rows]

    async def list_pica_integrations(self) -> List[PicaIntegration]:
        """Simplified connector list with name and platform only."""
        connectors = await self.get_available_connectors()
        return [PicaIntegration(name=c.name, platform=c.platform) for c in connectors]
