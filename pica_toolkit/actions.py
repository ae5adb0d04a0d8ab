"""Action Resolver - action lookup, search and knowledge retrieval.

Resolves opaque action identifiers into execution metadata (method, path
template, tags, owning platform) using the remote knowledge store, and
filters search results by permission level and the caller's action
allow-list.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .client import PicaApiClient
from .config import WILDCARD
from .errors import RemoteError
from .identifiers import normalize_action_id, parse_action_id
from .pagination import paginate_results
from .templates import replace_base_url_in_knowledge
from .types import (
    ActionKnowledge,
    ActionKnowledgeEntry,
    ActionReference,
    AvailableAction,
    Permission,
    PlatformAction,
)

logger = logging.getLogger(__name__)

SEARCH_ACTIONS_URL = "/v1/available-actions/search"
KNOWLEDGE_URL = "/v1/knowledge"
AVAILABLE_ACTIONS_URL = "/v1/available-actions"
PASSTHROUGH_URL = "/v1/passthrough"

SEARCH_LIMIT = 5

# Permission level -> allowed HTTP methods (None means unrestricted)
PERMISSION_METHODS = {
    Permission.READ: {"GET"},
    Permission.WRITE: {"POST", "PUT", "PATCH"},
    Permission.ADMIN: None,
}


def method_allowed(method: str, permissions: Optional[Permission] = None) -> bool:
    if permissions is None:
        return True

    allowed_methods = PERMISSION_METHODS.get(Permission(permissions))
    return allowed_methods is None or method.upper() in allowed_methods


def filter_by_permissions(
    actions: List[PlatformAction],
    permissions: Optional[Permission] = None,
) -> List[PlatformAction]:
    """Keep only actions whose method the permission level allows."""
    return [a for a in actions if method_allowed(a.method, permissions)]


def filter_by_allowed_actions(
    actions: List[PlatformAction],
    allowed_actions: Optional[Sequence[str]] = None,
) -> List[PlatformAction]:
    """
    Keep only actions in the allow-list.

    An absent or empty allow-list allows nothing; the wildcard allows all.
    """
    if not allowed_actions:
        return []

    if WILDCARD in allowed_actions:
        return actions

    allowed = set(allowed_actions)
    return [a for a in actions if a.system_id in allowed]


def clean_actions(
    actions: List[PlatformAction],
    permissions: Optional[Permission] = None,
    allowed_actions: Optional[Sequence[str]] = None,
) -> List[ActionReference]:
    """Apply the permission filter, then the allow-list filter."""
    filtered = filter_by_permissions(actions, permissions)
    filtered = filter_by_allowed_actions(filtered, allowed_actions)

    return [
        ActionReference(
            title=action.title,
            method=action.method,
            path=action.path,
            system_id=parse_action_id(action.system_id),
        )
        for action in filtered
    ]


def _rows(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        return payload.get("rows") or []
    return payload or []


class ActionResolver:
    """
    Resolve and discover actions against the remote knowledge store.

    Responsibilities:
    - Single action lookup by normalized identifier
    - Platform search with permission and allow-list filtering
    - Concurrent, fail-fast knowledge retrieval

    Transport failures surface as RemoteError and are never retried here.
    """

    def __init__(self, api: PicaApiClient):
        self._api = api

    @property
    def passthrough_url(self) -> str:
        return self._api.url(PASSTHROUGH_URL)

    async def get_action_spec(self, action_id: str) -> Optional[ActionKnowledge]:
        """
        Fetch execution metadata for one action.

        Returns:
            ActionKnowledge, or None when the store has no row for the
            normalized identifier
        """
        normalized = normalize_action_id(action_id)
        payload = await self._api.get_json(KNOWLEDGE_URL, params={"_id": normalized})

        rows = _rows(payload)
        if not rows:
            logger.info(f"No knowledge found for action '{normalized}'")
            return None

        try:
            return ActionKnowledge.model_validate(rows[0])
        except ValidationError as e:
            logger.error(f"Malformed knowledge row for action '{normalized}'")
            raise RemoteError(f"Malformed knowledge for action {normalized}: {e}") from e

    async def search_platform_actions(
        self,
        platform: str,
        query: str,
        permissions: Optional[Permission] = None,
        allowed_actions: Optional[Sequence[str]] = None,
    ) -> List[ActionReference]:
        """
        Search a platform's actions and filter them for the caller.

        When filtering leaves nothing and the allow-list is a finite set,
        each allowed identifier is resolved directly so explicitly granted
        actions stay discoverable regardless of search ranking.
        """
        payload = await self._api.get_json(
            f"{SEARCH_ACTIONS_URL}/{platform}",
            params={"query": query, "limit": str(SEARCH_LIMIT)},
        )
        try:
            actions = [PlatformAction.model_validate(row) for row in _rows(payload)]
        except ValidationError as e:
            raise RemoteError(f"Malformed search results for {platform}: {e}") from e

        cleaned = clean_actions(actions, permissions, allowed_actions)

        if not cleaned and not (allowed_actions and WILDCARD in allowed_actions):
            logger.info(
                f"Search for '{query}' on {platform} matched no allowed actions, "
                f"resolving {len(allowed_actions or [])} allowed actions directly"
            )
            return await self.get_action_references(
                platform, list(allowed_actions or []), permissions
            )

        return cleaned

    async def get_action_references(
        self,
        platform: str,
        action_ids: List[str],
        permissions: Optional[Permission] = None,
    ) -> List[ActionReference]:
        """Resolve action IDs individually, keeping permitted ones on ``platform``."""
        specs = await asyncio.gather(*(self.get_action_spec(a) for a in action_ids))

        return [
            ActionReference(
                title=spec.title,
                method=spec.method,
                path=spec.path,
                system_id=parse_action_id(spec.system_id),
            )
            for spec in specs
            if spec is not None
            and spec.connection_platform == platform
            and method_allowed(spec.method, permissions)
        ]

    async def get_actions_knowledge(self, system_ids: List[str]) -> Dict[str, ActionKnowledgeEntry]:
        """
        Fetch knowledge for each action concurrently.

        The first failing fetch aborts the whole batch with RemoteError;
        identifiers without a knowledge row are omitted.
        """
        async def fetch(system_id: str):
            try:
                return system_id, await self.get_action_spec(system_id)
            except Exception:
                logger.error(f"Error fetching knowledge for action '{system_id}'")
                raise

        results = await asyncio.gather(*(fetch(s) for s in system_ids))

        knowledge_map: Dict[str, ActionKnowledgeEntry] = {}
        for system_id, spec in results:
            if spec is None:
                continue
            knowledge_map[system_id] = ActionKnowledgeEntry(
                title=spec.title,
                knowledge=replace_base_url_in_knowledge(
                    spec.knowledge, spec.base_url, self.passthrough_url
                ),
                platform=spec.connection_platform,
            )

        return knowledge_map

    async def get_available_actions(self, platform: str, page_size: int = 100) -> List[AvailableAction]:
        """List every catalog action for a platform."""
        async def fetch_page(page: int, limit: int):
            return await self._api.get_json(
                f"{AVAILABLE_ACTIONS_URL}/{platform}",
                params={"page": page, "limit": limit},
            )

        rows = await paginate_results(fetch_page, page_size)
        return [AvailableAction.model_validate(row) for row in rows]
