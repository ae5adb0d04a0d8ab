"""Pytest configuration and fixtures for the Pica toolkit tests."""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pica_toolkit import Pica, Settings  # noqa: E402


SECRET = "sk_test_9f8e7d6c5b4a_super_secret"
SERVER_URL = "https://api.example-pica.test"
CONNECTION_KEY = "test::gmail::default::6faf1d3707f846ef89295c836df71c94"
OTHER_CONNECTION_KEY = "live::slack::default::0badc0ffee"

GET_MESSAGE_ID = "conn_mod_def::GGSNOTZxFUU::ZWXBuJboTpS3Q_U06pF8gA"
SEND_EMAIL_ID = "conn_mod_def::GGXAS7WvDl0::4cS2Y4VaSCq6ylKY8hA6Nw"
CUSTOM_ACTION_ID = "conn_mod_def::GGcustom01::runCustomFlow"
LIST_LABELS_ID = "conn_mod_def::GGlabels01::listLabels"
SLACK_POST_ID = "conn_mod_def::GGslack001::postMessage"


def knowledge_row(
    system_id: str,
    method: str,
    path: str,
    platform: str = "gmail",
    tags: Optional[List[str]] = None,
    title: str = "",
    knowledge: str = "",
    base_url: Optional[str] = None,
) -> Dict[str, Any]:
    row = {
        "id": 1,
        "_id": system_id,
        "connectionPlatform": platform,
        "title": title or f"{method} {path}",
        "path": path,
        "knowledge": knowledge or f"Calls {method} {path}",
        "method": method,
        "tags": tags or [],
        "active": True,
    }
    if base_url:
        row["baseUrl"] = base_url
    return row


def connection_row(key: str, active: bool = True) -> Dict[str, Any]:
    environment, platform, _, conn_id = key.split("::")
    return {
        "id": conn_id,
        "key": key,
        "environment": environment,
        "platform": platform,
        "active": active,
        "tags": [],
    }


class FakePicaApi:
    """In-memory stand-in for the Pica API, served through httpx.MockTransport."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.connections = [
            connection_row(CONNECTION_KEY),
            connection_row(OTHER_CONNECTION_KEY),
        ]
        self.knowledge = {
            GET_MESSAGE_ID: knowledge_row(
                GET_MESSAGE_ID, "GET", "/gmail/v1/users/me/messages/{{messageId}}",
                title="Get Message",
            ),
            SEND_EMAIL_ID: knowledge_row(
                SEND_EMAIL_ID, "POST", "/gmail/v1/users/{{userId}}/messages/send",
                title="Send Email",
            ),
            CUSTOM_ACTION_ID: knowledge_row(
                CUSTOM_ACTION_ID, "POST", "/custom/run", tags=["custom"],
                title="Run Custom Flow",
            ),
            LIST_LABELS_ID: knowledge_row(
                LIST_LABELS_ID, "GET", "/gmail/v1/users/me/labels", title="List Labels",
            ),
            SLACK_POST_ID: knowledge_row(
                SLACK_POST_ID, "POST", "/chat.postMessage", platform="slack",
                title="Post Message",
            ),
        }
        self.search_results: Dict[str, List[Dict[str, Any]]] = {
            "gmail": [
                {"systemId": GET_MESSAGE_ID, "title": "Get Message", "key": "get-message",
                 "method": "GET", "path": "/gmail/v1/users/me/messages/{{messageId}}"},
                {"systemId": SEND_EMAIL_ID, "title": "Send Email", "key": "send-email",
                 "method": "POST", "path": "/gmail/v1/users/{{userId}}/messages/send"},
            ],
        }
        self.available_actions = {
            "gmail": [
                {"title": "Get Message", "key": "get-message", "method": "GET", "platform": "gmail"},
                {"title": "Send Email", "key": "send-email", "method": "POST", "platform": "gmail"},
            ],
        }
        self.connectors = [
            {"id": 1, "name": "Gmail", "key": "gmail", "platform": "gmail", "active": True},
            {"id": 2, "name": "Slack", "key": "slack", "platform": "slack", "active": True},
        ]
        self.passthrough_response = httpx.Response(200, json={"id": "msg_1", "status": "sent"})
        self.failing_paths: set = set()
        self.failing_knowledge_ids: set = set()

    @property
    def passthrough_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/v1/passthrough")]

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def _page(rows: List[Any], request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", 1))
        limit = int(request.url.params.get("limit", 100))
        pages = max(1, -(-len(rows) // limit))
        chunk = rows[(page - 1) * limit: page * limit]
        return httpx.Response(200, json={"rows": chunk, "total": len(rows), "page": page, "pages": pages})

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        path = request.url.path

        if path in self.failing_paths:
            return httpx.Response(500, json={"error": "internal"})

        if path == "/v1/vault/connections":
            rows = self.connections
            keys = request.url.params.get("keys")
            if keys:
                rows = [c for c in rows if c["key"] in keys.split(",")]
            return self._page(rows, request)

        if path == "/v1/knowledge":
            system_id = request.url.params["_id"]
            if system_id in self.failing_knowledge_ids:
                return httpx.Response(503, json={"error": "unavailable"})
            row = self.knowledge.get(system_id)
            return httpx.Response(200, json={"rows": [row] if row else []})

        if path.startswith("/v1/available-actions/search/"):
            platform = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.search_results.get(platform, []))

        if path.startswith("/v1/available-actions/"):
            platform = path.rsplit("/", 1)[-1]
            return self._page(self.available_actions.get(platform, []), request)

        if path == "/v1/available-connectors":
            return self._page(self.connectors, request)

        if path.startswith("/v1/passthrough"):
            if isinstance(self.passthrough_response, Exception):
                raise self.passthrough_response
            return self.passthrough_response

        return httpx.Response(404, json={"error": "not found"})


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": SECRET,
        "server_url": SERVER_URL,
        "connectors": ["*"],
        "actions": ["*"],
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def outbound_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode())


@pytest.fixture
def fake_api():
    """Fresh fake Pica API for each test."""
    return FakePicaApi()


@pytest.fixture
def http_client(fake_api):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def toolkit(settings, http_client):
    return Pica(settings, http_client=http_client)
