"""Request Builder & Executor - passthrough execution of resolved actions.

Turns an action identifier, a connection key and a payload into one
authenticated request against ``/v1/passthrough``, or into a preview of
that request. The Pica secret never appears in anything returned to the
caller: previews carry a placeholder, executed results a fixed mask.
"""

import json
import logging
import time
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from .actions import PASSTHROUGH_URL, ActionResolver
from .client import (
    ACTION_ID_HEADER,
    CONNECTION_KEY_HEADER,
    CONTENT_TYPE_HEADER,
    SECRET_HEADER,
    PicaApiClient,
)
from .config import Settings
from .connections import ConnectionValidator
from .errors import UnknownActionError
from .identifiers import normalize_action_id, parse_connection_key
from .templates import resolve_template_variables
from .types import (
    ConnectionKey,
    ExecuteActionResult,
    ExecutionFailure,
    ExecutionPreview,
    ExecutionSuccess,
    PayloadEncoding,
    RequestConfig,
)

logger = logging.getLogger(__name__)

PREVIEW_SECRET_PLACEHOLDER = "YOUR_PICA_SECRET_KEY_HERE"
REDACTED_SECRET = "****REDACTED****"
CUSTOM_ACTION_TAG = "custom"

ENCODING_CONTENT_TYPES = {
    PayloadEncoding.JSON: "application/json",
    PayloadEncoding.MULTIPART: "multipart/form-data",
    PayloadEncoding.FORM_URLENCODED: "application/x-www-form-urlencoded",
}


def serialize_form_value(value: Any) -> str:
    """Render one payload field as a form value; nested structures become JSON."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def redact_secret(value: Any, secret: str, mask: str = REDACTED_SECRET) -> Any:
    """Replace every occurrence of ``secret`` inside strings, recursively."""
    if not secret:
        return value
    if isinstance(value, str):
        return value.replace(secret, mask)
    if isinstance(value, Mapping):
        return {k: redact_secret(v, secret, mask) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact_secret(v, secret, mask) for v in value]
    return value


def _without_content_type(headers: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in headers.items() if k.lower() != CONTENT_TYPE_HEADER.lower()}


def merge_headers(base: Dict[str, Any], overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Apply ``overrides`` on top of ``base``; header names compare case-insensitively."""
    merged = dict(base)
    for name, value in (overrides or {}).items():
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


class PassthroughExecutor:
    """
    Executes actions through the Pica passthrough proxy.

    Execution flow:
    1. Verify the connection is visible to the caller
    2. Resolve action metadata (method, path, tags)
    3. Inject the connection key into custom-action payloads
    4. Resolve path template variables
    5. Build headers and encode the body
    6. Preview, or send exactly one request

    Failures of the passthrough call itself are captured into an
    ExecutionFailure so the agent can inspect them and pick another action.
    Access, format, template and unknown-action errors are raised.
    """

    def __init__(
        self,
        api: PicaApiClient,
        settings: Settings,
        actions: ActionResolver,
        connections: ConnectionValidator,
    ):
        self._api = api
        self.settings = settings
        self._actions = actions
        self._connections = connections

    async def execute_action(
        self,
        action_system_id: str,
        connection_key: Union[ConnectionKey, str],
        data: Any = None,
        path_variables: Optional[Dict[str, Any]] = None,
        query_params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        encoding: PayloadEncoding = PayloadEncoding.JSON,
        preview_only: bool = False,
    ) -> ExecuteActionResult:
        """
        Execute an action against a connection.

        Raises:
            FormatError: If the connection key is malformed
            AccessError: If the connection is not visible to the caller
            UnknownActionError: If the action has no knowledge row
            MissingVariableError: If path placeholders cannot be resolved
            RemoteError: If a discovery call fails
        """
        key = connection_key
        if not isinstance(key, ConnectionKey):
            key = parse_connection_key(key)

        await self._connections.assert_connection_accessible(key)

        action = await self._actions.get_action_spec(action_system_id)
        if action is None:
            raise UnknownActionError(
                f"Could not fetch knowledge for action system ID: {action_system_id}"
            )

        if CUSTOM_ACTION_TAG in action.tags:
            base = dict(data) if isinstance(data, Mapping) else {}
            data = {**base, "connectionKey": key.full_key}

        resolution = resolve_template_variables(action.path, data, path_variables)

        return await self.execute_passthrough(
            action_id=normalize_action_id(action_system_id),
            connection_key=key.full_key,
            data=resolution.cleaned_data,
            path=resolution.resolved_path,
            method=action.method,
            query_params=query_params,
            headers=headers,
            encoding=encoding,
            preview_only=preview_only,
            platform=action.connection_platform,
        )

    def build_headers(
        self,
        connection_key: str,
        action_id: str,
        encoding: PayloadEncoding,
        headers: Optional[Dict[str, Any]],
        sends_body: bool,
    ) -> Dict[str, str]:
        """Merge base, encoding, global and per-call headers, later wins."""
        merged: Dict[str, Any] = {
            CONTENT_TYPE_HEADER: ENCODING_CONTENT_TYPES[PayloadEncoding.JSON],
            SECRET_HEADER: self.settings.secret_key,
            CONNECTION_KEY_HEADER: connection_key,
            ACTION_ID_HEADER: action_id,
        }
        if encoding != PayloadEncoding.JSON:
            merged[CONTENT_TYPE_HEADER] = ENCODING_CONTENT_TYPES[encoding]
        merged = merge_headers(merged, self.settings.headers)
        merged = merge_headers(merged, headers)

        if not sends_body:
            merged = _without_content_type(merged)

        return {k: serialize_form_value(v) if not isinstance(v, str) else v for k, v in merged.items()}

    def encode_body(self, data: Any, encoding: PayloadEncoding) -> Tuple[Any, Dict[str, Any]]:
        """
        Encode the payload for a non-GET request.

        Returns:
            Tuple of (descriptor data, httpx request keyword arguments)
        """
        if encoding in (PayloadEncoding.MULTIPART, PayloadEncoding.FORM_URLENCODED):
            fields: Dict[str, str] = {}
            if isinstance(data, Mapping):
                fields = {str(k): serialize_form_value(v) for k, v in data.items()}

            if encoding == PayloadEncoding.MULTIPART:
                files = [(name, (None, value.encode("utf-8"))) for name, value in fields.items()]
                return fields, {"files": files}

            return fields, {"data": fields}

        if data is None:
            return None, {}
        if isinstance(data, (str, bytes)):
            return data, {"content": data}
        return data, {"json": data}

    def _masked(self, config: RequestConfig, placeholder: str) -> RequestConfig:
        secret = self.settings.secret_key
        masked = redact_secret(config.model_dump(), secret, placeholder)
        masked["headers"] = {
            k: placeholder if k.lower() == SECRET_HEADER else v
            for k, v in masked["headers"].items()
        }
        return RequestConfig.model_validate(masked)

    def _serialize_error(self, error: Exception) -> str:
        details: Dict[str, Any] = {"name": type(error).__name__, "message": str(error)}
        if isinstance(error, httpx.HTTPStatusError):
            details["status_code"] = error.response.status_code
            details["body"] = error.response.text
        return redact_secret(json.dumps(details), self.settings.secret_key)

    async def execute_passthrough(
        self,
        action_id: str,
        connection_key: str,
        data: Any,
        path: str,
        method: str,
        query_params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        encoding: PayloadEncoding = PayloadEncoding.JSON,
        preview_only: bool = False,
        platform: Optional[str] = None,
    ) -> ExecuteActionResult:
        """Build the passthrough request, then preview or send it."""
        start_time = time.time()
        method = method.upper()
        has_body = method != "GET"

        url = self._api.url(PASSTHROUGH_URL) + (path if path.startswith("/") else "/" + path)

        try:
            final_headers = self.build_headers(
                connection_key, action_id, encoding, headers,
                sends_body=has_body and data is not None,
            )

            descriptor_data, request_kwargs = None, {}
            if has_body:
                descriptor_data, request_kwargs = self.encode_body(data, encoding)

            if has_body and encoding == PayloadEncoding.MULTIPART:
                # the encoder supplies its own content type with the boundary
                final_headers = _without_content_type(final_headers)

            request = await self._api.build_request(
                method, url, headers=final_headers, params=query_params, **request_kwargs
            )

            if has_body and encoding == PayloadEncoding.MULTIPART and "content-type" in request.headers:
                final_headers[CONTENT_TYPE_HEADER] = request.headers["content-type"]
            if has_body and encoding == PayloadEncoding.FORM_URLENCODED:
                descriptor_data = request.content.decode("utf-8")

            config = RequestConfig(
                url=url,
                method=method,
                headers=final_headers,
                params=query_params,
                data=descriptor_data,
            )

            if preview_only:
                logger.info(f"Built preview for action {action_id} ({method} {path})")
                return ExecutionPreview(
                    request_config=self._masked(config, PREVIEW_SECRET_PLACEHOLDER),
                    platform=platform,
                )

            response = await self._api.send(request)
            response.raise_for_status()

            logger.info(
                f"Executed action {action_id} ({method} {path}) -> {response.status_code} "
                f"in {int((time.time() - start_time) * 1000)}ms"
            )
            return ExecutionSuccess(
                response_data=redact_secret(self._decode(response), self.settings.secret_key),
                request_config=self._masked(config, REDACTED_SECRET),
                platform=platform,
            )

        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, TypeError, ValueError) as e:
            error = self._serialize_error(e)
            logger.error(f"Error executing passthrough request for {action_id}: {error}")
            return ExecutionFailure(error=error, platform=platform)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
