"""Input models for the agent-facing tools.

Argument names are camelCase on the wire (``actionSystemId``,
``pathVariables``...) and snake_case in Python.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .types import PayloadEncoding, PicaModel


class ListPicaConnectionsParams(PicaModel):
    pass


class SearchPlatformActionsParams(PicaModel):
    platform: str = Field(
        description="The platform to search actions for, e.g. 'gmail' or 'hub-spot'"
    )
    query: str = Field(
        description="What you want to do on the platform, e.g. 'send email'"
    )


class GetActionsKnowledgeParams(PicaModel):
    system_ids: List[str] = Field(
        description="Action system IDs from searchPlatformActions results"
    )


class ExecuteActionParams(PicaModel):
    action_system_id: str = Field(
        description="The action system ID from searchPlatformActions results - "
                    "method and path will be fetched automatically"
    )
    connection_key: str = Field(
        description="The connection key for authentication - use the full connection key exactly"
    )
    data: Any = Field(default=None, description="The request payload/body data")
    path_variables: Optional[Dict[str, Union[str, int, float, bool]]] = Field(
        default=None,
        description="Values for path variables like {{spreadsheetId}} - "
                    "optional if no template variables",
    )
    query_params: Optional[Dict[str, Any]] = Field(
        default=None, description="Query parameters to append to the URL - optional"
    )
    headers: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional HTTP headers - optional"
    )
    is_form_data: bool = Field(
        default=False,
        description="Set to true to send data as multipart/form-data - optional, defaults to false",
    )
    is_form_url_encoded: bool = Field(
        default=False,
        description="Set to true to send data as application/x-www-form-urlencoded - "
                    "optional, defaults to false",
    )

    @property
    def encoding(self) -> PayloadEncoding:
        # multipart wins when both flags are set
        if self.is_form_data:
            return PayloadEncoding.MULTIPART
        if self.is_form_url_encoded:
            return PayloadEncoding.FORM_URLENCODED
        return PayloadEncoding.JSON


class PromptToConnectIntegrationParams(PicaModel):
    platform_name: str
