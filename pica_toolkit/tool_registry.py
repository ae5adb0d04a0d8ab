"""Tool Registry - catalog of agent-callable toolkit operations.

Each tool pairs a name and description with a pydantic input model and an
async handler. Arguments are validated against the input model before the
handler runs; tools not in the registry cannot be invoked.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)


@dataclass
class ToolDefinition:
    """Definition of an agent-callable tool."""
    tool_name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Awaitable[Any]]


class ToolRegistry:
    """
    Central catalog of the tools exposed to an agent runtime.

    Responsibilities:
    - Hold tool metadata and handlers
    - Validate arguments against each tool's input model
    - Dispatch invocations and return JSON-ready output
    """

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}

    def register_tool(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Raises:
            ValueError: If tool with same name already exists
        """
        if tool.tool_name in self._tools:
            raise ValueError(f"Tool '{tool.tool_name}' is already registered")

        self._tools[tool.tool_name] = tool
        logger.debug(f"Registered tool: {tool.tool_name}")

    def unregister_tool(self, tool_name: str) -> None:
        """
        Remove a tool from the registry.

        Raises:
            KeyError: If tool doesn't exist
        """
        if tool_name not in self._tools:
            raise KeyError(f"Tool '{tool_name}' not found in registry")

        del self._tools[tool_name]

    def get_tool(self, tool_name: str) -> Optional[ToolDefinition]:
        return self._tools.get(tool_name)

    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def validate_tool_exists(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def validate_inputs(self, tool_name: str, arguments: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        """
        Validate arguments against a tool's input model.

        Returns:
            Tuple of (is_valid, error_message)
        """
        tool = self.get_tool(tool_name)
        if not tool:
            return False, f"Tool '{tool_name}' not found"

        try:
            tool.input_model.model_validate(arguments)
        except ValidationError as e:
            return False, str(e)
        return True, None

    async def invoke(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """
        Validate arguments and run a tool.

        Raises:
            KeyError: If the tool is not registered
            ValidationError: If the arguments do not match the input model
        """
        tool = self.get_tool(tool_name)
        if not tool:
            raise KeyError(f"Tool '{tool_name}' not found in registry")

        params = tool.input_model.model_validate(arguments or {})
        result = await tool.handler(params)
        return to_jsonable_python(result, by_alias=True)

    def __contains__(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


class ToolSchemaGenerator:
    """Generates JSON schemas for tools to be used in LLM prompts."""

    @staticmethod
    def generate_schema(tool: ToolDefinition) -> Dict[str, Any]:
        """Render a tool in the OpenAI function calling format."""
        return {
            "name": tool.tool_name,
            "description": tool.description,
            "parameters": tool.input_model.model_json_schema(by_alias=True),
        }

    @staticmethod
    def generate_schemas(tools: List[ToolDefinition]) -> List[Dict[str, Any]]:
        return [ToolSchemaGenerator.generate_schema(tool) for tool in tools]

    @staticmethod
    def generate_prompt_text(tools: List[ToolDefinition]) -> str:
        """Text form for runtimes without native function calling."""
        return json.dumps(ToolSchemaGenerator.generate_schemas(tools), indent=2)
