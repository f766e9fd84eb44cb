"""Wrappers exposing externally supplied tools (MCP servers and the like) as Tools"""

from typing import Any, Awaitable, Callable, Protocol

from .base import Tool


class ToolSource(Protocol):
    """A collaborator that contributes tools discovered at runtime"""

    def get_tools(self) -> list[dict]:
        """Tool definitions, either OpenAI function tools or flat {name, description, parameters}"""
        ...

    async def execute_tool(self, name: str, args: dict) -> Any:
        ...


class ExternalTool(Tool):
    """Tool backed by an executor function owned by another component"""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict,
        executor: Callable[[str, dict], Awaitable[Any]],
    ):
        self.name = name
        self.description = description or f"External tool: {name}"
        self._parameters = parameters
        self._executor = executor

    @classmethod
    def from_definition(
        cls,
        definition: dict,
        executor: Callable[[str, dict], Awaitable[Any]],
    ) -> "ExternalTool":
        spec = definition.get("function", definition)
        return cls(
            name=spec["name"],
            description=spec.get("description", ""),
            parameters=spec.get("parameters") or spec.get("input_schema") or {},
            executor=executor,
        )

    def get_parameters_schema(self) -> dict:
        schema = dict(self._parameters)
        if "type" not in schema:
            schema["type"] = "object"
        if "properties" not in schema:
            schema["properties"] = {}
        return schema

    async def execute(self, args: dict, context: dict) -> Any:
        return await self._executor(self.name, args)
