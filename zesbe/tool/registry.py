"""Name -> tool lookup for the agent loop"""

import logging
from typing import Any

from .base import Tool
from .external import ExternalTool, ToolSource

logger = logging.getLogger(__name__)


class ToolRegistry:
    def __init__(self, include_defaults: bool = True):
        self._tools: dict[str, Tool] = {}
        if include_defaults:
            self._register_defaults()

    def _register_defaults(self):
        """Built-in file, shell, search, web and git tools"""
        from .read import ReadTool
        from .write import WriteTool
        from .edit import EditTool
        from .bash import BashTool
        from .grep import GrepTool
        from .glob import GlobTool
        from .web import WebFetchTool
        from .git import GIT_TOOLS

        for tool_class in [BashTool, ReadTool, WriteTool, EditTool, GlobTool, GrepTool, WebFetchTool, *GIT_TOOLS]:
            tool = tool_class()
            self._tools[tool.name] = tool

    def register(self, tool: Tool):
        """Register a tool, replacing any tool with the same name"""
        if tool.name in self._tools:
            logger.debug(f"Tool '{tool.name}' replaced")
        self._tools[tool.name] = tool

    def add_source(self, source: ToolSource) -> list[str]:
        """Register every tool a source exposes; returns the registered names"""
        names = []
        for definition in source.get_tools():
            tool = ExternalTool.from_definition(definition, source.execute_tool)
            self.register(tool)
            names.append(tool.name)
        logger.info(f"Registered {len(names)} external tools")
        return names

    def get(self, name: str) -> Tool | None:
        """Get a tool by name"""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def describe(self, name: str) -> dict | None:
        """Description and parameter schema of a tool, or None if unknown"""
        tool = self._tools.get(name)
        if not tool:
            return None
        schema = tool.schema()
        return {"description": schema["description"], "parameters": schema["parameters"]}

    def get_schemas(self) -> list[dict]:
        return [tool.schema() for tool in self._tools.values()]

    async def execute(self, name: str, args: dict, context: dict) -> str | Any:
        """Run a tool by name.

        Unknown names and exceptions come back as result text for the model.
        """
        tool = self._tools.get(name)
        if tool is None:
            return f"Error: Unknown tool '{name}'"

        try:
            return await tool.execute(args, context)
        except Exception as e:
            logger.debug(f"Tool {name} raised: {e}")
            return f"Error executing {name}: {e}"
