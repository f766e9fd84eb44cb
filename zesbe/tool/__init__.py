from .registry import ToolRegistry
from .base import Tool
from .external import ExternalTool, ToolSource

__all__ = ["ToolRegistry", "Tool", "ExternalTool", "ToolSource"]
