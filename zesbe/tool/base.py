"""Tool interface shared by built-in and external tools"""

from abc import ABC, abstractmethod
from typing import Any


class Tool(ABC):
    """A named action the model can request.

    ``context`` carries per-agent state; ``context["cwd"]`` is the directory
    relative paths resolve against.
    """

    name: str
    description: str

    @abstractmethod
    def get_parameters_schema(self) -> dict:
        """JSON schema of the arguments object"""

    @abstractmethod
    async def execute(self, args: dict, context: dict) -> str | Any:
        """Run the tool; non-string results are JSON-encoded by the caller"""

    def schema(self) -> dict:
        """Flat ``{name, description, parameters}`` definition sent to providers"""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.get_parameters_schema(),
        }
