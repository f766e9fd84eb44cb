"""Write file tool"""

from .base import Tool
from .read import resolve_path


class WriteTool(Tool):
    name = "write"
    description = "Write content to a file (creates or overwrites)"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the file to write",
                },
                "content": {
                    "type": "string",
                    "description": "Content to write to the file",
                },
            },
            "required": ["file_path", "content"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        file_path = args["file_path"]
        content = args["content"]
        path = resolve_path(file_path, context)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except Exception as e:
            return f"Error writing file: {e}"

        lines = len(content.split("\n"))
        return f"File written: {file_path} ({lines} lines)"
