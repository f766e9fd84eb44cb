"""Read file tool"""

from pathlib import Path
from .base import Tool


def resolve_path(raw: str, context: dict) -> Path:
    """Resolve a tool path argument against the agent's working directory"""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = Path(context.get("cwd") or ".") / path
    return path.resolve()


class ReadTool(Tool):
    name = "read"
    description = "Read the contents of a file. Returns line-numbered output."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the file to read",
                },
                "offset": {
                    "type": "integer",
                    "description": "Line number to start reading from (1-based)",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of lines to read",
                },
            },
            "required": ["file_path"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        file_path = args["file_path"]
        offset = args.get("offset") or 1
        limit = args.get("limit")
        path = resolve_path(file_path, context)

        if not path.exists():
            return f"File not found: {file_path}"

        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        try:
            lines = path.read_text(encoding="utf-8").split("\n")
        except Exception as e:
            return f"Error reading file: {e}"

        start = max(0, offset - 1)
        end = start + limit if limit else len(lines)
        numbered = [
            f"{start + i + 1:5d}\t{line}"
            for i, line in enumerate(lines[start:end])
        ]
        return "\n".join(numbered)
