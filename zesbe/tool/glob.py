"""Glob file search tool"""

from pathlib import Path
from .base import Tool
from .read import resolve_path

MAX_RESULTS = 100


class GlobTool(Tool):
    name = "glob"
    description = "Find files matching a glob pattern"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Glob pattern to match files (e.g., '**/*.py', 'src/**/*.ts')",
                },
                "path": {
                    "type": "string",
                    "description": "Directory to search in (default: current directory)",
                },
            },
            "required": ["pattern"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        pattern = args["pattern"]
        root = resolve_path(args.get("path") or ".", context)

        try:
            matches = [p for p in root.glob(pattern) if p.is_file()][:MAX_RESULTS]
        except Exception as e:
            return f"Error searching files: {e}"

        if not matches:
            return "No files found matching pattern"
        return "\n".join(str(m) for m in matches)
