"""Edit file tool"""

from .base import Tool
from .read import resolve_path


class EditTool(Tool):
    name = "edit"
    description = "Edit a file by replacing text (search and replace)"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the file to edit",
                },
                "old_string": {
                    "type": "string",
                    "description": "The exact text to find and replace",
                },
                "new_string": {
                    "type": "string",
                    "description": "The text to replace with",
                },
                "replace_all": {
                    "type": "boolean",
                    "description": "Replace all occurrences (default: false)",
                },
            },
            "required": ["file_path", "old_string", "new_string"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        file_path = args["file_path"]
        old_string = args["old_string"]
        new_string = args["new_string"]
        replace_all = args.get("replace_all", False)
        path = resolve_path(file_path, context)

        if not path.exists():
            return f"File not found: {file_path}"

        try:
            content = path.read_text(encoding="utf-8")

            if not old_string or old_string not in content:
                return f"Error: Could not find the specified text in {file_path}"

            if replace_all:
                replaced = content.count(old_string)
                updated = content.replace(old_string, new_string)
            else:
                replaced = 1
                updated = content.replace(old_string, new_string, 1)

            path.write_text(updated, encoding="utf-8")
        except Exception as e:
            return f"Error editing file: {e}"

        plural = "s" if replaced > 1 else ""
        return f"File edited: {file_path} ({replaced} replacement{plural})"
