"""Grep search tool"""

import asyncio
from .base import Tool
from .read import resolve_path

MAX_LINES = 50


class GrepTool(Tool):
    name = "grep"
    description = "Search for a pattern in files"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Regular expression pattern to search for",
                },
                "path": {
                    "type": "string",
                    "description": "File or directory to search in (default: current directory)",
                },
                "include": {
                    "type": "string",
                    "description": "File pattern to include (e.g., '*.py')",
                },
                "ignore_case": {
                    "type": "boolean",
                    "description": "Case insensitive search",
                },
            },
            "required": ["pattern"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        pattern = args["pattern"]
        path = resolve_path(args.get("path") or ".", context)
        include = args.get("include")

        cmd = ["grep", "-rn", "-I", "--exclude-dir=.git", "--exclude-dir=node_modules",
               "--exclude-dir=.venv", "--exclude-dir=__pycache__"]
        if args.get("ignore_case"):
            cmd.append("-i")
        if include:
            cmd.append(f"--include={include}")
        cmd.extend(["-e", pattern, str(path)])

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return "Error searching: grep is not installed"

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=10)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return "Error searching: timed out"

        if proc.returncode == 1:
            return "No matches found"
        if proc.returncode != 0:
            return f"Error searching: {stderr.decode(errors='replace').strip()}"

        lines = stdout.decode(errors="replace").strip().splitlines()[:MAX_LINES]
        return "\n".join(lines) or "No matches found"
