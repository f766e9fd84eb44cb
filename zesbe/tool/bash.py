"""Bash command tool"""

import asyncio
from .base import Tool

MAX_OUTPUT = 10 * 1024 * 1024


class BashTool(Tool):
    name = "bash"
    description = "Execute a shell command and return the output"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute",
                },
                "cwd": {
                    "type": "string",
                    "description": "Working directory (optional)",
                },
                "timeout": {
                    "type": "integer",
                    "description": "Timeout in milliseconds (default: 30000)",
                },
            },
            "required": ["command"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        command = args["command"]
        cwd = args.get("cwd") or context.get("cwd") or "."
        timeout_ms = args.get("timeout") or 30000

        try:
            proc = await asyncio.create_subprocess_exec(
                "/bin/bash", "-c", command,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except Exception as e:
            return f"Error: {e}"

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return f"Command timed out after {timeout_ms}ms"

        output = (stdout[:MAX_OUTPUT].decode(errors="replace")
                  + stderr[:MAX_OUTPUT].decode(errors="replace")).strip()
        if proc.returncode != 0:
            output = f"{output}\n\nExit code: {proc.returncode}".strip()
        return output or "(no output)"
