"""Git tools"""

import asyncio
import re
from .base import Tool

CONFLICT_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


class GitError(Exception):
    pass


async def run_git(args: list[str], cwd: str | None, timeout: float = 30) -> str:
    """Run a git command, returning stdout or raising GitError with stderr"""
    try:
        proc = await asyncio.create_subprocess_exec(
            "git", *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise GitError("git is not installed")

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise GitError(f"git {args[0] if args else ''} timed out after {timeout}s")

    if proc.returncode != 0:
        raise GitError(stderr.decode(errors="replace").strip() or f"git exited with {proc.returncode}")
    return stdout.decode(errors="replace")


def _cwd(args: dict, context: dict) -> str | None:
    cwd = args.get("cwd") or context.get("cwd")
    return str(cwd) if cwd else None


CWD_PROPERTY = {
    "type": "string",
    "description": "Working directory path",
}


def format_status(porcelain: str) -> str:
    """Render `git status --porcelain=v1 --branch` output as a grouped summary"""
    lines = porcelain.splitlines()
    branch, tracking, ahead, behind = "detached HEAD", None, 0, 0
    staged, modified, untracked, deleted, conflicted = [], [], [], [], []

    for line in lines:
        if line.startswith("## "):
            header = line[3:]
            match = re.match(r"(?:No commits yet on )?(\S+?)(?:\.\.\.(\S+))?(?: \[(.*)\])?$", header)
            if match and not header.startswith("HEAD (no branch)"):
                branch, tracking = match.group(1), match.group(2)
                counts = match.group(3) or ""
                ahead_match = re.search(r"ahead (\d+)", counts)
                behind_match = re.search(r"behind (\d+)", counts)
                ahead = int(ahead_match.group(1)) if ahead_match else 0
                behind = int(behind_match.group(1)) if behind_match else 0
            continue

        code, path = line[:2], line[3:]
        if code == "??":
            untracked.append(path)
        elif code in CONFLICT_CODES:
            conflicted.append(path)
        else:
            if code[0] not in " D":
                staged.append(path)
            if code[1] == "M":
                modified.append(path)
            if "D" in code:
                deleted.append(path)

    out = [f"Branch: {branch}"]
    if tracking:
        out.append(f"Tracking: {tracking}")
        if ahead:
            out.append(f"  Ahead: {ahead} commits")
        if behind:
            out.append(f"  Behind: {behind} commits")

    for title, marker, files in [
        ("Staged", "+", staged),
        ("Modified", "M", modified),
        ("Untracked", "?", untracked),
        ("Deleted", "D", deleted),
        ("Conflicted", "!", conflicted),
    ]:
        if files:
            out.append(f"\n{title} ({len(files)}):")
            out.extend(f"  {marker} {f}" for f in files)

    if not any([staged, modified, untracked, deleted, conflicted]):
        out.append("\nWorking tree clean")

    return "\n".join(out)


class GitStatusTool(Tool):
    name = "git_status"
    description = "Get git repository status"

    def get_parameters_schema(self) -> dict:
        return {"type": "object", "properties": {"cwd": CWD_PROPERTY}}

    async def execute(self, args: dict, context: dict) -> str:
        try:
            porcelain = await run_git(["status", "--porcelain=v1", "--branch"], _cwd(args, context))
        except GitError as e:
            return f"Git status error: {e}"
        return format_status(porcelain)


class GitDiffTool(Tool):
    name = "git_diff"
    description = "Show git diff"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "staged": {"type": "boolean", "description": "Show staged changes only"},
                "file": {"type": "string", "description": "Specific file to diff"},
                "cwd": CWD_PROPERTY,
            },
        }

    async def execute(self, args: dict, context: dict) -> str:
        staged = args.get("staged", False)
        cmd = ["diff"]
        if staged:
            cmd.append("--cached")
        if args.get("file"):
            cmd.extend(["--", args["file"]])

        try:
            diff = await run_git(cmd, _cwd(args, context))
        except GitError as e:
            return f"Git diff error: {e}"

        if not diff.strip():
            return "No staged changes" if staged else "No changes"
        return diff


class GitLogTool(Tool):
    name = "git_log"
    description = "Show git commit history"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "maxCount": {"type": "integer", "description": "Max commits to show"},
                "file": {"type": "string", "description": "File to show history for"},
                "cwd": CWD_PROPERTY,
            },
        }

    async def execute(self, args: dict, context: dict) -> str:
        max_count = args.get("maxCount") or 10
        cmd = ["log", f"--max-count={max_count}", "--date=short", "--pretty=format:%h - %s (%an, %ad)"]
        if args.get("file"):
            cmd.extend(["--", args["file"]])

        try:
            log = await run_git(cmd, _cwd(args, context))
        except GitError as e:
            return f"Git log error: {e}"
        return log.strip() or "No commits found"


class GitCommitTool(Tool):
    name = "git_commit"
    description = "Create a git commit"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "message": {"type": "string", "description": "Commit message"},
                "files": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Files to commit (default: all staged)",
                },
                "cwd": CWD_PROPERTY,
            },
            "required": ["message"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        cwd = _cwd(args, context)
        try:
            if args.get("files"):
                await run_git(["add", "--", *args["files"]], cwd)
            staged = await run_git(["diff", "--cached", "--name-only"], cwd)
            if not staged.strip():
                return "Nothing to commit"
            await run_git(["commit", "-m", args["message"]], cwd)
            summary = await run_git(["log", "-1", "--shortstat", "--pretty=format:%h"], cwd)
        except GitError as e:
            return f"Git commit error: {e}"

        lines = [line.strip() for line in summary.splitlines() if line.strip()]
        return f"Committed: {lines[0]}\n" + "\n".join(lines[1:])


class GitBranchTool(Tool):
    name = "git_branch"
    description = "List, create, or delete git branches"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Branch name to create/switch to"},
                "delete": {"type": "boolean", "description": "Delete the branch"},
                "list": {"type": "boolean", "description": "List all branches (default: true)"},
                "cwd": CWD_PROPERTY,
            },
        }

    async def execute(self, args: dict, context: dict) -> str:
        cwd = _cwd(args, context)
        name = args.get("name")
        try:
            if args.get("delete") and name:
                await run_git(["branch", "-d", name], cwd)
                return f"Deleted branch: {name}"
            if name and not args.get("list", True):
                await run_git(["checkout", "-b", name], cwd)
                return f"Created and switched to branch: {name}"
            output = await run_git(["branch", "--list"], cwd)
        except GitError as e:
            return f"Git branch error: {e}"

        lines = ["Branches:"]
        for line in output.splitlines():
            current = line.startswith("*")
            lines.append(f"  {'* ' if current else '  '}{line[2:].strip()}")
        return "\n".join(lines)


class GitCheckoutTool(Tool):
    name = "git_checkout"
    description = "Checkout a git branch"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "branch": {"type": "string", "description": "Branch name to checkout"},
                "create": {"type": "boolean", "description": "Create new branch"},
                "cwd": CWD_PROPERTY,
            },
            "required": ["branch"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        branch = args["branch"]
        try:
            if args.get("create"):
                await run_git(["checkout", "-b", branch], _cwd(args, context))
                return f"Created and switched to branch: {branch}"
            await run_git(["checkout", branch], _cwd(args, context))
        except GitError as e:
            return f"Git checkout error: {e}"
        return f"Switched to branch: {branch}"


class GitStashTool(Tool):
    name = "git_stash"
    description = "Stash or restore uncommitted changes"

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "enum": ["push", "pop", "list", "drop", "apply"],
                    "description": "Stash action (default: push)",
                },
                "message": {"type": "string", "description": "Stash message (for push)"},
                "index": {"type": "integer", "description": "Stash index (for pop/drop/apply)"},
                "cwd": CWD_PROPERTY,
            },
        }

    async def execute(self, args: dict, context: dict) -> str:
        action = args.get("action") or "push"
        cmd = ["stash", action]
        if action == "push" and args.get("message"):
            cmd.extend(["-m", args["message"]])
        elif action in ("pop", "drop", "apply") and args.get("index") is not None:
            cmd.append(f"stash@{{{args['index']}}}")

        try:
            output = await run_git(cmd, _cwd(args, context))
        except GitError as e:
            return f"Git stash error: {e}"

        if action == "list":
            return output.strip() or "No stashes"
        return output.strip() or f"Stash {action} done"


GIT_TOOLS = [
    GitStatusTool,
    GitDiffTool,
    GitLogTool,
    GitCommitTool,
    GitBranchTool,
    GitCheckoutTool,
    GitStashTool,
]
