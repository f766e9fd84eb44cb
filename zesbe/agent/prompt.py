"""System prompts for the agent"""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a helpful AI coding assistant running in a CLI environment.
You have access to tools to help accomplish tasks:
- bash: Execute shell commands
- read: Read file contents
- write: Write content to files
- edit: Edit files using search and replace
- glob: Find files matching patterns
- grep: Search for patterns in files
- web_fetch: Fetch content from a URL
- git_status, git_diff, git_log, git_commit, git_branch, git_checkout, git_stash: Git operations

When the user asks you to perform tasks, use the appropriate tools.
Always explain what you're doing before using tools.
Be concise and helpful."""

# Checked in order, first match wins
PROJECT_CONTEXT_FILES = ["ZESBE.md", "CLAUDE.md", "GEMINI.md", "AI.md", ".ai/context.md"]


@dataclass
class ProjectContext:
    file: str
    content: str


def load_project_context(cwd: Path) -> ProjectContext | None:
    """Load the first project instructions file found in ``cwd``"""
    for name in PROJECT_CONTEXT_FILES:
        path = Path(cwd) / name
        if not path.is_file():
            continue
        try:
            return ProjectContext(file=name, content=path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Skipping unreadable context file {path}: {e}")
    return None


def build_system_prompt(
    base: str,
    project_context: ProjectContext | None = None,
    skills_context: str = "",
) -> str:
    prompt = base
    if project_context:
        prompt += f"\n\n## Project Context (from {project_context.file}):\n{project_context.content}"
    if skills_context:
        prompt += skills_context
    return prompt
