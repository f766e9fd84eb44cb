"""Skill manager - discovers SKILL.md folders and renders loaded ones for the prompt"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)


@dataclass
class Skill:
    """A skill folder: instructions plus any supporting files"""
    id: str
    name: str
    description: str
    instructions: str
    path: Path
    files: list[Path] = field(default_factory=list)


def parse_skill_md(content: str) -> tuple[dict[str, str], str]:
    """Split SKILL.md into simple ``key: value`` frontmatter and the body"""
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content.strip()

    meta = {}
    for line in match.group(1).splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            meta[key.strip()] = value.strip().strip("\"'")
    return meta, content[match.end():].strip()


class SkillsManager:
    """
    Skills live in ``<dir>/<skill-id>/SKILL.md``. By default the user's
    ``~/.zesbe/skills`` and the project's ``.skills`` are scanned, project
    skills overriding user skills of the same id.
    """

    def __init__(self, skills_dirs: list[Path] | None = None, cwd: Path | None = None):
        cwd = Path(cwd or Path.cwd())
        self.skills_dirs = skills_dirs or [Path.home() / ".zesbe" / "skills", cwd / ".skills"]
        self._available: dict[str, Path] = {}
        self._loaded: dict[str, Skill] = {}

    def scan(self) -> list[str]:
        """Find available skills, returning their ids"""
        self._available.clear()
        for skills_dir in self.skills_dirs:
            if not skills_dir.is_dir():
                continue
            for skill_md in sorted(skills_dir.glob("*/SKILL.md")):
                self._available[skill_md.parent.name] = skill_md.parent
        logger.debug(f"Found {len(self._available)} skills")
        return list(self._available)

    def load(self, skill_id: str) -> Skill | None:
        if skill_id in self._loaded:
            return self._loaded[skill_id]
        if not self._available:
            self.scan()

        skill_dir = self._available.get(skill_id)
        if skill_dir is None:
            return None

        try:
            meta, instructions = parse_skill_md((skill_dir / "SKILL.md").read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load skill {skill_id}: {e}")
            return None

        skill = Skill(
            id=skill_id,
            name=meta.get("name", skill_id),
            description=meta.get("description", ""),
            instructions=instructions,
            path=skill_dir,
            files=sorted(p for p in skill_dir.iterdir() if p.is_file() and p.name != "SKILL.md"),
        )
        self._loaded[skill_id] = skill
        return skill

    def unload(self, skill_id: str) -> bool:
        return self._loaded.pop(skill_id, None) is not None

    @property
    def loaded(self) -> list[Skill]:
        return list(self._loaded.values())

    def get_skills_context(self) -> str:
        """Text appended to the system prompt for every loaded skill"""
        if not self._loaded:
            return ""

        context = "\n\n## Loaded Skills:\n"
        for skill in self._loaded.values():
            context += f"\n### Skill: {skill.name}\n"
            context += skill.instructions + "\n"
            if skill.files:
                names = ", ".join(f.name for f in skill.files)
                context += f"\nAdditional files in this skill: {names}\n"
        return context
