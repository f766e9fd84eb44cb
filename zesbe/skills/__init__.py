"""Skill folders that inject instructions into the agent prompt"""

from .manager import SkillsManager, Skill

__all__ = ["SkillsManager", "Skill"]
