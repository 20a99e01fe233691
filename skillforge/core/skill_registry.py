"""Skill registration and lookup for the routing runtime."""

from __future__ import annotations

import logging

from skillforge.contracts.skill import Skill
from skillforge.core.errors import DuplicateSkillName

logger = logging.getLogger(__name__)


class SkillRegistry:
    """Simple in-memory, insertion-ordered skill registry.

    Mutation (``register``/``remove``) is not synchronized; reads never mutate
    and may interleave freely.
    """

    def __init__(self) -> None:
        self._skills: dict[str, Skill] = {}

    def register(self, skill: Skill) -> None:
        if skill.name in self._skills:
            raise DuplicateSkillName(skill.name)
        self._skills[skill.name] = skill
        logger.debug("skill_registered name=%s engine=%s", skill.name, skill.engine)

    def get(self, name: str) -> Skill | None:
        return self._skills.get(name)

    def list(self) -> list[Skill]:
        """Return a snapshot of all skills in registration order."""

        return list(self._skills.values())

    def filter_by_tag(self, tag: str) -> list[Skill]:
        return [skill for skill in self._skills.values() if tag in skill.tags]

    def remove(self, name: str) -> bool:
        removed = self._skills.pop(name, None) is not None
        if removed:
            logger.debug("skill_removed name=%s", name)
        return removed

    @property
    def size(self) -> int:
        return len(self._skills)

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, name: object) -> bool:
        return name in self._skills
