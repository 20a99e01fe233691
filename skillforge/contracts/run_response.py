"""Response contracts for the skill routing API."""

from typing import Any

from pydantic import BaseModel

from skillforge.contracts.skill import Skill


class RunResponse(BaseModel):
    """Outcome of a routed prompt."""

    skillName: str
    output: Any
    durationMs: float


class SkillSummary(BaseModel):
    name: str
    description: str
    tags: list[str]
    engine: str

    @classmethod
    def from_skill(cls, skill: Skill) -> "SkillSummary":
        return cls(
            name=skill.name,
            description=skill.description,
            tags=list(skill.tags),
            engine=skill.engine,
        )


class SkillDetail(SkillSummary):
    keywords: list[str]

    @classmethod
    def from_skill(cls, skill: Skill) -> "SkillDetail":
        return cls(
            name=skill.name,
            description=skill.description,
            tags=list(skill.tags),
            keywords=list(skill.keywords),
            engine=skill.engine,
        )


class SkillListResponse(BaseModel):
    skills: list[SkillSummary]
    total: int
