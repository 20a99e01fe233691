"""Wiring of settings, backends and skill sources into a runtime."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from skillforge.config.settings import Settings
from skillforge.contracts.skill import Skill
from skillforge.core.backends import build_default_backends
from skillforge.core.errors import DuplicateSkillName
from skillforge.core.scorer import ScoringWeights
from skillforge.core.skill_runtime import SkillRuntime
from skillforge.loader.markdown import load_skills_from_dir
from skillforge.skills.catalog import builtin_skills

logger = logging.getLogger(__name__)


def scoring_from_settings(settings: Settings) -> ScoringWeights:
    return ScoringWeights(
        name=settings.name_weight,
        keyword=settings.keyword_weight,
        tag=settings.tag_weight,
        fuzzy_prefix_min_length=settings.fuzzy_prefix_min_length,
    )


def register_all(runtime: SkillRuntime, skills: Iterable[Skill]) -> int:
    """Register skills, skipping names that are already taken."""

    registered = 0
    for skill in skills:
        try:
            runtime.register(skill)
        except DuplicateSkillName as exc:
            logger.warning("skill_skipped name=%s reason=%s", exc.name, exc)
            continue
        registered += 1
    return registered


def build_runtime(settings: Settings, *, include_builtins: bool | None = None) -> SkillRuntime:
    runtime = SkillRuntime(
        backends=build_default_backends(settings),
        scoring=scoring_from_settings(settings),
        min_skills_for_weights=settings.idf_min_skills,
    )
    if include_builtins is None:
        include_builtins = settings.include_builtin_skills
    if include_builtins:
        register_all(runtime, builtin_skills())
    return runtime


async def load_directory_skills(
    runtime: SkillRuntime,
    skills_dir: str | Path,
    engine: str,
) -> int:
    """Register SKILL.md skills from ``skills_dir``; returns how many were added."""

    skills = await load_skills_from_dir(skills_dir, engine=engine)
    return register_all(runtime, skills)
