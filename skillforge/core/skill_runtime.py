"""Top-level runtime: route an utterance to a skill and execute it."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from time import perf_counter
from typing import Any

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, Skill
from skillforge.core.backends import BaseExecutionBackend
from skillforge.core.delegation_graph import build_delegation_graph, initial_state
from skillforge.core.errors import NoSkillMatched
from skillforge.core.router import route_best
from skillforge.core.scorer import DEFAULT_SCORING, ScoringWeights
from skillforge.core.skill_registry import SkillRegistry
from skillforge.core.tokenizer import IDF_MIN_SKILLS

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round(max((perf_counter() - started) * 1000, 0.0), 2)


async def execute_with_timing(skill: Skill, context: ExecutionContext) -> ExecutionOutcome:
    """Run a skill directly; name and duration come from here, not the skill."""

    started = perf_counter()
    outcome = await skill.execute(context)
    return outcome.model_copy(
        update={"skillName": skill.name, "durationMs": _elapsed_ms(started)}
    )


class SkillRuntime:
    """Routes utterances to the best skill and returns timed outcomes."""

    def __init__(
        self,
        registry: SkillRegistry | None = None,
        backends: Mapping[str, BaseExecutionBackend | None] | None = None,
        *,
        scoring: ScoringWeights = DEFAULT_SCORING,
        min_skills_for_weights: int = IDF_MIN_SKILLS,
    ) -> None:
        self.registry = registry if registry is not None else SkillRegistry()
        self._backends = dict(backends or {})
        self._scoring = scoring
        self._min_skills_for_weights = min_skills_for_weights
        self._delegation_graph = build_delegation_graph(self._backends)

    def register(self, skill: Skill) -> None:
        self.registry.register(skill)

    def list_skills(self) -> list[str]:
        return [skill.name for skill in self.registry.list()]

    def match(self, utterance: str) -> Skill | None:
        """Best skill for ``utterance`` against the current registry snapshot."""

        return route_best(
            self.registry.list(),
            utterance,
            min_skills_for_weights=self._min_skills_for_weights,
            scoring=self._scoring,
        )

    async def handle(
        self, utterance: str, meta: dict[str, Any] | None = None
    ) -> ExecutionOutcome | None:
        """Route and execute; ``None`` when no skill matches."""

        skill = self.match(utterance)
        if skill is None:
            logger.info("route_miss utterance_chars=%d", len(utterance))
            return None

        context = ExecutionContext(input=utterance, rawInput=utterance, meta=meta or {})
        if skill.is_direct:
            outcome = await execute_with_timing(skill, context)
        else:
            outcome = await self._execute_delegated(skill, context)

        logger.info(
            "skill_executed name=%s engine=%s duration_ms=%.2f",
            skill.name,
            skill.engine,
            outcome.durationMs,
        )
        return outcome

    async def handle_or_raise(
        self, utterance: str, meta: dict[str, Any] | None = None
    ) -> ExecutionOutcome:
        outcome = await self.handle(utterance, meta)
        if outcome is None:
            raise NoSkillMatched(utterance)
        return outcome

    async def _execute_delegated(
        self, skill: Skill, context: ExecutionContext
    ) -> ExecutionOutcome:
        started = perf_counter()
        state = await self._delegation_graph.ainvoke(initial_state(skill, context))
        outcome: ExecutionOutcome = state["outcome"]
        return outcome.model_copy(
            update={"skillName": skill.name, "durationMs": _elapsed_ms(started)}
        )
