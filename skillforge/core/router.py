"""Rank skills against an utterance and pick the best one."""

from __future__ import annotations

from collections.abc import Sequence

from skillforge.contracts.skill import RouteMatch, Skill
from skillforge.core.scorer import DEFAULT_SCORING, ScoringWeights, score_skill
from skillforge.core.tokenizer import IDF_MIN_SKILLS, build_weights


def route(
    skills: Sequence[Skill],
    utterance: str,
    *,
    min_skills_for_weights: int = IDF_MIN_SKILLS,
    scoring: ScoringWeights = DEFAULT_SCORING,
) -> list[RouteMatch]:
    """Return every positively scored skill, best first.

    Relevance weights are rebuilt on each call from ``skills`` so they always
    reflect the current corpus. Equal scores keep their input order.
    """

    weights = build_weights(skills) if len(skills) >= min_skills_for_weights else None

    matches: list[RouteMatch] = []
    for skill in skills:
        score = score_skill(skill, utterance, weights, scoring=scoring)
        if score > 0:
            matches.append(RouteMatch(skill=skill, score=score))

    # list.sort is stable, which preserves registration order on ties.
    matches.sort(key=lambda match: match.score, reverse=True)
    return matches


def route_best(
    skills: Sequence[Skill],
    utterance: str,
    *,
    min_skills_for_weights: int = IDF_MIN_SKILLS,
    scoring: ScoringWeights = DEFAULT_SCORING,
) -> Skill | None:
    matches = route(
        skills,
        utterance,
        min_skills_for_weights=min_skills_for_weights,
        scoring=scoring,
    )
    return matches[0].skill if matches else None
