"""Heuristic relevance scoring of one skill against one utterance.

Four additive phases, each computed independently:

1. the skill name appears as a whole word,
2. configured keywords (phrases by containment, single words by boundary),
3. tags by word boundary,
4. description token overlap, weighted by corpus relevance when available.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from skillforge.contracts.skill import Skill
from skillforge.core.tokenizer import tokenize

_WHITESPACE_RE = re.compile(r"\s")


@dataclass(frozen=True)
class ScoringWeights:
    """Fixed heuristic weights; the defaults are the reference values."""

    name: float = 20.0
    keyword: float = 10.0
    tag: float = 5.0
    fuzzy_prefix_min_length: int = 4


DEFAULT_SCORING = ScoringWeights()


def _boundary_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term.lower())}\b")


@dataclass(frozen=True)
class KeywordMatcher:
    phrase: str | None
    pattern: re.Pattern[str] | None

    def matches(self, lowered: str) -> bool:
        if self.phrase is not None:
            return self.phrase in lowered
        return self.pattern is not None and self.pattern.search(lowered) is not None


@dataclass(frozen=True)
class SkillMatcher:
    """Patterns and description tokens derived from a skill's metadata."""

    name_pattern: re.Pattern[str]
    keywords: tuple[KeywordMatcher, ...]
    tag_patterns: tuple[re.Pattern[str], ...]
    description_tokens: tuple[str, ...]
    description_set: frozenset[str]


def _keyword_matcher(keyword: str) -> KeywordMatcher:
    lowered = keyword.lower()
    if _WHITESPACE_RE.search(lowered):
        return KeywordMatcher(phrase=lowered, pattern=None)
    return KeywordMatcher(phrase=None, pattern=_boundary_pattern(lowered))


@lru_cache(maxsize=2048)
def _compile(
    name: str,
    keywords: tuple[str, ...],
    tags: tuple[str, ...],
    description: str,
) -> SkillMatcher:
    description_tokens = tuple(tokenize(description))
    return SkillMatcher(
        name_pattern=_boundary_pattern(name),
        keywords=tuple(_keyword_matcher(keyword) for keyword in keywords),
        tag_patterns=tuple(_boundary_pattern(tag) for tag in tags),
        description_tokens=description_tokens,
        description_set=frozenset(description_tokens),
    )


def compile_matcher(skill: Skill) -> SkillMatcher:
    """Return the (cached) matcher for a skill's current metadata."""

    return _compile(skill.name, skill.keywords, skill.tags, skill.description)


def is_affix_match(word: str, other: str, min_length: int) -> bool:
    """True when one token prefixes the other and the shorter side is long enough."""

    return (len(word) >= min_length and other.startswith(word)) or (
        len(other) >= min_length and word.startswith(other)
    )


def _description_matches(
    word: str, matcher: SkillMatcher, min_length: int
) -> bool:
    if word in matcher.description_set:
        return True
    return any(
        is_affix_match(word, desc_word, min_length)
        for desc_word in matcher.description_tokens
    )


def score_skill(
    skill: Skill,
    utterance: str,
    weights: Mapping[str, float] | None = None,
    *,
    scoring: ScoringWeights = DEFAULT_SCORING,
) -> float:
    """Score how well ``skill`` fits ``utterance``; 0 means no match.

    ``weights`` maps description tokens to relevance weights; without it every
    matched token counts 1. The score is unbounded and only its ordering
    across skills is meaningful.
    """

    matcher = compile_matcher(skill)
    lowered = utterance.lower()
    score = 0.0

    if matcher.name_pattern.search(lowered):
        score += scoring.name

    for keyword in matcher.keywords:
        if keyword.matches(lowered):
            score += scoring.keyword

    for pattern in matcher.tag_patterns:
        if pattern.search(lowered):
            score += scoring.tag

    for word in tokenize(utterance):
        if _description_matches(word, matcher, scoring.fuzzy_prefix_min_length):
            score += weights.get(word, 1.0) if weights is not None else 1.0

    return score
