"""Skill, execution context and outcome contracts."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIRECT_ENGINE = "direct"


class ExecutionContext(BaseModel):
    """Input handed to a skill's execute callable."""

    input: Any
    rawInput: str
    meta: dict[str, Any] = Field(default_factory=dict)


class ExecutionOutcome(BaseModel):
    """Value produced by a skill.

    ``skillName`` and ``durationMs`` are always rewritten by the runtime, so a
    skill body may leave them at their defaults.
    """

    output: Any = None
    skillName: str = ""
    durationMs: float = 0.0


SkillExecutor = Callable[[ExecutionContext], Awaitable[ExecutionOutcome]]


def _normalize_terms(values: Iterable[str] | str | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    normalized = [str(entry).strip() for entry in values if entry and str(entry).strip()]
    return tuple(dict.fromkeys(normalized))


class Skill(BaseModel):
    """A named, described, independently executable capability."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    tags: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    engine: str = DIRECT_ENGINE
    input_schema: dict[str, Any] | None = None
    execute: SkillExecutor

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("value cannot be blank")
        return normalized

    @field_validator("tags", "keywords", mode="before")
    @classmethod
    def normalize_terms(cls, values: Any) -> tuple[str, ...]:
        return _normalize_terms(values)

    @field_validator("engine")
    @classmethod
    def normalize_engine(cls, value: str) -> str:
        return value.strip().lower() or DIRECT_ENGINE

    @property
    def is_direct(self) -> bool:
        return self.engine == DIRECT_ENGINE


def define_skill(
    name: str,
    description: str,
    *,
    tags: Iterable[str] = (),
    keywords: Iterable[str] = (),
    engine: str = DIRECT_ENGINE,
    input_schema: dict[str, Any] | None = None,
) -> Callable[[SkillExecutor], Skill]:
    """Decorate an async function as a skill.

    Example::

        @define_skill("hello", "Says hello", keywords=["hello", "hi"])
        async def hello(ctx: ExecutionContext) -> ExecutionOutcome:
            return ExecutionOutcome(output=f"Hello! You said: {ctx.rawInput}")
    """

    def decorator(func: SkillExecutor) -> Skill:
        return Skill(
            name=name,
            description=description,
            tags=tags,
            keywords=keywords,
            engine=engine,
            input_schema=input_schema,
            execute=func,
        )

    return decorator


@dataclass(frozen=True)
class RouteMatch:
    """A skill paired with its (strictly positive) routing score."""

    skill: Skill
    score: float
