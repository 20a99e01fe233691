"""Shared fixtures for skill tests."""

from collections.abc import Callable
from typing import Any

import pytest

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, Skill


def build_skill(
    name: str,
    description: str = "generic helper",
    *,
    keywords: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
    engine: str = "direct",
    output: Any = None,
) -> Skill:
    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        return ExecutionOutcome(output=output if output is not None else f"{name}:{ctx.rawInput}")

    return Skill(
        name=name,
        description=description,
        keywords=keywords,
        tags=tags,
        engine=engine,
        execute=execute,
    )


@pytest.fixture
def make_skill() -> Callable[..., Skill]:
    return build_skill
