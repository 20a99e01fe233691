"""LangGraph flow for skills that delegate to an execution backend.

derive_context -> invoke_backend -> (done | direct_fallback)

Deriving the auxiliary context may fail without consequence; a backend that
is missing or fails routes to the direct fallback, which runs the skill
exactly as a direct skill would run.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal, TypedDict

from langgraph.graph import END, START, StateGraph

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, Skill
from skillforge.core.backends import BaseExecutionBackend

logger = logging.getLogger(__name__)


class DelegationState(TypedDict):
    """Execution state for one delegated invocation."""

    skill: Skill
    context: ExecutionContext
    instructions: str | None
    outcome: ExecutionOutcome | None
    backend_error: str | None


def initial_state(skill: Skill, context: ExecutionContext) -> DelegationState:
    return {
        "skill": skill,
        "context": context,
        "instructions": None,
        "outcome": None,
        "backend_error": None,
    }


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


async def derive_context_node(state: DelegationState) -> dict[str, object]:
    """Run the skill body once to harvest its instructional text."""

    skill = state["skill"]
    try:
        outcome = await skill.execute(state["context"])
        instructions = _as_text(outcome.output)
    except Exception as exc:  # noqa: BLE001
        logger.debug("context_derivation_failed skill=%s error=%s", skill.name, exc)
        return {"instructions": None}
    return {"instructions": instructions}


async def invoke_backend_node(
    state: DelegationState,
    backends: Mapping[str, BaseExecutionBackend | None],
) -> dict[str, object]:
    """Hand the raw utterance and derived instructions to the named backend."""

    skill = state["skill"]
    backend = backends.get(skill.engine)
    if backend is None:
        logger.warning(
            "backend_unavailable skill=%s engine=%s fallback=direct",
            skill.name,
            skill.engine,
        )
        return {"backend_error": f"no backend configured for engine '{skill.engine}'"}

    try:
        result = await backend.run(state["context"].rawInput, state["instructions"])
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "backend_failed skill=%s engine=%s error=%s fallback=direct",
            skill.name,
            skill.engine,
            exc,
        )
        return {"backend_error": str(exc) or type(exc).__name__}

    return {"outcome": ExecutionOutcome(output=result.text)}


async def direct_fallback_node(state: DelegationState) -> dict[str, object]:
    """Execute the skill directly for this invocation."""

    return {"outcome": await state["skill"].execute(state["context"])}


def route_after_backend(state: DelegationState) -> Literal["done", "fallback"]:
    return "done" if state["outcome"] is not None else "fallback"


def build_delegation_graph(backends: Mapping[str, BaseExecutionBackend | None]):
    """Build and compile the delegated execution workflow."""

    async def invoke_backend(state: DelegationState) -> dict[str, object]:
        return await invoke_backend_node(state, backends)

    graph = StateGraph(DelegationState)
    graph.add_node("derive_context", derive_context_node)
    graph.add_node("invoke_backend", invoke_backend)
    graph.add_node("direct_fallback", direct_fallback_node)

    graph.add_edge(START, "derive_context")
    graph.add_edge("derive_context", "invoke_backend")
    graph.add_conditional_edges(
        "invoke_backend",
        route_after_backend,
        {"done": END, "fallback": "direct_fallback"},
    )
    graph.add_edge("direct_fallback", END)

    return graph.compile()
