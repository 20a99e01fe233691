"""Runtime orchestration tests."""

import pytest

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, Skill
from skillforge.core.backends import BackendResult, BaseExecutionBackend, EchoBackend
from skillforge.core.errors import BackendUnavailableError, DuplicateSkillName, NoSkillMatched
from skillforge.core.skill_registry import SkillRegistry
from skillforge.core.skill_runtime import SkillRuntime, execute_with_timing


class RecordingBackend(BaseExecutionBackend):
    name = "recording"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str | None]] = []

    async def run(self, prompt: str, context: str | None = None) -> BackendResult:
        self.calls.append((prompt, context))
        if self.fail:
            raise BackendUnavailableError("agent CLI not installed")
        return BackendResult(text=f"agent answered: {prompt}", durationMs=5)


def counting_skill(name: str, engine: str, calls: list[str], *, fail: bool = False) -> Skill:
    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        calls.append(ctx.rawInput)
        if fail:
            raise RuntimeError("skill body exploded")
        return ExecutionOutcome(output=f"instructions for {name}")

    return Skill(
        name=name,
        description="Weather forecasts for a city",
        keywords=("forecast",),
        engine=engine,
        execute=execute,
    )


@pytest.mark.asyncio
async def test_handle_executes_direct_skill(make_skill) -> None:
    runtime = SkillRuntime()
    runtime.register(make_skill("echo", keywords=("echo",)))

    outcome = await runtime.handle("echo this back", {"user": "u-1"})

    assert outcome is not None
    assert outcome.output == "echo:echo this back"
    assert outcome.skillName == "echo"


@pytest.mark.asyncio
async def test_handle_passes_context_through() -> None:
    seen: list[ExecutionContext] = []

    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        seen.append(ctx)
        return ExecutionOutcome(output="ok")

    runtime = SkillRuntime()
    runtime.register(Skill(name="inspect", description="Inspect things", execute=execute))

    await runtime.handle("inspect now", {"trace": "abc"})

    assert seen[0].input == "inspect now"
    assert seen[0].rawInput == "inspect now"
    assert seen[0].meta == {"trace": "abc"}


@pytest.mark.asyncio
async def test_outcome_name_and_duration_are_overwritten() -> None:
    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        return ExecutionOutcome(output="x", skillName="impostor", durationMs=99999)

    runtime = SkillRuntime()
    runtime.register(Skill(name="honest", description="Reports honestly", execute=execute))

    outcome = await runtime.handle("honest please")

    assert outcome is not None
    assert outcome.skillName == "honest"
    assert 0 <= outcome.durationMs < 99999


@pytest.mark.asyncio
async def test_execute_with_timing_overwrites_fields(make_skill) -> None:
    skill = make_skill("timed", output="done")
    context = ExecutionContext(input="go", rawInput="go")

    outcome = await execute_with_timing(skill, context)

    assert outcome.output == "done"
    assert outcome.skillName == "timed"
    assert outcome.durationMs >= 0


@pytest.mark.asyncio
async def test_no_match_returns_none_and_raising_variant_raises(make_skill) -> None:
    runtime = SkillRuntime()
    runtime.register(make_skill("time", "Returns the current time", keywords=("time", "clock")))

    assert await runtime.handle("completely unrelated query") is None
    with pytest.raises(NoSkillMatched) as exc_info:
        await runtime.handle_or_raise("completely unrelated query")

    assert exc_info.value.utterance == "completely unrelated query"
    assert "completely unrelated query" in str(exc_info.value)


@pytest.mark.asyncio
async def test_handle_or_raise_returns_outcome(make_skill) -> None:
    runtime = SkillRuntime()
    runtime.register(make_skill("time", "Returns the current time", keywords=("time",)))

    outcome = await runtime.handle_or_raise("what time is it")

    assert outcome.skillName == "time"


def test_register_and_list_skills(make_skill) -> None:
    runtime = SkillRuntime()
    runtime.register(make_skill("first"))
    runtime.register(make_skill("second"))

    with pytest.raises(DuplicateSkillName):
        runtime.register(make_skill("first"))

    assert runtime.list_skills() == ["first", "second"]
    assert runtime.registry.size == 2


@pytest.mark.asyncio
async def test_unreachable_backend_falls_back_to_direct() -> None:
    calls: list[str] = []
    runtime = SkillRuntime(backends={"claude-code": None})
    runtime.register(counting_skill("weather", "claude-code", calls))

    outcome = await runtime.handle("weather today")

    assert outcome is not None
    assert outcome.skillName == "weather"
    assert outcome.output == "instructions for weather"
    assert outcome.durationMs >= 0


@pytest.mark.asyncio
async def test_unconfigured_engine_falls_back_to_direct() -> None:
    calls: list[str] = []
    runtime = SkillRuntime()
    runtime.register(counting_skill("weather", "codex", calls))

    outcome = await runtime.handle("weather today")

    assert outcome is not None
    assert outcome.output == "instructions for weather"


@pytest.mark.asyncio
async def test_delegated_skill_uses_backend_with_derived_context() -> None:
    calls: list[str] = []
    backend = RecordingBackend()
    runtime = SkillRuntime(backends={"recording": backend})
    runtime.register(counting_skill("weather", "recording", calls))

    outcome = await runtime.handle("weather in Paris")

    assert outcome is not None
    assert outcome.output == "agent answered: weather in Paris"
    assert outcome.skillName == "weather"
    assert backend.calls == [("weather in Paris", "instructions for weather")]
    assert calls == ["weather in Paris"]


@pytest.mark.asyncio
async def test_failed_context_derivation_still_reaches_backend() -> None:
    calls: list[str] = []
    backend = RecordingBackend()
    runtime = SkillRuntime(backends={"recording": backend})
    runtime.register(counting_skill("weather", "recording", calls, fail=True))

    outcome = await runtime.handle("weather in Oslo")

    assert outcome is not None
    assert outcome.output == "agent answered: weather in Oslo"
    assert backend.calls == [("weather in Oslo", None)]


@pytest.mark.asyncio
async def test_backend_error_falls_back_and_reruns_skill() -> None:
    calls: list[str] = []
    backend = RecordingBackend(fail=True)
    runtime = SkillRuntime(backends={"recording": backend})
    runtime.register(counting_skill("weather", "recording", calls))

    outcome = await runtime.handle("weather forecast")

    assert outcome is not None
    assert outcome.output == "instructions for weather"
    assert outcome.skillName == "weather"
    assert len(backend.calls) == 1
    assert calls == ["weather forecast", "weather forecast"]


@pytest.mark.asyncio
async def test_fallback_propagates_skill_errors() -> None:
    calls: list[str] = []
    runtime = SkillRuntime(backends={"recording": RecordingBackend(fail=True)})
    runtime.register(counting_skill("weather", "recording", calls, fail=True))

    with pytest.raises(RuntimeError, match="skill body exploded"):
        await runtime.handle("weather forecast")


@pytest.mark.asyncio
async def test_echo_backend_combines_context_and_request() -> None:
    calls: list[str] = []
    runtime = SkillRuntime(backends={"echo": EchoBackend()})
    runtime.register(counting_skill("weather", "echo", calls))

    outcome = await runtime.handle("weather tomorrow")

    assert outcome is not None
    assert outcome.output == "instructions for weather\n\nweather tomorrow"


@pytest.mark.asyncio
async def test_handle_sees_registry_changes_between_calls(make_skill) -> None:
    runtime = SkillRuntime()
    runtime.register(make_skill("alpha", keywords=("launch",)))
    runtime.register(make_skill("beta", keywords=("launch", "rocket")))

    first = await runtime.handle("launch rocket")
    runtime.registry.remove("beta")
    second = await runtime.handle("launch rocket")

    assert first is not None and first.skillName == "beta"
    assert second is not None and second.skillName == "alpha"


@pytest.mark.asyncio
async def test_runtime_keeps_injected_empty_registry(make_skill) -> None:
    registry = SkillRegistry()
    runtime = SkillRuntime(registry)
    registry.register(make_skill("alpha", keywords=("launch",)))

    outcome = await runtime.handle("launch now")

    assert runtime.registry is registry
    assert outcome is not None and outcome.skillName == "alpha"


@pytest.mark.asyncio
async def test_negative_self_reported_duration_is_replaced() -> None:
    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        return ExecutionOutcome(output="x", durationMs=-1)

    runtime = SkillRuntime()
    runtime.register(Skill(name="untimed", description="Skips timing", execute=execute))

    outcome = await runtime.handle("untimed go")

    assert outcome is not None
    assert outcome.output == "x"
    assert outcome.durationMs >= 0


@pytest.mark.asyncio
async def test_malformed_context_result_still_reaches_backend() -> None:
    calls: list[str] = []

    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        calls.append(ctx.rawInput)
        if len(calls) == 1:
            return None  # type: ignore[return-value]
        return ExecutionOutcome(output="instructions for weather")

    backend = RecordingBackend()
    runtime = SkillRuntime(backends={"codex": backend})
    runtime.register(
        Skill(
            name="weather",
            description="Weather forecasts for a city",
            engine="codex",
            execute=execute,
        )
    )

    outcome = await runtime.handle("weather today")

    assert outcome is not None
    assert outcome.output == "agent answered: weather today"
    assert backend.calls == [("weather today", None)]
