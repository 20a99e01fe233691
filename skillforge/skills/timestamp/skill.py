"""Timestamp skill: reports the current date and time."""

from datetime import datetime, timezone

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, define_skill


@define_skill(
    "timestamp",
    "Returns the current date and time",
    tags=["utility", "time"],
    keywords=["time", "date", "now", "timestamp", "clock"],
)
async def timestamp_skill(ctx: ExecutionContext) -> ExecutionOutcome:
    return ExecutionOutcome(output=datetime.now(timezone.utc).isoformat())
