"""Greeting skill: answers hellos with a time-of-day greeting."""

from datetime import datetime

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, define_skill


def time_of_day_greeting(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


@define_skill(
    "greeting",
    "Responds to greetings and hellos from the user",
    tags=["social"],
    keywords=["hello", "hi", "hey", "greet", "good morning", "good evening"],
)
async def greeting_skill(ctx: ExecutionContext) -> ExecutionOutcome:
    greeting = time_of_day_greeting(datetime.now().hour)
    return ExecutionOutcome(output=f'{greeting}! You said: "{ctx.rawInput}"')
