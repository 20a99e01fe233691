"""Word count skill: counts whitespace-separated words in the request."""

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, define_skill


@define_skill(
    "word-count",
    "Counts the number of words in the given text",
    tags=["utility", "text"],
    keywords=["count", "words", "word count", "how many words"],
)
async def word_count_skill(ctx: ExecutionContext) -> ExecutionOutcome:
    words = len(ctx.rawInput.split())
    return ExecutionOutcome(output=f"{words} words")
