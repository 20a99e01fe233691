"""Built-in skills shipped with the package."""

from skillforge.contracts.skill import Skill
from skillforge.skills.fetch_url.skill import fetch_url_skill
from skillforge.skills.greeting.skill import greeting_skill
from skillforge.skills.run_command.skill import run_command_skill
from skillforge.skills.timestamp.skill import timestamp_skill
from skillforge.skills.word_count.skill import word_count_skill


def builtin_skills() -> list[Skill]:
    return [
        timestamp_skill,
        word_count_skill,
        greeting_skill,
        fetch_url_skill,
        run_command_skill,
    ]
