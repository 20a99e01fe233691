"""SKILL.md loader: YAML frontmatter plus a markdown instruction body.

Compatible with the clawdbot/OpenClaw layout::

    skills/
      git-helper/SKILL.md
      weather/SKILL.md

A loaded skill's execute returns its body. Direct skills hand that text to
the caller; delegated skills hand it to their backend as instructions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import yaml

from skillforge.contracts.skill import (
    DIRECT_ENGINE,
    ExecutionContext,
    ExecutionOutcome,
    Skill,
)

logger = logging.getLogger(__name__)

SKILL_FILE_NAME = "SKILL.md"
METADATA_NAMESPACES = ("skillforge", "openclaw")

_FRONTMATTER_RE = re.compile(r"^---\r?\n(.*?)\r?\n---\r?\n?(.*)$", re.DOTALL)
_TOP_LEVEL_KEY_RE = re.compile(r"^(\w[\w-]*):\s*(.*)$")


class SkillDefinitionError(ValueError):
    """Raised when a SKILL.md file cannot be turned into a skill."""


@dataclass(frozen=True)
class ParsedSkillMarkdown:
    frontmatter: dict[str, Any]
    body: str
    file_path: Path


def _parse_frontmatter_fallback(raw_yaml: str) -> dict[str, Any]:
    """Line-based parser for frontmatter YAML rejects.

    Handles unquoted colons inside values, which are common in community
    skill files. Only top-level ``key: value`` pairs are read; ``metadata``
    is accepted when it is inline (possibly multi-line) JSON.
    """

    result: dict[str, Any] = {}
    metadata_raw = ""
    in_metadata = False

    for line in raw_yaml.splitlines():
        match = _TOP_LEVEL_KEY_RE.match(line)
        if match:
            key, value = match.group(1), match.group(2)
            if key == "metadata":
                in_metadata = True
                metadata_raw = value
                continue
            in_metadata = False
            result[key] = value.strip()
        elif in_metadata:
            metadata_raw += line

    if metadata_raw.strip():
        try:
            result["metadata"] = json.loads(metadata_raw.strip())
        except json.JSONDecodeError:
            logger.debug("frontmatter_metadata_unparsed")

    if "user-invocable" in result:
        result["user-invocable"] = result["user-invocable"] == "true"
    return result


def parse_frontmatter(content: str, file_path: str | Path) -> ParsedSkillMarkdown:
    """Split SKILL.md content into frontmatter and body."""

    path = Path(file_path)
    match = _FRONTMATTER_RE.match(content)
    if not match:
        raise SkillDefinitionError(
            f"No valid YAML frontmatter found in {path}. "
            "Expected file to start with --- delimiters."
        )

    raw_yaml, body = match.group(1), match.group(2).strip()
    try:
        frontmatter = yaml.safe_load(raw_yaml) or {}
    except yaml.YAMLError:
        frontmatter = _parse_frontmatter_fallback(raw_yaml)
    if not isinstance(frontmatter, dict):
        raise SkillDefinitionError(f"Frontmatter of {path} is not a mapping")

    for field in ("name", "description"):
        if not str(frontmatter.get(field) or "").strip():
            raise SkillDefinitionError(f'Missing "{field}" in frontmatter of {path}')

    return ParsedSkillMarkdown(frontmatter=frontmatter, body=body, file_path=path)


def _namespaced(frontmatter: dict[str, Any], key: str) -> list[str]:
    metadata = frontmatter.get("metadata")
    if not isinstance(metadata, dict):
        return []
    for namespace in METADATA_NAMESPACES:
        section = metadata.get(namespace)
        if isinstance(section, dict) and section.get(key):
            values = section[key]
            return [values] if isinstance(values, str) else [str(v) for v in values]
    return []


def markdown_to_skill(parsed: ParsedSkillMarkdown, engine: str = DIRECT_ENGINE) -> Skill:
    """Build a skill whose execute returns the markdown body."""

    body = parsed.body

    async def execute(ctx: ExecutionContext) -> ExecutionOutcome:
        return ExecutionOutcome(output=body)

    frontmatter = parsed.frontmatter
    return Skill(
        name=str(frontmatter["name"]),
        description=str(frontmatter["description"]),
        tags=_namespaced(frontmatter, "tags"),
        keywords=_namespaced(frontmatter, "keywords"),
        engine=engine,
        execute=execute,
    )


async def _read_text(path: Path) -> str:
    async with aiofiles.open(path, encoding="utf-8") as handle:
        return await handle.read()


async def parse_skill_markdown(file_path: str | Path) -> ParsedSkillMarkdown:
    """Read and parse a SKILL.md file without building a skill."""

    path = Path(file_path).expanduser().resolve()
    return parse_frontmatter(await _read_text(path), path)


async def load_skill_from_markdown(
    file_path: str | Path, engine: str = DIRECT_ENGINE
) -> Skill:
    return markdown_to_skill(await parse_skill_markdown(file_path), engine=engine)


async def list_skill_files(skills_dir: Path) -> list[Path]:
    """SKILL.md files of the immediate subdirectories, by directory name."""

    if not await aiofiles.os.path.isdir(skills_dir):
        raise FileNotFoundError(f"skills directory not found: {skills_dir}")

    def _collect() -> list[Path]:
        return sorted(
            entry / SKILL_FILE_NAME
            for entry in skills_dir.iterdir()
            if entry.is_dir() and (entry / SKILL_FILE_NAME).is_file()
        )

    return await asyncio.to_thread(_collect)


async def load_skills_from_dir(
    dir_path: str | Path, engine: str = DIRECT_ENGINE
) -> list[Skill]:
    """Load every ``<dir>/<skill>/SKILL.md``; invalid files are skipped."""

    skills_dir = Path(dir_path).expanduser().resolve()
    skills: list[Skill] = []
    for skill_file in await list_skill_files(skills_dir):
        try:
            skills.append(await load_skill_from_markdown(skill_file, engine=engine))
        except (OSError, ValueError) as exc:
            logger.warning("skill_file_skipped path=%s error=%s", skill_file, exc)
    logger.info("skills_loaded dir=%s count=%d engine=%s", skills_dir, len(skills), engine)
    return skills
