"""Command-line interface: route prompts, inspect skills, serve the API."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from skillforge.config.settings import settings
from skillforge.contracts.skill import DIRECT_ENGINE
from skillforge.core.backends import ENGINES
from skillforge.core.factory import build_runtime, load_directory_skills
from skillforge.core.skill_runtime import SkillRuntime

logger = logging.getLogger("skillforge")

DESCRIPTION_PREVIEW_CHARS = 70

EPILOG = """\
examples:
  skillforge run "what time is it"
  skillforge run --dir ~/clawdbot/skills "what's the weather in Shanghai"
  skillforge run --dir ~/clawdbot/skills --engine claude-code "help me with git rebase"
  skillforge list --dir /path/to/skills
  skillforge info git-helper
  skillforge serve --dir ~/clawdbot/skills --port 3000
"""


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value}") from None
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    return port


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--dir",
        dest="skills_dir",
        default=None,
        help=f"Skills directory (default: {settings.skills_dir})",
    )
    common.add_argument(
        "--engine",
        choices=ENGINES,
        default=settings.default_engine,
        help="Execution engine for SKILL.md skills (default: %(default)s)",
    )
    common.add_argument(
        "--no-builtins",
        action="store_true",
        help="Do not register the built-in skills",
    )

    parser = argparse.ArgumentParser(
        prog="skillforge",
        description="Route user input to skills",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", parents=[common], help="Route and execute a skill")
    run.add_argument("prompt", nargs="+", help="Free-text request to route")

    commands.add_parser("list", parents=[common], help="List all available skills")

    info = commands.add_parser("info", parents=[common], help="Show skill details")
    info.add_argument("name", help="Skill name")

    serve = commands.add_parser("serve", parents=[common], help="Start HTTP API server")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=_port, default=settings.port)
    return parser


async def _prepare_runtime(args: argparse.Namespace) -> SkillRuntime:
    runtime = build_runtime(settings, include_builtins=not args.no_builtins)
    skills_dir = Path(args.skills_dir or settings.skills_dir).expanduser()
    if args.skills_dir is None and not skills_dir.is_dir():
        return runtime
    await load_directory_skills(runtime, skills_dir, args.engine)
    return runtime


def _print_available(console: Console, runtime: SkillRuntime) -> None:
    console.print("Available skills:")
    for skill in runtime.registry.list():
        console.print(f"  - {escape(skill.name)}: {escape(skill.description[:60])}")


async def _run(console: Console, runtime: SkillRuntime, args: argparse.Namespace) -> int:
    prompt = " ".join(args.prompt).strip()
    if not prompt:
        console.print("Error: missing prompt. Usage: skillforge run <prompt>")
        return 1

    engine_label = (
        "direct (returns instructions)" if args.engine == DIRECT_ENGINE else args.engine
    )
    console.print(f"\\[{runtime.registry.size} skills loaded | engine: {engine_label}]")
    console.print()

    outcome = await runtime.handle(prompt)
    if outcome is None:
        console.print("No matching skill found for this input.")
        _print_available(console, runtime)
        return 0

    console.print(f"Skill: {escape(outcome.skillName)} ({outcome.durationMs:.0f}ms)")
    console.print()
    console.print(escape(str(outcome.output)))
    return 0


def _list(console: Console, runtime: SkillRuntime, args: argparse.Namespace) -> int:
    skills = runtime.registry.list()
    console.print(f"Skills loaded from: {escape(str(args.skills_dir or settings.skills_dir))}")
    console.print(f"Engine: {args.engine}")
    console.print(f"Total: {len(skills)}")
    console.print()
    for skill in skills:
        description = skill.description
        if len(description) > DESCRIPTION_PREVIEW_CHARS:
            description = description[:DESCRIPTION_PREVIEW_CHARS] + "..."
        tags = f" \\[{escape(', '.join(skill.tags))}]" if skill.tags else ""
        console.print(f"  [bold]{escape(skill.name)}[/bold]: {escape(description)}{tags}")
    return 0


def _info(console: Console, runtime: SkillRuntime, args: argparse.Namespace) -> int:
    skill = runtime.registry.get(args.name)
    if skill is None:
        console.print(f'Skill "{escape(args.name)}" not found.')
        _print_available(console, runtime)
        return 1

    console.print(f"Name:        {escape(skill.name)}")
    console.print(f"Description: {escape(skill.description)}")
    if skill.tags:
        console.print(f"Tags:        {escape(', '.join(skill.tags))}")
    console.print(f"Engine:      {skill.engine}")
    if skill.keywords:
        console.print(f"Keywords:    {escape(', '.join(skill.keywords))}")
    return 0


async def _dispatch(console: Console, args: argparse.Namespace) -> int:
    try:
        runtime = await _prepare_runtime(args)
    except FileNotFoundError:
        console.print(f"Failed to load skills from: {escape(str(args.skills_dir))}")
        console.print("Use --dir to specify a valid skills directory.")
        return 1

    if args.command == "run":
        return await _run(console, runtime, args)
    if args.command == "list":
        return _list(console, runtime, args)
    return _info(console, runtime, args)


def _serve(console: Console, args: argparse.Namespace) -> int:
    if args.skills_dir and not Path(args.skills_dir).expanduser().is_dir():
        console.print(f"Failed to load skills from: {escape(str(args.skills_dir))}")
        console.print("Use --dir to specify a valid skills directory.")
        return 1

    import uvicorn

    if args.skills_dir:
        settings.skills_dir = args.skills_dir
    settings.default_engine = args.engine
    settings.include_builtin_skills = not args.no_builtins

    from skillforge.main import app

    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""

    args = build_parser().parse_args(argv)
    console = Console(highlight=False, soft_wrap=True)

    if not logger.handlers:
        logging.basicConfig(level=logging.WARNING)

    if args.command == "serve":
        return _serve(console, args)

    return asyncio.run(_dispatch(console, args))


if __name__ == "__main__":
    raise SystemExit(main())
