"""Run command skill: executes whitelisted binaries without a shell."""

import asyncio
import re

from skillforge.contracts.skill import ExecutionContext, ExecutionOutcome, define_skill

# Read-only inspection commands.
ALLOWED_COMMANDS = frozenset(
    {
        "ls", "pwd", "whoami", "date", "uptime", "uname", "cat", "head", "tail",
        "wc", "echo", "which", "env", "df", "du", "ps", "git", "python", "pip",
    }
)
TIMEOUT_SECONDS = 10.0
MAX_OUTPUT_BYTES = 1024 * 1024

_PREFIX_RE = re.compile(r"^\s*(run|execute|exec|cmd)\s+", re.IGNORECASE)


def parse_command(text: str) -> tuple[str, list[str]] | None:
    """Split "run ls -la" style input into a binary and its arguments."""

    cleaned = _PREFIX_RE.sub("", text, count=1).strip()
    if not cleaned:
        return None
    binary, *args = cleaned.split()
    return binary, args


@define_skill(
    "run-command",
    "Execute a whitelisted shell command and return its output",
    tags=["cli", "shell", "command"],
    keywords=["run", "execute", "exec", "command", "shell", "cmd"],
)
async def run_command_skill(ctx: ExecutionContext) -> ExecutionOutcome:
    parsed = parse_command(ctx.rawInput)
    if parsed is None:
        return ExecutionOutcome(output='Could not parse a command from input. Try: "run ls -la"')

    binary, args = parsed
    command_line = " ".join([binary, *args])
    if binary not in ALLOWED_COMMANDS:
        allowed = ", ".join(sorted(ALLOWED_COMMANDS))
        return ExecutionOutcome(
            output=f'Command "{binary}" is not in the allowed list.\nAllowed: {allowed}'
        )

    try:
        process = await asyncio.create_subprocess_exec(
            binary,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=TIMEOUT_SECONDS)
    except OSError as exc:
        return ExecutionOutcome(output=f"Command failed: {command_line}\n{exc}")
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return ExecutionOutcome(
            output=f"Command failed: {command_line}\ntimed out after {TIMEOUT_SECONDS:g}s"
        )

    out = stdout[:MAX_OUTPUT_BYTES].decode(errors="replace")
    err = stderr[:MAX_OUTPUT_BYTES].decode(errors="replace")
    text = out
    if err:
        text += ("\n" if text else "") + f"[stderr] {err}"
    if not text:
        text = "(no output)"
    if process.returncode:
        return ExecutionOutcome(output=f"Command failed: {command_line}\n{text}")
    return ExecutionOutcome(output=f"$ {command_line}\n{text}")
