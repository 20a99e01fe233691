"""Execution backends that delegated skills hand their requests to."""

from __future__ import annotations

import asyncio
import logging
import shlex
from abc import ABC, abstractmethod
from collections.abc import Sequence
from time import perf_counter

from pydantic import BaseModel, Field

from skillforge.config.settings import Settings
from skillforge.contracts.skill import DIRECT_ENGINE
from skillforge.core.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

ENGINES = (DIRECT_ENGINE, "claude-code", "codex")


class BackendResult(BaseModel):
    """Text produced by a backend and how long it took."""

    text: str
    durationMs: float = Field(default=0.0, ge=0)


class BaseExecutionBackend(ABC):
    """Abstract execution backend contract."""

    name: str = "backend"

    @abstractmethod
    async def run(self, prompt: str, context: str | None = None) -> BackendResult:
        """Carry out ``prompt`` using ``context`` as auxiliary instructions."""


class EchoBackend(BaseExecutionBackend):
    """Deterministic backend for local development and tests."""

    name = "echo"

    async def run(self, prompt: str, context: str | None = None) -> BackendResult:
        parts = [part.strip() for part in (context or "", prompt) if part and part.strip()]
        return BackendResult(text="\n\n".join(parts))


def compose_prompt(prompt: str, context: str | None) -> str:
    if not context or not context.strip():
        return prompt
    return f"{context.strip()}\n\n---\n\nUser request: {prompt}"


class CommandLineBackend(BaseExecutionBackend):
    """Runs a coding-agent CLI as a child process and returns its stdout.

    When ``context_flag`` is set, the auxiliary context is passed through that
    flag (e.g. a system-prompt option); otherwise it is prepended to the prompt.
    """

    def __init__(
        self,
        name: str,
        command: Sequence[str],
        *,
        context_flag: str | None = None,
        timeout_seconds: float = 300.0,
    ) -> None:
        if not command:
            raise ValueError(f"backend '{name}' requires a command")
        self.name = name
        self._command = list(command)
        self._context_flag = context_flag
        self._timeout_seconds = timeout_seconds

    def build_args(self, prompt: str, context: str | None = None) -> list[str]:
        args = list(self._command)
        if context and self._context_flag:
            args.extend([self._context_flag, context])
            args.append(prompt)
        else:
            args.append(compose_prompt(prompt, context))
        return args

    async def run(self, prompt: str, context: str | None = None) -> BackendResult:
        started = perf_counter()
        args = self.build_args(prompt, context)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise BackendUnavailableError(
                f"{self.name} executable not found: {self._command[0]}"
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise BackendUnavailableError(
                f"{self.name} timed out after {self._timeout_seconds:g}s"
            ) from exc

        if process.returncode != 0:
            detail = stderr.decode(errors="ignore").strip() or f"exit code {process.returncode}"
            raise BackendUnavailableError(f"{self.name} failed: {detail}")

        duration_ms = (perf_counter() - started) * 1000
        logger.debug("backend_complete name=%s latency_ms=%.2f", self.name, duration_ms)
        return BackendResult(
            text=stdout.decode(errors="ignore").strip(),
            durationMs=round(duration_ms, 2),
        )


def build_default_backends(settings: Settings) -> dict[str, BaseExecutionBackend | None]:
    """Backends for the agent CLIs named by the built-in engine identifiers."""

    return {
        "claude-code": CommandLineBackend(
            "claude-code",
            [*shlex.split(settings.claude_code_command), "-p"],
            context_flag="--append-system-prompt",
            timeout_seconds=settings.backend_timeout_seconds,
        ),
        "codex": CommandLineBackend(
            "codex",
            [*shlex.split(settings.codex_command), "exec"],
            timeout_seconds=settings.backend_timeout_seconds,
        ),
    }
