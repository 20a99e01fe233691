"""Error taxonomy for registration, routing and delegated execution."""


class DuplicateSkillName(ValueError):
    """Raised when a skill name is already present in a registry."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"skill '{name}' is already registered; remove it first to replace it"
        )
        self.name = name


class NoSkillMatched(LookupError):
    """Raised by the throwing handle variant when nothing routes."""

    def __init__(self, utterance: str) -> None:
        super().__init__(f'No skill matched input: "{utterance}"')
        self.utterance = utterance


class BackendUnavailableError(RuntimeError):
    """Raised by execution backends that cannot serve a request."""
