"""Request contracts for the skill routing API."""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RunRequest(BaseModel):
    """Free-text prompt to route, plus opaque caller metadata."""

    prompt: str = Field(min_length=1, max_length=3000)
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("prompt")
    @classmethod
    def normalize_prompt(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("prompt cannot be empty")
        return normalized
