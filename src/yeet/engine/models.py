"""Request and result records for a single generation call."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CommitContext(BaseModel):
    """Everything sent to the model for one generation."""

    diff: str = ""
    branch: str = ""
    recent_commits: str = ""
    status: str = ""
    system_prompt_override: str = ""
    max_tokens_override: int = Field(default=0, ge=0)


class Usage(BaseModel):
    """Token accounting for one call. ``input_tokens == 0`` means "not reported"."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)

    @property
    def reported(self) -> bool:
        return self.input_tokens > 0


class GenerationResult(BaseModel):
    """Final text plus usage, returned by every adapter."""

    model_config = ConfigDict(frozen=True)

    text: str
    usage: Usage


class StreamState(str, Enum):
    """Observable states of a streaming session."""

    OPENING = "opening"
    STREAMING = "streaming"
    CLOSED = "closed"
    ABORTED = "aborted"
