"""Wire types: conversation turns (requests) and response frames.

Turns are plain dicts in wire shape so callers can hand over history they
already hold. Response frames are validated with pydantic so a payload of the
wrong shape fails loudly instead of yielding silently-empty text.
"""

from __future__ import annotations

from typing import Any, Literal, NotRequired, TypedDict

from pydantic import BaseModel, ConfigDict, Field


class InlineData(TypedDict):
    """Base64-encoded media attached to a turn."""

    mimeType: str
    data: str
    mediaResolution: NotRequired[str]


class TextPart(TypedDict):
    text: str


class InlineDataPart(TypedDict):
    inlineData: InlineData


Part = TextPart | InlineDataPart


class ConversationTurn(TypedDict):
    """One history entry in wire shape."""

    role: Literal["user", "model"]
    parts: list[Part]


class _WireModel(BaseModel):
    # Unknown keys (finishReason, safetyRatings, ...) are kept, not rejected.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class FramePart(_WireModel):
    text: str | None = None
    thought: bool | None = None


class FrameContent(_WireModel):
    role: str | None = None
    parts: list[FramePart] | None = None


class Candidate(_WireModel):
    content: FrameContent | None = None
    finish_reason: str | None = Field(default=None, alias="finishReason")


class UsageMetadata(_WireModel):
    prompt_token_count: int | None = Field(default=None, alias="promptTokenCount")
    candidates_token_count: int | None = Field(default=None, alias="candidatesTokenCount")
    total_token_count: int | None = Field(default=None, alias="totalTokenCount")
    thoughts_token_count: int | None = Field(default=None, alias="thoughtsTokenCount")


class StreamFrame(_WireModel):
    """One decoded ``data:`` payload, or a whole non-streaming response."""

    candidates: list[Candidate] | None = None
    usage_metadata: UsageMetadata | None = Field(default=None, alias="usageMetadata")

    @classmethod
    def parse(cls, payload: Any) -> StreamFrame:
        """Validate a decoded JSON payload."""
        return cls.model_validate(payload)
