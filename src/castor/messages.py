"""Conversation-turn helpers.

Build wire-shaped turns from text plus pre-encoded attachments. Text is passed
through untouched; attachment validation and base64 encoding happen upstream.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from castor.types import ConversationTurn, Part

Role = Literal["user", "model"]


@dataclass(frozen=True)
class Attachment:
    """A pre-encoded media payload."""

    mime_type: str
    #: Base64-encoded bytes.
    data: str


def build_parts(text: str, attachments: Sequence[Attachment] | None = None) -> list[Part]:
    """Return the text part (if any) followed by one inline-data part per attachment."""
    parts: list[Part] = []
    if text:
        parts.append({"text": text})
    for attachment in attachments or ():
        parts.append(
            {"inlineData": {"mimeType": attachment.mime_type, "data": attachment.data}}
        )
    return parts


def message_to_turn(
    role: Role,
    text: str,
    attachments: Sequence[Attachment] | None = None,
) -> ConversationTurn:
    """Build one conversation turn."""
    return {"role": role, "parts": build_parts(text, attachments)}


def conversation_to_turns(
    messages: Iterable[tuple[Role, str] | tuple[Role, str, Sequence[Attachment]]],
) -> list[ConversationTurn]:
    """Convert ``(role, text[, attachments])`` tuples into turns, preserving order."""
    turns: list[ConversationTurn] = []
    for message in messages:
        role, text, *rest = message
        attachments = rest[0] if rest else None
        turns.append(message_to_turn(role, text, attachments))
    return turns


def extract_text_from_parts(parts: Iterable[Any]) -> str:
    """Concatenate the text of every text part."""
    return "".join(part["text"] for part in parts if "text" in part)


def count_inline_data_parts(parts: Iterable[Any]) -> int:
    """Count attachment parts."""
    return sum(1 for part in parts if "inlineData" in part)
