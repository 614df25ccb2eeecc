"""Request body construction.

Everything here is pure: the same inputs always produce a structurally
identical body, and caller-owned turns are never mutated.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Any
import warnings

from castor.capabilities import (
    BudgetDialect,
    LevelDialect,
    NoReasoning,
    default_capabilities,
)

if TYPE_CHECKING:
    from castor.capabilities import CapabilityResolver
    from castor.options import (
        GenerationConfig,
        MediaResolution,
        ModelAdvancedConfig,
        SafetySetting,
        ThinkingLevel,
    )
    from castor.types import ConversationTurn

log = logging.getLogger(__name__)


def apply_media_resolution(
    contents: Sequence[ConversationTurn],
    media_resolution: MediaResolution | None,
) -> Sequence[ConversationTurn]:
    """Tag every inline-data part with *media_resolution*.

    Without a tag the input is returned as-is. With one, new turn and part
    dicts are built; text parts are reused untouched.
    """
    if not media_resolution:
        return contents

    tagged: list[ConversationTurn] = []
    for turn in contents:
        parts: list[Any] = []
        for part in turn["parts"]:
            if "inlineData" in part:
                inline = dict(part["inlineData"])  # type: ignore[typeddict-item]
                inline["mediaResolution"] = media_resolution
                parts.append({"inlineData": inline})
            else:
                parts.append(part)
        tagged.append({**turn, "parts": parts})
    return tagged


def build_reasoning_config(
    model_id: str,
    advanced: ModelAdvancedConfig | None = None,
    resolver: CapabilityResolver = default_capabilities,
) -> dict[str, Any] | None:
    """Build ``thinkingConfig`` for *model_id*, or None when unsupported.

    The model's dialect is resolved once. Level models get ``thinkingLevel``
    (override or the dialect default); budget models get ``thinkingBudget``
    (override or the descriptor default). ``includeThoughts`` is set only when
    the model supports a trace and the caller asked for one.
    """
    capabilities = resolver(model_id)
    dialect = capabilities.dialect

    config: dict[str, Any] = {}
    match dialect:
        case NoReasoning():
            return None
        case LevelDialect(default=default_level):
            level = advanced.thinking_level if advanced else None
            config["thinkingLevel"] = level or default_level
        case BudgetDialect(default_budget=default_budget):
            budget = advanced.thinking_budget if advanced else None
            config["thinkingBudget"] = default_budget if budget is None else budget

    if capabilities.supports_trace and advanced is not None and advanced.include_thoughts:
        config["includeThoughts"] = True
    return config


def legacy_reasoning_config(thinking_level: ThinkingLevel) -> dict[str, Any]:
    """Level-only ``thinkingConfig`` for callers that pass no model id.

    Deprecated: pass ``model_id`` to :func:`build_request_body` so the
    model's own dialect is used.
    """
    warnings.warn(
        "Building thinkingConfig without a model id is deprecated; "
        "pass model_id so the model's reasoning dialect is respected.",
        DeprecationWarning,
        stacklevel=3,
    )
    return {"thinkingLevel": thinking_level}


def build_request_body(
    contents: Sequence[ConversationTurn],
    generation_config: GenerationConfig | None = None,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: str | None = None,
    advanced: ModelAdvancedConfig | None = None,
    model_id: str | None = None,
    resolver: CapabilityResolver = default_capabilities,
) -> dict[str, Any]:
    """Assemble the JSON request body.

    Optional keys appear only when they carry a value: ``generationConfig``
    needs at least one set field, ``safetySettings`` at least one entry,
    ``systemInstruction`` non-blank text, ``imageConfig`` at least one set
    field.

    Args:
        contents: Conversation history, oldest first.
        generation_config: Sampling parameters.
        safety_settings: Harm-category thresholds.
        system_instruction: Model-level instruction text.
        advanced: Reasoning, media-resolution and image overrides.
        model_id: Model whose capabilities drive ``thinkingConfig``. Without
            it only the deprecated level-only path is available.
        resolver: Capability lookup for *model_id*.

    Returns:
        The request body as a JSON-ready dict.
    """
    media_resolution = advanced.media_resolution if advanced else None
    body: dict[str, Any] = {
        "contents": list(apply_media_resolution(contents, media_resolution)),
    }

    if generation_config is not None:
        wire_config = generation_config.to_wire()
        if wire_config:
            body["generationConfig"] = wire_config

    if safety_settings:
        body["safetySettings"] = [s.to_wire() for s in safety_settings]

    if system_instruction and system_instruction.strip():
        body["systemInstruction"] = {
            "role": "user",
            "parts": [{"text": system_instruction}],
        }

    if model_id:
        thinking_config = build_reasoning_config(model_id, advanced, resolver)
        if thinking_config is not None:
            body["thinkingConfig"] = thinking_config
    elif advanced is not None and advanced.thinking_level:
        body["thinkingConfig"] = legacy_reasoning_config(advanced.thinking_level)

    if advanced is not None and advanced.image_config is not None:
        image_config = advanced.image_config.to_wire()
        if image_config:
            body["imageConfig"] = image_config

    log.debug("Built request body with keys %s", sorted(body))
    return body
