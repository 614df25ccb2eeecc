"""Per-model capability descriptors.

The driver consumes a :data:`CapabilityResolver`; any callable mapping a model
id to a :class:`CapabilityDescriptor` works. :func:`default_capabilities` is
the built-in table used when callers do not supply their own.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from castor.options import DYNAMIC_THINKING_BUDGET


@dataclass(frozen=True)
class NoReasoning:
    """The model accepts no reasoning controls."""


@dataclass(frozen=True)
class LevelDialect:
    """Reasoning controlled by a qualitative level."""

    default: Literal["low", "high"] = "high"


@dataclass(frozen=True)
class BudgetDialect:
    """Reasoning controlled by a token budget."""

    default_budget: int = DYNAMIC_THINKING_BUDGET


ReasoningDialect = NoReasoning | LevelDialect | BudgetDialect


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Optional request features a model accepts."""

    dialect: ReasoningDialect = field(default_factory=NoReasoning)
    supports_trace: bool = False
    supports_media_resolution: bool = False
    supports_image_generation: bool = False


CapabilityResolver = Callable[[str], CapabilityDescriptor]

# Ordered: first matching prefix wins.
_CAPABILITY_TABLE: tuple[tuple[str, CapabilityDescriptor], ...] = (
    (
        "gemini-3-pro-image",
        CapabilityDescriptor(
            dialect=LevelDialect(),
            supports_media_resolution=True,
            supports_image_generation=True,
        ),
    ),
    (
        "gemini-3",
        CapabilityDescriptor(
            dialect=LevelDialect(),
            supports_trace=True,
            supports_media_resolution=True,
        ),
    ),
    (
        "gemini-2.5-flash-image",
        CapabilityDescriptor(supports_image_generation=True),
    ),
    (
        "gemini-2.5-pro",
        CapabilityDescriptor(dialect=BudgetDialect(), supports_trace=True),
    ),
    (
        "gemini-2.5-flash",
        CapabilityDescriptor(dialect=BudgetDialect(), supports_trace=True),
    ),
)

_NO_CAPABILITIES = CapabilityDescriptor()


def default_capabilities(model_id: str) -> CapabilityDescriptor:
    """Look up a model in the built-in prefix table.

    Unknown models get a descriptor with no optional features, so the request
    builder never sends reasoning controls a model may reject.
    """
    for prefix, descriptor in _CAPABILITY_TABLE:
        if model_id.startswith(prefix):
            return descriptor
    return _NO_CAPABILITIES
