"""Per-call generation options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from castor.errors import validation_error

ThinkingLevel = Literal["low", "high"]
MediaResolution = str

_THINKING_LEVELS: frozenset[str] = frozenset({"low", "high"})

#: Budget sentinel asking the service to size reasoning dynamically.
DYNAMIC_THINKING_BUDGET = -1
#: Budget value that disables reasoning.
DISABLED_THINKING_BUDGET = 0


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling parameters. Only explicitly-set fields reach the wire."""

    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_output_tokens: int | None = None
    stop_sequences: tuple[str, ...] | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase payload, omitting unset fields."""
        wire: dict[str, Any] = {}
        if self.temperature is not None:
            wire["temperature"] = self.temperature
        if self.top_p is not None:
            wire["topP"] = self.top_p
        if self.top_k is not None:
            wire["topK"] = self.top_k
        if self.max_output_tokens is not None:
            wire["maxOutputTokens"] = self.max_output_tokens
        if self.stop_sequences:
            wire["stopSequences"] = list(self.stop_sequences)
        return wire


@dataclass(frozen=True)
class SafetySetting:
    """One harm-category threshold."""

    category: str
    threshold: str

    def to_wire(self) -> dict[str, str]:
        return {"category": self.category, "threshold": self.threshold}


@dataclass(frozen=True)
class ImageConfig:
    """Image-generation shape. Only explicitly-set fields reach the wire."""

    aspect_ratio: str | None = None
    image_size: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase payload, omitting unset fields."""
        wire: dict[str, Any] = {}
        if self.aspect_ratio is not None:
            wire["aspectRatio"] = self.aspect_ratio
        if self.image_size is not None:
            wire["imageSize"] = self.image_size
        return wire


@dataclass(frozen=True)
class ModelAdvancedConfig:
    """Model-specific overrides for reasoning, media and image output."""

    thinking_level: ThinkingLevel | None = None
    #: ``-1`` asks for a dynamic budget, ``0`` disables reasoning.
    thinking_budget: int | None = None
    media_resolution: MediaResolution | None = None
    image_config: ImageConfig | None = None
    #: Ask for the reasoning trace; honored only by models that support it.
    include_thoughts: bool = False

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if self.thinking_level is not None and self.thinking_level not in _THINKING_LEVELS:
            raise validation_error(
                f"thinking_level must be 'low' or 'high', got {self.thinking_level!r}",
                hint="Pass thinking_level='low' or thinking_level='high'.",
            )
        if self.thinking_budget is not None and (
            not isinstance(self.thinking_budget, int)
            or self.thinking_budget < DYNAMIC_THINKING_BUDGET
        ):
            raise validation_error(
                f"thinking_budget must be an integer >= -1, got {self.thinking_budget!r}",
                hint="Use -1 for a dynamic budget or 0 to disable reasoning.",
            )
