"""Image-generation hints embedded in a prompt.

A prompt such as ``"a lighthouse at dusk, 16:9, 2k"`` carries an aspect ratio
and an output size. Hints found in the prompt win over configured defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from castor.options import ImageConfig

SUPPORTED_ASPECT_RATIOS: tuple[str, ...] = (
    "1:1",
    "9:16",
    "16:9",
    "3:4",
    "4:3",
    "3:2",
    "2:3",
    "5:4",
    "4:5",
    "21:9",
)
SUPPORTED_IMAGE_SIZES: tuple[str, ...] = ("1K", "2K", "4K")

# ASCII and full-width commas.
_DELIMITER_RE = re.compile(r"[,，]")


@dataclass(frozen=True)
class PromptImageHints:
    """Aspect ratio and size found in a prompt; None when absent."""

    aspect_ratio: str | None = None
    image_size: str | None = None


def parse_image_prompt(prompt: str) -> PromptImageHints:
    """Scan comma-separated prompt segments for image hints.

    The first supported aspect ratio and the first supported size win. Sizes
    match case-insensitively and are normalized to upper case.
    """
    aspect_ratio: str | None = None
    image_size: str | None = None
    if not prompt or not prompt.strip():
        return PromptImageHints()

    for segment in _DELIMITER_RE.split(prompt):
        candidate = segment.strip()
        if aspect_ratio is None and candidate in SUPPORTED_ASPECT_RATIOS:
            aspect_ratio = candidate
        if image_size is None and candidate.upper() in SUPPORTED_IMAGE_SIZES:
            image_size = candidate.upper()
        if aspect_ratio is not None and image_size is not None:
            break

    return PromptImageHints(aspect_ratio=aspect_ratio, image_size=image_size)


def merge_image_config(hints: PromptImageHints, settings: ImageConfig) -> ImageConfig:
    """Combine prompt hints with configured defaults; hints take precedence."""
    aspect_ratio = hints.aspect_ratio
    if aspect_ratio is None:
        aspect_ratio = settings.aspect_ratio
    image_size = hints.image_size
    if image_size is None:
        image_size = settings.image_size
    return ImageConfig(aspect_ratio=aspect_ratio, image_size=image_size)
