"""Castor: a streaming-aware protocol driver for Gemini-style completion APIs.

Public API:
    - send_message_with_thoughts(): Streaming call, answer and reasoning kept apart
    - stream_content(): Pull-based streaming deltas
    - send_message(): Plain-text streaming call
    - generate_content(): Single-shot call
    - test_connection(): Connectivity probe that never raises
    - ApiConfig: Endpoint, key and model for one call
"""

from __future__ import annotations

import logging

from castor.capabilities import (
    BudgetDialect,
    CapabilityDescriptor,
    CapabilityResolver,
    LevelDialect,
    NoReasoning,
    default_capabilities,
)
from castor.config import ApiConfig
from castor.endpoint import EndpointValidation, build_request_url, validate_endpoint
from castor.errors import CastorError, DriverError, ErrorKind
from castor.options import (
    GenerationConfig,
    ImageConfig,
    ModelAdvancedConfig,
    SafetySetting,
)
from castor.request import apply_media_resolution, build_request_body
from castor.stream import ContentDelta, FrameDecoder, extract_content
from castor.transport import (
    ChatResult,
    ConnectionResult,
    StreamDelta,
    generate_content,
    send_message,
    send_message_with_thoughts,
    stream_content,
    test_connection,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("castor-ai")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("castor").addHandler(logging.NullHandler())

__all__ = [
    "ApiConfig",
    "BudgetDialect",
    "CapabilityDescriptor",
    "CapabilityResolver",
    "CastorError",
    "ChatResult",
    "ConnectionResult",
    "ContentDelta",
    "DriverError",
    "EndpointValidation",
    "ErrorKind",
    "FrameDecoder",
    "GenerationConfig",
    "ImageConfig",
    "LevelDialect",
    "ModelAdvancedConfig",
    "NoReasoning",
    "SafetySetting",
    "StreamDelta",
    "apply_media_resolution",
    "build_request_body",
    "build_request_url",
    "default_capabilities",
    "extract_content",
    "generate_content",
    "send_message",
    "send_message_with_thoughts",
    "stream_content",
    "test_connection",
    "validate_endpoint",
]
