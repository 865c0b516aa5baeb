"""
Core Module
===========

Core utilities, configuration, and exceptions for Storyboard Studio.
"""

from .config import Config, ProviderConfig, GenerationConfig, DefaultsConfig, get_config
from .exceptions import (
    StoryboardError,
    ConfigurationError,
    CapabilityUnavailableError,
    ProviderError,
    EnhancementError,
    RenderError,
    ValidationError,
    ResourceNotFoundError,
)
from .security import redact_api_key

__all__ = [
    # Configuration
    "Config",
    "ProviderConfig",
    "GenerationConfig",
    "DefaultsConfig",
    "get_config",
    # Exceptions
    "StoryboardError",
    "ConfigurationError",
    "CapabilityUnavailableError",
    "ProviderError",
    "EnhancementError",
    "RenderError",
    "ValidationError",
    "ResourceNotFoundError",
    # Security
    "redact_api_key",
]
