"""
Configuration System
====================

Centralized, validated configuration management with typed dataclasses.
"""

import os
import re
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ProviderConfig:
    """Remote generation backend settings."""

    name: str = "google"
    api_key: Optional[str] = None
    api_key_env: str = "GOOGLE_API_KEY"
    base_url: Optional[str] = None
    timeout: int = 120

    VALID_PROVIDERS = {"google"}

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.name not in self.VALID_PROVIDERS:
            raise ConfigurationError(
                f"Invalid provider: {self.name}",
                config_key="provider.name",
            )
        if not 1 <= self.timeout <= 600:
            raise ConfigurationError(
                f"timeout must be 1-600 seconds, got {self.timeout}",
                config_key="provider.timeout",
            )

    def resolve_api_key(self) -> Optional[str]:
        """Explicit key first, then the configured environment variable."""
        return self.api_key or os.getenv(self.api_key_env) or None


@dataclass
class GenerationConfig:
    """Model selection and orchestration behaviour."""

    enhance_model: str = "gemini-2.5-flash"
    image_model: str = "imagen-3.0-generate-002"

    # Drop results of attempts started before the scene was edited
    discard_stale_results: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.enhance_model:
            raise ConfigurationError(
                "enhance_model must not be empty",
                config_key="generation.enhance_model",
            )
        if not self.image_model:
            raise ConfigurationError(
                "image_model must not be empty",
                config_key="generation.image_model",
            )


@dataclass
class DefaultsConfig:
    """Initial style and aspect ratio for a new project."""

    art_style: str = "photorealistic"
    aspect_ratio: str = "16:9"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate against the known style and ratio identifiers."""
        from ..project.style import ArtStyle, AspectRatio

        if self.art_style not in {s.value for s in ArtStyle}:
            raise ConfigurationError(
                f"Invalid art style: {self.art_style}",
                config_key="defaults.art_style",
            )
        if self.aspect_ratio not in {r.value for r in AspectRatio}:
            raise ConfigurationError(
                f"Invalid aspect ratio: {self.aspect_ratio}",
                config_key="defaults.aspect_ratio",
            )


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class Config:
    """
    Main configuration container with validation and loading.

    Provides a unified interface to all configuration settings with:
    - Type-safe access to configuration values
    - Validation on load and modification
    - Environment variable interpolation
    - Sensible defaults for all values
    """

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from file with environment variable interpolation.

        Args:
            path: Path to a YAML config file, searched before the defaults

        Returns:
            Validated Config instance
        """
        search_paths = [
            Path("./config/defaults.yaml"),
            Path("./defaults.yaml"),
            Path.home() / ".storyboard-studio" / "config.yaml",
        ]

        if path:
            search_paths.insert(0, Path(path))

        config_data = {}

        for search_path in search_paths:
            if search_path.exists():
                logger.info(f"Loading config from: {search_path}")
                try:
                    with open(search_path, "r") as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid YAML in config file: {e}",
                        config_key=str(search_path),
                    )
        else:
            logger.info("No config file found, using defaults")

        config_data = cls._interpolate_env_vars(config_data)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary with validation."""
        try:
            return cls(
                provider=ProviderConfig(**(data.get("provider") or {})),
                generation=GenerationConfig(**(data.get("generation") or {})),
                defaults=DefaultsConfig(**(data.get("defaults") or {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def _interpolate_env_vars(data: Any) -> Any:
        """Recursively interpolate ${VAR} patterns with environment variables."""
        if isinstance(data, str):
            # Handle ${VAR} and ${VAR:-default} patterns
            pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ""
                return os.environ.get(var_name, default)

            return re.sub(pattern, replace, data)
        elif isinstance(data, dict):
            return {k: Config._interpolate_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [Config._interpolate_env_vars(item) for item in data]
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary, without the API key."""
        result = {}
        for section in ["provider", "generation", "defaults"]:
            result[section] = asdict(getattr(self, section))
        if result["provider"].get("api_key"):
            result["provider"]["api_key"] = "***REDACTED***"
        return result


# =============================================================================
# Convenience Functions
# =============================================================================


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance (lazily loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = Config.load()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload on next access)."""
    global _global_config
    _global_config = None
