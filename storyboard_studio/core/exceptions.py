"""
Custom Exceptions
=================

Unified exception hierarchy for consistent error handling across the studio.
"""

from typing import Optional, Dict, Any


class StoryboardError(Exception):
    """Base exception for all Storyboard Studio errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


class ConfigurationError(StoryboardError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type
        super().__init__(message, details=details, **kwargs)


class CapabilityUnavailableError(StoryboardError):
    """The generation backend cannot be used (no credential configured)."""

    def __init__(
        self,
        message: str = "Generation capability unavailable: API key not configured.",
        provider: Optional[str] = None,
        env_key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if env_key:
            details["env_key"] = env_key
        super().__init__(message, recoverable=False, details=details, **kwargs)


class ProviderError(StoryboardError):
    """Provider/API-related errors."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if status_code:
            details["status_code"] = status_code
        if response_body:
            # Truncate large responses
            details["response_body"] = response_body[:500] if len(response_body) > 500 else response_body

        # Retrying is always a user action, but flag the transient ones
        recoverable = kwargs.pop("recoverable", status_code in (429, 500, 502, 503, 504) if status_code else False)
        super().__init__(message, recoverable=recoverable, details=details, **kwargs)


class EnhancementError(ProviderError):
    """Prompt enhancement failed or returned an empty result."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if model:
            details["model"] = model
        super().__init__(message, details=details, **kwargs)


class RenderError(ProviderError):
    """Image rendering failed or returned no image payload."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        prompt: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if model:
            details["model"] = model
        if prompt:
            # Truncate long prompts
            details["prompt"] = prompt[:200] if len(prompt) > 200 else prompt
        super().__init__(message, details=details, **kwargs)


class ValidationError(StoryboardError):
    """Input validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]
        if constraint:
            details["constraint"] = constraint
        super().__init__(message, details=details, **kwargs)


class ResourceNotFoundError(StoryboardError):
    """Resource not found errors."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, recoverable=False, details=details, **kwargs)
