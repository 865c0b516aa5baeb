"""
Client Factory
==============

Factory for creating generation client instances.
"""

import logging
from typing import Optional, List, Dict, Type

from .base import BaseGenerationClient

logger = logging.getLogger(__name__)

# Registry of available clients
_CLIENTS: Dict[str, Type[BaseGenerationClient]] = {}


def register_client(name: str):
    """Decorator to register a client class."""
    def decorator(cls: Type[BaseGenerationClient]):
        _CLIENTS[name.lower()] = cls
        return cls
    return decorator


def get_client(
    name: str = "google",
    api_key: Optional[str] = None,
    **kwargs,
) -> BaseGenerationClient:
    """
    Get a generation client instance.

    Args:
        name: Client name (e.g., 'google')
        api_key: Optional API key (otherwise read from environment)
        **kwargs: Additional client-specific arguments

    Returns:
        Configured client instance

    Raises:
        ValueError: If client name is not recognized
    """
    name_lower = name.lower()

    if name_lower not in _CLIENTS:
        # Try to import the client module
        if name_lower == "google":
            from .google import GoogleGenerationClient  # noqa: F401
        else:
            raise ValueError(f"Unknown generation client: {name}")

    client_class = _CLIENTS.get(name_lower)
    if client_class is None:
        raise ValueError(f"Generation client '{name}' not registered")

    return client_class(api_key=api_key, **kwargs)


def get_client_from_config(config) -> BaseGenerationClient:
    """Create the client described by a Config's provider and generation sections."""
    return get_client(
        config.provider.name,
        api_key=config.provider.resolve_api_key(),
        base_url=config.provider.base_url,
        timeout=config.provider.timeout,
        enhance_model=config.generation.enhance_model,
        image_model=config.generation.image_model,
    )


def list_clients() -> List[str]:
    """
    List all available client names.

    Returns:
        List of client names
    """
    from . import google  # noqa: F401

    return list(_CLIENTS.keys())
