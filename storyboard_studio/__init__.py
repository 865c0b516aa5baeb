"""
Storyboard Studio
=================

Storyboard authoring core: define characters and scene panels, then have
each panel turned into an AI-generated image.

Features:
- Characters with optional reference images for visual consistency
- Two-step generation: Gemini prompt enhancement, then Imagen rendering
- Prompt caching per panel, with a basic fallback prompt when enhancement fails
- Editable prompts and strictly sequential batch generation

Quick Start:
    import asyncio
    from storyboard_studio import ProjectStore, SceneOrchestrator, GenerationSettings, get_client

    store = ProjectStore()
    ada = store.add_character("Ada", "tall woman in a red coat")
    store.add_scene("Ada enters a dimly lit room", [ada.id])

    orchestrator = SceneOrchestrator(
        store,
        get_client("google"),
        GenerationSettings(art_style="noir", aspect_ratio="4:3"),
    )
    report = asyncio.run(orchestrator.generate_all_pending())
"""

__version__ = "0.1.0"

# Project data
from .project import (
    Character,
    ReferenceImage,
    Scene,
    SceneStatus,
    ArtStyle,
    AspectRatio,
    GenerationSettings,
    ProjectStore,
)

# Generation
from .workflow import SceneOrchestrator, BatchReport, build_basic_prompt, build_enhancement_parts
from .api import BaseGenerationClient, get_client, get_client_from_config, list_clients

# Core Utilities
from .core.config import Config, get_config
from .core.exceptions import (
    StoryboardError,
    ConfigurationError,
    CapabilityUnavailableError,
    ProviderError,
    EnhancementError,
    RenderError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",

    # Project
    "Character",
    "ReferenceImage",
    "Scene",
    "SceneStatus",
    "ArtStyle",
    "AspectRatio",
    "GenerationSettings",
    "ProjectStore",

    # Generation
    "SceneOrchestrator",
    "BatchReport",
    "build_basic_prompt",
    "build_enhancement_parts",
    "BaseGenerationClient",
    "get_client",
    "get_client_from_config",
    "list_clients",

    # Core
    "Config",
    "get_config",

    # Exceptions
    "StoryboardError",
    "ConfigurationError",
    "CapabilityUnavailableError",
    "ProviderError",
    "EnhancementError",
    "RenderError",
    "ValidationError",
]
