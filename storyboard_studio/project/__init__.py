"""
Project Module
==============

The storyboard's data: characters, scene panels, style settings, and the
in-memory store that owns them.
"""

from .character import Character, ReferenceImage
from .scene import Scene, SceneStatus
from .style import (
    ArtStyle,
    AspectRatio,
    GenerationSettings,
    DEFAULT_ART_STYLE,
    DEFAULT_ASPECT_RATIO,
)
from .store import ProjectStore

__all__ = [
    "Character",
    "ReferenceImage",
    "Scene",
    "SceneStatus",
    "ArtStyle",
    "AspectRatio",
    "GenerationSettings",
    "DEFAULT_ART_STYLE",
    "DEFAULT_ASPECT_RATIO",
    "ProjectStore",
]
