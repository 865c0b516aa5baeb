"""
Scene Models
============

A scene is one storyboard panel: the user's text, the characters in it, and
the state of its generated prompt and image.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

from .character import new_id

logger = logging.getLogger(__name__)


class SceneStatus(Enum):
    """Status of a scene, derived from its fields."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Scene:
    """
    A single storyboard panel.

    ``final_prompt`` caches the prompt sent to the renderer; it is reused by
    later generations until the scene content is edited. While
    ``generating`` is set, ``image_url`` and ``error`` are stale.
    """

    # Identity
    id: str = field(default_factory=new_id)
    panel_number: int = 1

    # Content
    user_text: str = ""
    character_ids: List[str] = field(default_factory=list)

    # Generation state
    final_prompt: Optional[str] = None
    image_url: Optional[str] = None
    generating: bool = False
    error: Optional[str] = None

    # Bumped on every content edit
    revision: int = 0

    @property
    def status(self) -> SceneStatus:
        if self.generating:
            return SceneStatus.GENERATING
        if self.error:
            return SceneStatus.FAILED
        if self.image_url:
            return SceneStatus.COMPLETED
        return SceneStatus.PENDING

    @property
    def is_pending(self) -> bool:
        """True when the scene is eligible for batch generation."""
        return not self.image_url and not self.generating and not self.error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "panel_number": self.panel_number,
            "user_text": self.user_text,
            "character_ids": list(self.character_ids),
            "final_prompt": self.final_prompt,
            "image_url": self.image_url,
            "generating": self.generating,
            "error": self.error,
            "status": self.status.value,
        }
