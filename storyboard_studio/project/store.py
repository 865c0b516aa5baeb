"""
Project Store
=============

In-memory holder of a storyboard's characters and scenes.

Every operation is synchronous and total: an unknown id is a no-op rather
than an error, and changes are visible to the next read immediately.
"""

import logging
from typing import Optional, List, Dict, Any

from .character import Character, ReferenceImage
from .scene import Scene

logger = logging.getLogger(__name__)

# Changing any of these makes a scene's cached prompt and image obsolete
CONTENT_FIELDS = ("user_text", "character_ids")
GENERATED_FIELDS = ("final_prompt", "image_url", "error")


class ProjectStore:
    """
    Characters and scenes of one storyboard.

    Scenes reference characters by id; deleting a character leaves those ids
    in place and they are skipped when characters are resolved.
    """

    def __init__(self):
        self._characters: List[Character] = []
        self._scenes: List[Scene] = []

    @property
    def characters(self) -> List[Character]:
        return list(self._characters)

    @property
    def scenes(self) -> List[Scene]:
        return list(self._scenes)

    # -------------------------------------------------------------------------
    # Characters
    # -------------------------------------------------------------------------

    def add_character(
        self,
        name: str,
        description: str,
        reference_image: Optional[ReferenceImage] = None,
    ) -> Character:
        """Create a character and append it to the project."""
        character = Character(
            name=name,
            description=description,
            reference_image=reference_image,
        )
        self._characters.append(character)
        logger.info(f"Added character {character.id} ({name})")
        return character

    def get_character(self, character_id: str) -> Optional[Character]:
        for character in self._characters:
            if character.id == character_id:
                return character
        return None

    def update_character(self, character_id: str, **changes: Any) -> Optional[Character]:
        """
        Edit a character's name, description or reference image.

        Passing ``reference_image=None`` removes the image.
        """
        character = self.get_character(character_id)
        if not character:
            return None

        for key, value in changes.items():
            if key != "id" and hasattr(character, key):
                setattr(character, key, value)

        return character

    def delete_character(self, character_id: str) -> bool:
        """Remove a character. Scenes keep the now-dangling id."""
        before = len(self._characters)
        self._characters = [c for c in self._characters if c.id != character_id]
        deleted = len(self._characters) < before
        if deleted:
            logger.info(f"Deleted character {character_id}")
        return deleted

    # -------------------------------------------------------------------------
    # Scenes
    # -------------------------------------------------------------------------

    def add_scene(self, user_text: str, character_ids: Optional[List[str]] = None) -> Scene:
        """Append a new panel at the end of the storyboard."""
        scene = Scene(
            panel_number=len(self._scenes) + 1,
            user_text=user_text,
            character_ids=list(character_ids or []),
        )
        self._scenes.append(scene)
        logger.info(f"Added scene {scene.id} as panel {scene.panel_number}")
        return scene

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        for scene in self._scenes:
            if scene.id == scene_id:
                return scene
        return None

    def update_scene(self, scene_id: str, **changes: Any) -> Optional[Scene]:
        """
        Apply a partial update to a scene.

        Changing ``user_text`` or ``character_ids`` also clears the cached
        prompt, image and error so the next generation starts from scratch.
        """
        scene = self.get_scene(scene_id)
        if not scene:
            return None

        content_changed = any(key in changes for key in CONTENT_FIELDS)

        for key, value in changes.items():
            if key in ("id", "panel_number", "revision") or not hasattr(scene, key):
                continue
            if key == "character_ids":
                value = list(value or [])
            setattr(scene, key, value)

        if content_changed:
            for key in GENERATED_FIELDS:
                setattr(scene, key, None)
            scene.revision += 1
            logger.debug(f"Scene {scene_id} content edited, revision {scene.revision}")

        return scene

    def edit_scene(
        self,
        scene_id: str,
        user_text: str,
        character_ids: Optional[List[str]] = None,
    ) -> Optional[Scene]:
        """Replace a scene's text and characters, invalidating its results."""
        return self.update_scene(
            scene_id,
            user_text=user_text,
            character_ids=list(character_ids or []),
        )

    def delete_scene(self, scene_id: str) -> bool:
        """Remove a scene and renumber the rest 1..N in list order."""
        before = len(self._scenes)
        self._scenes = [s for s in self._scenes if s.id != scene_id]
        if len(self._scenes) == before:
            return False

        for index, scene in enumerate(self._scenes):
            scene.panel_number = index + 1

        logger.info(f"Deleted scene {scene_id}, {len(self._scenes)} panels remain")
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def resolve_characters(self, scene: Scene) -> List[Character]:
        """Characters of a scene in the scene's order, skipping unknown ids."""
        resolved = []
        for character_id in scene.character_ids:
            character = self.get_character(character_id)
            if character:
                resolved.append(character)
        return resolved

    def pending_scenes(self) -> List[Scene]:
        """Scenes with no image, no error and no generation in flight."""
        return [s for s in self._scenes if s.is_pending]

    def clear(self) -> None:
        """Drop every character and scene."""
        self._characters = []
        self._scenes = []
        logger.info("Cleared project")

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the project for display or debugging."""
        return {
            "characters": [c.to_dict() for c in self._characters],
            "scenes": [s.to_dict() for s in self._scenes],
        }
