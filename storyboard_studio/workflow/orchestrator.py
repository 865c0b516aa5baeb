"""
Scene Orchestrator
==================

Drives the two-step generation of storyboard panels: enhance the scene into
a detailed prompt, then render that prompt into an image, writing every
state transition back to the project store.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from ..api.base import BaseGenerationClient
from ..core.config import GenerationConfig
from ..core.exceptions import CapabilityUnavailableError, EnhancementError, StoryboardError
from ..core.security import redact_api_key
from ..project.scene import Scene
from ..project.store import ProjectStore
from ..project.style import GenerationSettings
from .composer import build_basic_prompt, build_enhancement_parts
from .validator import validate_prompt

logger = logging.getLogger(__name__)

NOTHING_TO_DO = "No scenes to generate or all scenes are already processed/generating."
BATCH_ALREADY_RUNNING = "A batch generation is already running."


@dataclass
class BatchReport:
    """Outcome of a batch run over the pending scenes."""

    attempted: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def nothing_to_do(self) -> bool:
        return not self.attempted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "message": self.message,
        }


class SceneOrchestrator:
    """
    Generates images for the scenes of a project.

    Handles:
    - Prompt caching (a scene's final prompt is reused until it is edited)
    - Falling back to the basic prompt when enhancement fails
    - Converting every remote failure into the scene's error
    - Strictly sequential batch generation
    """

    def __init__(
        self,
        store: ProjectStore,
        client: BaseGenerationClient,
        settings: Optional[GenerationSettings] = None,
        config: Optional[GenerationConfig] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Project holding the scenes and characters
            client: Remote generation backend
            settings: Art style and aspect ratio for new generations
            config: Model selection and stale-result handling
        """
        self.store = store
        self.client = client
        self.settings = settings or GenerationSettings()
        self.config = config or GenerationConfig()

        self._batch_running = False

    @property
    def is_batch_running(self) -> bool:
        return self._batch_running

    # -------------------------------------------------------------------------
    # Single Scene
    # -------------------------------------------------------------------------

    async def generate_scene(
        self,
        scene_id: str,
        override_prompt: Optional[str] = None,
    ) -> Optional[Scene]:
        """
        Generate (or regenerate) the image for one scene.

        The prompt is ``override_prompt`` if given, else the scene's cached
        final prompt, else a freshly enhanced one. Failures never escape:
        they end up in ``scene.error`` with ``generating`` cleared.

        Args:
            scene_id: Scene to generate
            override_prompt: Prompt to use as-is, skipping enhancement

        Returns:
            The scene after generation settled, or None if it doesn't exist
        """
        scene = self.store.get_scene(scene_id)
        if not scene:
            logger.debug(f"generate_scene: unknown scene {scene_id}")
            return None

        if not self.client.is_available():
            error = CapabilityUnavailableError(
                provider=self.client.provider_name,
                env_key=self.client.env_key_name,
            )
            logger.warning(f"Panel {scene.panel_number}: {error.message}")
            self.store.update_scene(scene_id, generating=False, error=error.message)
            return scene

        revision = scene.revision
        self.store.update_scene(scene_id, generating=True, error=None, image_url=None)
        logger.info(f"Generating panel {scene.panel_number} (scene {scene_id})")

        prompt = override_prompt if override_prompt is not None else scene.final_prompt

        if override_prompt is None and not prompt:
            characters = self.store.resolve_characters(scene)
            parts = build_enhancement_parts(scene, characters, self.settings)
            try:
                prompt = await self.client.enhance_prompt(parts, model=self.config.enhance_model)
                if not prompt or not prompt.strip():
                    raise EnhancementError(
                        "Failed to generate enhanced prompt: model returned an empty prompt",
                        provider=self.client.provider_name,
                        model=self.config.enhance_model,
                    )
            except Exception as e:
                message = self._error_message(e)
                logger.error(f"Panel {scene.panel_number}: prompt enhancement failed: {message}")
                fallback = build_basic_prompt(scene, characters, self.settings)
                self._settle(scene_id, revision, final_prompt=fallback, error=message)
                return self.store.get_scene(scene_id)

            if not self._is_stale(scene_id, revision):
                self.store.update_scene(scene_id, final_prompt=prompt)

        try:
            image_url = await self.client.render_image(prompt, self.settings.aspect_ratio.value)
        except Exception as e:
            message = self._error_message(e)
            logger.error(f"Panel {scene.panel_number}: image rendering failed: {message}")
            self._settle(scene_id, revision, error=message)
            return self.store.get_scene(scene_id)

        logger.info(f"Panel {scene.panel_number} generated")
        self._settle(scene_id, revision, image_url=image_url, error=None)
        return self.store.get_scene(scene_id)

    async def regenerate_with_prompt(self, scene_id: str, prompt: str) -> Optional[Scene]:
        """
        Regenerate a scene from a user-edited prompt.

        The prompt becomes the scene's final prompt and enhancement is skipped.
        Raises ValidationError for a blank prompt.
        """
        prompt = validate_prompt(prompt)
        if not self.store.update_scene(scene_id, final_prompt=prompt):
            return None
        return await self.generate_scene(scene_id, override_prompt=prompt)

    def prompt_for_editing(self, scene_id: str) -> Optional[str]:
        """
        The prompt a user should start editing from.

        The cached final prompt if there is one, otherwise the basic prompt.
        """
        scene = self.store.get_scene(scene_id)
        if not scene:
            return None
        if scene.final_prompt:
            return scene.final_prompt
        characters = self.store.resolve_characters(scene)
        return build_basic_prompt(scene, characters, self.settings)

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    async def generate_all_pending(self) -> BatchReport:
        """
        Generate every pending scene, one at a time.

        Pending means no image, no error and not generating. A failed scene
        does not stop the batch; it keeps its error and is left out of later
        batches until edited or retried by hand.
        """
        report = BatchReport()

        if self._batch_running:
            report.message = BATCH_ALREADY_RUNNING
            return report

        if not self.client.is_available():
            report.message = CapabilityUnavailableError().message
            logger.warning(report.message)
            return report

        candidates = self.store.pending_scenes()
        if not candidates:
            report.message = NOTHING_TO_DO
            logger.info(report.message)
            return report

        logger.info(f"Batch generating {len(candidates)} panels")
        self._batch_running = True
        try:
            for candidate in candidates:
                scene = await self.generate_scene(candidate.id)
                if scene is None:
                    report.skipped.append(candidate.id)
                    continue

                report.attempted.append(candidate.id)
                if scene.error or not scene.image_url:
                    report.failed.append(candidate.id)
                else:
                    report.succeeded.append(candidate.id)
        finally:
            self._batch_running = False

        report.message = (
            f"Generated {len(report.succeeded)} of {len(report.attempted)} panels"
            + (f", {len(report.failed)} failed" if report.failed else "")
        )
        logger.info(report.message)
        return report

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _is_stale(self, scene_id: str, revision: int) -> bool:
        """True if results of an attempt at ``revision`` must be dropped."""
        if not self.config.discard_stale_results:
            return False
        scene = self.store.get_scene(scene_id)
        return scene is not None and scene.revision != revision

    def _settle(self, scene_id: str, revision: int, **outcome: Any) -> None:
        """Finish an attempt: clear ``generating`` and write its outcome."""
        if self._is_stale(scene_id, revision):
            logger.info(f"Scene {scene_id} was edited during generation, discarding result")
            self.store.update_scene(scene_id, generating=False)
            return
        self.store.update_scene(scene_id, generating=False, **outcome)

    @staticmethod
    def _error_message(error: Exception) -> str:
        if isinstance(error, StoryboardError):
            message = error.message
        else:
            message = str(error) or f"Unknown error during generation process ({error.__class__.__name__})"
        return redact_api_key(message)
