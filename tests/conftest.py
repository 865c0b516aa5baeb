import asyncio
import time
from typing import Any, Dict, List, Optional

import pytest

from storyboard_studio.api.base import BaseGenerationClient, Part
from storyboard_studio.core.exceptions import EnhancementError, RenderError


class StubClient(BaseGenerationClient):
    """In-memory backend that scripts enhancement and render outcomes."""

    def __init__(
        self,
        enhanced: Any = "enhanced prompt",
        images: Any = "IMAGEBYTES",
        api_key: Optional[str] = "test-key",
        delay: float = 0.0,
    ):
        # A list scripts one outcome per call; an Exception instance is raised
        self.enhanced = enhanced
        self.images = images
        self.delay = delay
        self.enhance_calls: List[Dict[str, Any]] = []
        self.render_calls: List[Dict[str, Any]] = []
        self.intervals: List[tuple] = []
        super().__init__(api_key=api_key)

    @property
    def provider_name(self) -> str:
        return "Stub"

    @property
    def env_key_name(self) -> str:
        return "STUB_API_KEY_FOR_TESTS"

    @property
    def default_enhance_model(self) -> str:
        return "stub-text"

    @property
    def default_image_model(self) -> str:
        return "stub-image"

    def _get_default_base_url(self) -> str:
        return "http://stub.invalid"

    def _get_api_key_from_env(self) -> Optional[str]:
        return None

    @staticmethod
    def _next(outcomes: Any) -> Any:
        if isinstance(outcomes, list):
            return outcomes.pop(0)
        return outcomes

    async def enhance_prompt(self, parts: List[Part], model: Optional[str] = None) -> str:
        start = time.monotonic()
        self.enhance_calls.append({"parts": parts, "model": model})
        await asyncio.sleep(self.delay)
        self.intervals.append((start, time.monotonic()))
        outcome = self._next(self.enhanced)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def render_image(self, prompt: str, aspect_ratio: str) -> str:
        start = time.monotonic()
        self.render_calls.append({"prompt": prompt, "aspect_ratio": aspect_ratio})
        await asyncio.sleep(self.delay)
        self.intervals.append((start, time.monotonic()))
        outcome = self._next(self.images)
        if isinstance(outcome, Exception):
            raise outcome
        return f"data:image/jpeg;base64,{outcome}"


@pytest.fixture
def stub_client():
    return StubClient()


@pytest.fixture
def enhancement_error():
    return EnhancementError("Failed to generate enhanced prompt: boom")


@pytest.fixture
def render_error():
    return RenderError("Failed to generate image with Imagen: no image generated")
