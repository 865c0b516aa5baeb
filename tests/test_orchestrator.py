import asyncio

import pytest

from conftest import StubClient

from storyboard_studio.core.config import GenerationConfig
from storyboard_studio.core.exceptions import RenderError, ValidationError
from storyboard_studio.project.character import ReferenceImage
from storyboard_studio.project.store import ProjectStore
from storyboard_studio.project.style import ArtStyle, AspectRatio, GenerationSettings
from storyboard_studio.workflow.composer import build_basic_prompt
from storyboard_studio.workflow.orchestrator import (
    BATCH_ALREADY_RUNNING,
    NOTHING_TO_DO,
    SceneOrchestrator,
)


def _project():
    store = ProjectStore()
    ada = store.add_character("Ada", "tall woman in a red coat")
    scene = store.add_scene("Ada enters a room", [ada.id])
    return store, ada, scene


def test_new_scene_starts_idle():
    store, ada, scene = _project()
    assert scene.panel_number == 1
    assert scene.generating is False
    assert scene.image_url is None
    assert scene.character_ids == [ada.id]


def test_empty_enhancement_falls_back_to_basic_prompt():
    store, ada, scene = _project()
    client = StubClient(enhanced="")
    orchestrator = SceneOrchestrator(store, client)

    asyncio.run(orchestrator.generate_scene(scene.id))

    expected = build_basic_prompt(scene, [ada], orchestrator.settings)
    assert scene.final_prompt == expected
    assert "Ada enters a room" in scene.final_prompt
    assert scene.error
    assert scene.generating is False
    assert scene.image_url is None
    assert client.render_calls == []


def test_enhancement_exception_is_recorded(enhancement_error):
    store, _, scene = _project()
    client = StubClient(enhanced=enhancement_error)

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert scene.error == "Failed to generate enhanced prompt: boom"
    assert scene.final_prompt.startswith("Ada enters a room")
    assert scene.generating is False
    assert client.render_calls == []


def test_successful_generation():
    store, _, scene = _project()
    client = StubClient(enhanced="X", images="Y")

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert scene.final_prompt == "X"
    assert "Y" in scene.image_url
    assert scene.error is None
    assert scene.generating is False
    assert client.render_calls == [{"prompt": "X", "aspect_ratio": "16:9"}]


def test_render_failure_keeps_enhanced_prompt(render_error):
    store, _, scene = _project()
    client = StubClient(enhanced="X", images=render_error)

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert scene.final_prompt == "X"
    assert scene.error == render_error.message
    assert scene.image_url is None
    assert scene.generating is False


def test_cached_prompt_skips_enhancement():
    store, _, scene = _project()
    store.update_scene(scene.id, final_prompt="cached")
    client = StubClient()

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert client.enhance_calls == []
    assert client.render_calls[0]["prompt"] == "cached"


def test_retry_after_render_failure_reuses_prompt(render_error):
    store, _, scene = _project()
    client = StubClient(enhanced=["X"], images=[render_error, "Y"])
    orchestrator = SceneOrchestrator(store, client)

    asyncio.run(orchestrator.generate_scene(scene.id))
    assert scene.error
    asyncio.run(orchestrator.generate_scene(scene.id))

    assert len(client.enhance_calls) == 1
    assert scene.error is None
    assert scene.image_url.endswith("Y")


def test_unavailable_capability_makes_no_calls():
    store, _, scene = _project()
    client = StubClient(api_key=None)

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert scene.error
    assert "unavailable" in scene.error.lower()
    assert scene.generating is False
    assert client.enhance_calls == []
    assert client.render_calls == []


def test_unknown_scene_is_a_no_op(stub_client):
    store, _, scene = _project()
    result = asyncio.run(SceneOrchestrator(store, stub_client).generate_scene("missing"))

    assert result is None
    assert stub_client.enhance_calls == []
    assert scene.generating is False


def test_generating_flag_is_visible_during_remote_call():
    store, _, scene = _project()
    seen = {}

    class Watching(StubClient):
        async def enhance_prompt(self, parts, model=None):
            seen["generating"] = scene.generating
            seen["image_url"] = scene.image_url
            seen["error"] = scene.error
            return "X"

    store.update_scene(scene.id, image_url="data:old", error="old error")
    asyncio.run(SceneOrchestrator(store, Watching()).generate_scene(scene.id))

    assert seen == {"generating": True, "image_url": None, "error": None}


def test_override_prompt_is_deterministic():
    store, _, scene = _project()
    client = StubClient()
    orchestrator = SceneOrchestrator(store, client)

    asyncio.run(orchestrator.generate_scene(scene.id, override_prompt="P"))
    first = scene.image_url
    asyncio.run(orchestrator.generate_scene(scene.id, override_prompt="P"))

    assert scene.image_url == first
    assert client.enhance_calls == []


def test_regenerate_with_prompt_persists_override():
    store, _, scene = _project()
    store.update_scene(scene.id, final_prompt="old", error="old failure")
    client = StubClient()

    asyncio.run(SceneOrchestrator(store, client).regenerate_with_prompt(scene.id, "edited"))

    assert scene.final_prompt == "edited"
    assert client.enhance_calls == []
    assert client.render_calls[0]["prompt"] == "edited"
    assert scene.error is None


def test_regenerate_with_blank_prompt_is_rejected():
    store, _, scene = _project()
    store.update_scene(scene.id, final_prompt="cached")
    client = StubClient()

    with pytest.raises(ValidationError):
        asyncio.run(SceneOrchestrator(store, client).regenerate_with_prompt(scene.id, "  "))

    assert scene.final_prompt == "cached"
    assert client.enhance_calls == []
    assert client.render_calls == []


def test_empty_override_prompt_skips_enhancement():
    store, _, scene = _project()
    client = StubClient()

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id, override_prompt=""))

    assert client.enhance_calls == []
    assert client.render_calls[0]["prompt"] == ""


def test_settings_flow_into_requests():
    store, ada, scene = _project()
    store.update_character(ada.id, reference_image=ReferenceImage(data="QUJD", mime_type="image/png"))
    client = StubClient()
    settings = GenerationSettings(art_style=ArtStyle.NOIR, aspect_ratio=AspectRatio.CLASSIC)

    asyncio.run(SceneOrchestrator(store, client, settings).generate_scene(scene.id))

    parts = client.enhance_calls[0]["parts"]
    assert "film noir style" in parts[0].text
    assert parts[2].data == "QUJD"
    assert client.render_calls[0]["aspect_ratio"] == "4:3"


def test_enhance_model_comes_from_config(stub_client):
    store, _, scene = _project()
    config = GenerationConfig(enhance_model="gemini-custom")

    asyncio.run(SceneOrchestrator(store, stub_client, config=config).generate_scene(scene.id))

    assert stub_client.enhance_calls[0]["model"] == "gemini-custom"


def test_prompt_for_editing():
    store, ada, scene = _project()
    orchestrator = SceneOrchestrator(store, StubClient())

    assert orchestrator.prompt_for_editing(scene.id) == build_basic_prompt(
        scene, [ada], orchestrator.settings
    )
    store.update_scene(scene.id, final_prompt="cached")
    assert orchestrator.prompt_for_editing(scene.id) == "cached"
    assert orchestrator.prompt_for_editing("missing") is None


# -----------------------------------------------------------------------------
# Edits during generation
# -----------------------------------------------------------------------------


class _EditingClient(StubClient):
    """Edits the scene text while the render call is in flight."""

    def __init__(self, store, scene_id, **kwargs):
        super().__init__(**kwargs)
        self.store = store
        self.scene_id = scene_id

    async def render_image(self, prompt, aspect_ratio):
        self.store.edit_scene(self.scene_id, "Ada leaves the room")
        return await super().render_image(prompt, aspect_ratio)


def test_result_overwrites_concurrent_edit_by_default():
    store, _, scene = _project()
    client = _EditingClient(store, scene.id)

    asyncio.run(SceneOrchestrator(store, client).generate_scene(scene.id))

    assert scene.user_text == "Ada leaves the room"
    assert scene.image_url is not None
    assert scene.generating is False


def test_stale_result_is_discarded_when_configured():
    store, _, scene = _project()
    client = _EditingClient(store, scene.id)
    config = GenerationConfig(discard_stale_results=True)

    asyncio.run(SceneOrchestrator(store, client, config=config).generate_scene(scene.id))

    assert scene.image_url is None
    assert scene.final_prompt is None
    assert scene.error is None
    assert scene.generating is False


# -----------------------------------------------------------------------------
# Batch
# -----------------------------------------------------------------------------


def test_batch_continues_past_failures():
    store = ProjectStore()
    first = store.add_scene("first")
    second = store.add_scene("second")
    client = StubClient(images=[RenderError("render failed"), "OK"])

    report = asyncio.run(SceneOrchestrator(store, client).generate_all_pending())

    assert first.error == "render failed"
    assert first.image_url is None
    assert second.image_url.endswith("OK")
    assert report.attempted == [first.id, second.id]
    assert report.failed == [first.id]
    assert report.succeeded == [second.id]
    assert len(client.render_calls) == 2


def test_batch_is_strictly_sequential():
    store = ProjectStore()
    for text in ("one", "two", "three"):
        store.add_scene(text)
    client = StubClient(delay=0.01)

    asyncio.run(SceneOrchestrator(store, client).generate_all_pending())

    assert len(client.intervals) == 6
    for (_, previous_end), (next_start, _) in zip(client.intervals, client.intervals[1:]):
        assert next_start >= previous_end


def test_batch_skips_failed_and_completed_scenes():
    store = ProjectStore()
    done = store.add_scene("done")
    failed = store.add_scene("failed")
    pending = store.add_scene("pending")
    store.update_scene(done.id, image_url="data:image/jpeg;base64,AA")
    store.update_scene(failed.id, error="earlier failure")
    client = StubClient()

    report = asyncio.run(SceneOrchestrator(store, client).generate_all_pending())

    assert report.attempted == [pending.id]
    assert failed.error == "earlier failure"


def test_batch_with_nothing_pending_makes_no_calls():
    store = ProjectStore()
    scene = store.add_scene("done")
    store.update_scene(scene.id, image_url="data:image/jpeg;base64,AA")
    client = StubClient()

    report = asyncio.run(SceneOrchestrator(store, client).generate_all_pending())

    assert report.nothing_to_do
    assert report.message == NOTHING_TO_DO
    assert client.enhance_calls == []
    assert client.render_calls == []


def test_batch_without_capability_touches_nothing():
    store = ProjectStore()
    scene = store.add_scene("pending")
    client = StubClient(api_key=None)

    report = asyncio.run(SceneOrchestrator(store, client).generate_all_pending())

    assert report.nothing_to_do
    assert scene.error is None
    assert client.render_calls == []


def test_second_batch_is_refused_while_one_runs():
    store = ProjectStore()
    for text in ("one", "two"):
        store.add_scene(text)
    client = StubClient(delay=0.01)
    orchestrator = SceneOrchestrator(store, client)
    observed = []

    async def run():
        first = asyncio.ensure_future(orchestrator.generate_all_pending())
        await asyncio.sleep(0)
        observed.append(orchestrator.is_batch_running)
        second = await orchestrator.generate_all_pending()
        return await first, second

    first, second = asyncio.run(run())

    assert observed == [True]
    assert orchestrator.is_batch_running is False
    assert len(first.attempted) == 2
    assert second.message == BATCH_ALREADY_RUNNING
    assert second.attempted == []
    assert len(client.render_calls) == 2


def test_concurrent_batches_render_each_scene_once():
    store = ProjectStore()
    for text in ("one", "two"):
        store.add_scene(text)
    client = StubClient(delay=0.01)
    orchestrator = SceneOrchestrator(store, client)

    async def run():
        return await asyncio.gather(
            orchestrator.generate_all_pending(),
            orchestrator.generate_all_pending(),
        )

    reports = asyncio.run(run())

    refused = [r for r in reports if r.message == BATCH_ALREADY_RUNNING]
    assert len(refused) == 1
    assert refused[0].attempted == []
    assert len(client.render_calls) == 2
    assert orchestrator.is_batch_running is False
