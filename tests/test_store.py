import pytest

from storyboard_studio.project.character import ReferenceImage
from storyboard_studio.project.scene import SceneStatus
from storyboard_studio.project.store import ProjectStore


def _store_with_scenes(count):
    store = ProjectStore()
    scenes = [store.add_scene(f"scene {i}") for i in range(count)]
    return store, scenes


def test_add_scene_numbers_panels_in_order():
    store, scenes = _store_with_scenes(3)
    assert [s.panel_number for s in scenes] == [1, 2, 3]
    assert len({s.id for s in scenes}) == 3


@pytest.mark.parametrize("index", [0, 2, 4])
def test_delete_scene_renumbers_contiguously(index):
    store, scenes = _store_with_scenes(5)

    assert store.delete_scene(scenes[index].id) is True

    remaining = store.scenes
    assert [s.panel_number for s in remaining] == [1, 2, 3, 4]
    assert scenes[index] not in remaining


def test_delete_unknown_scene_is_a_no_op():
    store, scenes = _store_with_scenes(2)
    assert store.delete_scene("missing") is False
    assert [s.panel_number for s in store.scenes] == [1, 2]


@pytest.mark.parametrize(
    "state",
    [
        {},
        {"final_prompt": "cached"},
        {"final_prompt": "cached", "image_url": "data:image/jpeg;base64,AA"},
        {"final_prompt": "fallback", "error": "failed"},
    ],
)
@pytest.mark.parametrize(
    "edit",
    [
        {"user_text": "new text"},
        {"character_ids": ["someone"]},
        {"user_text": "new text", "character_ids": []},
    ],
)
def test_content_edit_clears_generated_fields(state, edit):
    store, (scene,) = _store_with_scenes(1)
    store.update_scene(scene.id, **state)
    revision = scene.revision

    store.update_scene(scene.id, **edit)

    assert scene.final_prompt is None
    assert scene.image_url is None
    assert scene.error is None
    assert scene.revision == revision + 1


def test_non_content_update_keeps_cache():
    store, (scene,) = _store_with_scenes(1)
    store.update_scene(scene.id, final_prompt="cached")
    store.update_scene(scene.id, generating=True)

    assert scene.final_prompt == "cached"
    assert scene.status == SceneStatus.GENERATING


def test_update_scene_ignores_identity_fields():
    store, (scene,) = _store_with_scenes(1)
    original_id = scene.id

    store.update_scene(scene.id, id="other", panel_number=9, unknown="x")

    assert scene.id == original_id
    assert scene.panel_number == 1
    assert not hasattr(scene, "unknown")


def test_edit_scene_replaces_text_and_characters():
    store = ProjectStore()
    ada = store.add_character("Ada", "red coat")
    scene = store.add_scene("before")

    store.edit_scene(scene.id, "after", [ada.id])

    assert scene.user_text == "after"
    assert scene.character_ids == [ada.id]
    assert store.edit_scene("missing", "text") is None


def test_update_character():
    store = ProjectStore()
    ada = store.add_character("Ada", "red coat", ReferenceImage(data="QUJD", mime_type="image/png"))

    store.update_character(ada.id, name="Ada L.", reference_image=None)

    assert ada.name == "Ada L."
    assert ada.description == "red coat"
    assert ada.reference_image is None
    assert store.update_character("missing", name="x") is None


def test_deleting_character_leaves_dangling_ids_filtered():
    store = ProjectStore()
    ada = store.add_character("Ada", "red coat")
    bob = store.add_character("Bob", "green hat")
    scene = store.add_scene("together", [ada.id, bob.id])

    assert store.delete_character(ada.id) is True

    assert scene.character_ids == [ada.id, bob.id]
    assert store.resolve_characters(scene) == [bob]
    assert store.delete_character(ada.id) is False


def test_resolve_characters_follows_scene_order():
    store = ProjectStore()
    ada = store.add_character("Ada", "red coat")
    bob = store.add_character("Bob", "green hat")
    scene = store.add_scene("together", [bob.id, ada.id])

    assert store.resolve_characters(scene) == [bob, ada]


def test_pending_scenes_and_status():
    store, (done, failed, busy, pending) = _store_with_scenes(4)
    store.update_scene(done.id, image_url="data:image/jpeg;base64,AA")
    store.update_scene(failed.id, error="boom")
    store.update_scene(busy.id, generating=True)

    assert store.pending_scenes() == [pending]
    assert done.status == SceneStatus.COMPLETED
    assert failed.status == SceneStatus.FAILED
    assert pending.status == SceneStatus.PENDING


def test_clear_and_snapshot():
    store = ProjectStore()
    ada = store.add_character("Ada", "red coat")
    store.add_scene("hello", [ada.id])

    snapshot = store.to_dict()
    assert snapshot["characters"][0]["name"] == "Ada"
    assert snapshot["scenes"][0]["status"] == "pending"

    store.clear()
    assert store.characters == []
    assert store.scenes == []
