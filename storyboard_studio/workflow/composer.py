"""
Prompt Composer
===============

Builds the text sent to the generation backend for a scene.

Two forms are produced:
- a basic prompt, assembled deterministically from the scene's fields and
  used as a fallback and as the starting point for manual editing
- an enhancement request, an instruction block plus labelled reference
  images, that a multimodal model rewrites into the final prompt
"""

import logging
from typing import List

from ..api.base import ImagePart, Part, TextPart
from ..project.character import Character
from ..project.scene import Scene
from ..project.style import GenerationSettings

logger = logging.getLogger(__name__)

CAMERA_HINT = (
    "Consider camera angles or shot types if implied by the scene description "
    "(e.g., wide shot, close-up, eye-level)."
)


def build_basic_prompt(
    scene: Scene,
    characters: List[Character],
    settings: GenerationSettings,
) -> str:
    """
    Build a plain-text prompt without any remote call.

    Args:
        scene: The panel to describe
        characters: The scene's resolved characters, in scene order
        settings: Style and aspect ratio to request

    Returns:
        Prompt text
    """
    style = settings.art_style
    ratio = settings.aspect_ratio

    prompt = scene.user_text

    if characters:
        prompt += "\n\nCharacters involved: "
        prompt += "; ".join(f"{c.name} ({c.description})" for c in characters)

    prompt += f"\n\nArt Style: {style.prompt_fragment}. Emphasize {style.label.lower()} qualities."
    prompt += (
        f"\n\nImage Aspect Ratio Hint: {ratio.value}. "
        f"Generate image with a {ratio.label.lower()} aspect ratio."
    )
    prompt += f" {CAMERA_HINT}"

    return prompt.strip()


def build_enhancement_instruction(
    scene: Scene,
    characters: List[Character],
    settings: GenerationSettings,
) -> str:
    """The instruction block that opens an enhancement request."""
    style = settings.art_style
    ratio = settings.aspect_ratio

    text = (
        "You are a master visual storyteller and prompt engineer for an advanced AI image "
        "generation model. Your task is to create a concise, highly detailed, and effective "
        "text prompt to generate a single storyboard panel.\n\n"
        f"Scene Description: {scene.user_text}\n\n"
    )

    if characters:
        text += (
            "\nKey Characters in this scene (incorporate their visual descriptions and "
            "reference images if provided):\n"
        )
        for character in characters:
            text += f"- {character.name}: {character.description}\n"

    text += (
        f"\nArt Style: {style.prompt_fragment}. Emphasize {style.label.lower()} qualities. "
        "Create a visually rich image in this style."
    )
    text += (
        f"\nImage Aspect Ratio: The final image should have a {ratio.label.lower()} "
        f"({ratio.value}) aspect ratio."
    )
    text += (
        "\nConsider camera angles, composition, lighting, and mood implied by the scene "
        "description to create a compelling visual. Focus on a single, clear moment. "
        "Generate only the image description."
    )

    return text


def build_enhancement_parts(
    scene: Scene,
    characters: List[Character],
    settings: GenerationSettings,
) -> List[Part]:
    """
    Build the multimodal enhancement request.

    The instruction text comes first, then a label and an inline image for
    every character that has a reference image, in character order.
    """
    parts: List[Part] = [TextPart(build_enhancement_instruction(scene, characters, settings))]

    for character in characters:
        if not character.has_reference_image:
            continue
        image = character.reference_image
        parts.append(TextPart(f"Reference image for {character.name} ({character.description}):"))
        parts.append(ImagePart(mime_type=image.mime_type, data=image.data))

    logger.debug(f"Composed enhancement request for scene {scene.id}: {len(parts)} parts")
    return parts
