"""
Input Validator
===============

Checks user input before it reaches the project store. The store itself
accepts anything; these rules belong to whatever collects the input.
"""

import logging
from typing import Optional, Tuple

from ..core.exceptions import ValidationError
from ..project.character import ReferenceImage

logger = logging.getLogger(__name__)

MAX_REFERENCE_IMAGE_MB = 2
MAX_REFERENCE_IMAGE_BYTES = MAX_REFERENCE_IMAGE_MB * 1024 * 1024
ALLOWED_REFERENCE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")


def _require_text(value: Optional[str], field: str, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message, field=field, constraint="non-empty")
    return str(value).strip()


def validate_character(name: Optional[str], description: Optional[str]) -> Tuple[str, str]:
    """
    Validate a character's name and description.

    Returns:
        The stripped (name, description)
    """
    name = _require_text(name, "name", "Character name and description cannot be empty.")
    description = _require_text(
        description, "description", "Character name and description cannot be empty."
    )
    return name, description


def validate_reference_image(image: ReferenceImage) -> ReferenceImage:
    """Reject reference images that are too large or of an unsupported type."""
    if image.mime_type not in ALLOWED_REFERENCE_MIME_TYPES:
        raise ValidationError(
            "Invalid file type. Allowed: JPEG, PNG, WebP.",
            field="reference_image",
            value=image.mime_type,
            constraint=", ".join(ALLOWED_REFERENCE_MIME_TYPES),
        )
    if image.size_bytes > MAX_REFERENCE_IMAGE_BYTES:
        raise ValidationError(
            f"File is too large. Max size: {MAX_REFERENCE_IMAGE_MB}MB.",
            field="reference_image",
            value=image.size_bytes,
            constraint=f"<= {MAX_REFERENCE_IMAGE_BYTES} bytes",
        )
    return image


def validate_scene_text(text: Optional[str]) -> str:
    """Scene descriptions must not be blank."""
    return _require_text(text, "user_text", "Scene description cannot be empty.")


def validate_prompt(prompt: Optional[str]) -> str:
    """Edited prompts must not be blank."""
    return _require_text(prompt, "prompt", "Prompt cannot be empty.")
