"""
API Integration Layer
=====================

Remote backends that enhance prompts and render images.

Usage:
    from storyboard_studio.api import get_client

    client = get_client("google")
    prompt = await client.enhance_prompt([TextPart("A lighthouse at dusk")])
    image_url = await client.render_image(prompt, "16:9")
"""

from .base import BaseGenerationClient, TextPart, ImagePart, Part, RenderRequest
from .factory import get_client, get_client_from_config, list_clients

__all__ = [
    "BaseGenerationClient",
    "TextPart",
    "ImagePart",
    "Part",
    "RenderRequest",
    "get_client",
    "get_client_from_config",
    "list_clients",
]
