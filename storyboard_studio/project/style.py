"""
Style Settings
==============

Art styles, aspect ratios and the process-wide generation settings.

Each style and ratio is identified by a stable key; its display label and
prompt fragment are looked up separately so the key never doubles as
generation text.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Union

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ArtStyle(Enum):
    """Selectable art style for generated panels."""

    PHOTOREALISTIC = "photorealistic"
    CARTOON = "cartoon"
    PIXAR = "pixar"
    SKETCH = "sketch"
    WATERCOLOR = "watercolor"
    CYBERPUNK = "cyberpunk"
    FANTASY = "fantasy"
    NOIR = "noir"
    PIXEL_ART = "pixel_art"
    MINIMALIST = "minimalist"
    VINTAGE_COMIC = "vintage_comic"

    @property
    def label(self) -> str:
        """Human-readable name of the style."""
        return _ART_STYLE_DETAILS[self]["label"]

    @property
    def prompt_fragment(self) -> str:
        """Text inserted into prompts to request this style."""
        return _ART_STYLE_DETAILS[self]["prompt_fragment"]

    @classmethod
    def from_key(cls, key: Union[str, "ArtStyle"]) -> "ArtStyle":
        """Look up a style by its key."""
        if isinstance(key, cls):
            return key
        try:
            return cls(str(key).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown art style: {key}",
                field="art_style",
                value=key,
                constraint=", ".join(s.value for s in cls),
            )


_ART_STYLE_DETAILS: Dict[ArtStyle, Dict[str, str]] = {
    ArtStyle.PHOTOREALISTIC: {
        "label": "Photorealistic",
        "prompt_fragment": "photorealistic, cinematic lighting, high detail, film still",
    },
    ArtStyle.CARTOON: {
        "label": "Cartoon / Animated",
        "prompt_fragment": "charming cartoon style, animated movie screenshot, vibrant colors",
    },
    ArtStyle.PIXAR: {
        "label": "3D Pixar Style",
        "prompt_fragment": (
            "3D Pixar animation style, highly detailed characters, vibrant and warm lighting, "
            "cinematic composition, reminiscent of modern animated feature films"
        ),
    },
    ArtStyle.SKETCH: {
        "label": "Sketch / Pencil Drawing",
        "prompt_fragment": "pencil sketch, monochrome, hand-drawn aesthetic, detailed shading",
    },
    ArtStyle.WATERCOLOR: {
        "label": "Watercolor",
        "prompt_fragment": "watercolor painting, soft edges, artistic effect, flowing colors",
    },
    ArtStyle.CYBERPUNK: {
        "label": "Cyberpunk",
        "prompt_fragment": (
            "cyberpunk art style, neon lights, futuristic city, gritty atmosphere, "
            "Blade Runner aesthetic"
        ),
    },
    ArtStyle.FANTASY: {
        "label": "Fantasy",
        "prompt_fragment": "high fantasy art, epic scenery, magical elements, detailed illustration",
    },
    ArtStyle.NOIR: {
        "label": "Film Noir",
        "prompt_fragment": "film noir style, black and white, dramatic shadows, 1940s detective movie",
    },
    ArtStyle.PIXEL_ART: {
        "label": "Pixel Art",
        "prompt_fragment": "pixel art, retro 16-bit video game style, limited color palette",
    },
    ArtStyle.MINIMALIST: {
        "label": "Minimalist Vector",
        "prompt_fragment": "minimalist vector art, clean lines, flat colors, simple shapes",
    },
    ArtStyle.VINTAGE_COMIC: {
        "label": "Vintage Comic",
        "prompt_fragment": "vintage comic book art, halftone dots, bold outlines, retro colors",
    },
}


class AspectRatio(Enum):
    """Output aspect ratio; the value is the ratio string the renderer expects."""

    LANDSCAPE = "16:9"
    SQUARE = "1:1"
    PORTRAIT = "9:16"
    CLASSIC = "4:3"
    PHOTO = "3:2"

    @property
    def label(self) -> str:
        """Human-readable name of the ratio."""
        return _ASPECT_RATIO_LABELS[self]

    @classmethod
    def from_key(cls, key: Union[str, "AspectRatio"]) -> "AspectRatio":
        """Look up a ratio by its ratio string (e.g. ``"16:9"``)."""
        if isinstance(key, cls):
            return key
        try:
            return cls(str(key).strip())
        except ValueError:
            raise ValidationError(
                f"Unknown aspect ratio: {key}",
                field="aspect_ratio",
                value=key,
                constraint=", ".join(r.value for r in cls),
            )


_ASPECT_RATIO_LABELS: Dict[AspectRatio, str] = {
    AspectRatio.LANDSCAPE: "Landscape (16:9)",
    AspectRatio.SQUARE: "Square (1:1)",
    AspectRatio.PORTRAIT: "Portrait (9:16)",
    AspectRatio.CLASSIC: "Classic (4:3)",
    AspectRatio.PHOTO: "Photo (3:2)",
}


DEFAULT_ART_STYLE = ArtStyle.PHOTOREALISTIC
DEFAULT_ASPECT_RATIO = AspectRatio.LANDSCAPE


@dataclass
class GenerationSettings:
    """
    Style and aspect ratio applied to future generations.

    Changing these never invalidates prompts or images already cached on
    scenes.
    """

    art_style: ArtStyle = DEFAULT_ART_STYLE
    aspect_ratio: AspectRatio = DEFAULT_ASPECT_RATIO

    def __post_init__(self):
        self.art_style = ArtStyle.from_key(self.art_style)
        self.aspect_ratio = AspectRatio.from_key(self.aspect_ratio)

    @classmethod
    def from_config(cls, config) -> "GenerationSettings":
        """Build settings from a Config's ``defaults`` section."""
        return cls(
            art_style=config.defaults.art_style,
            aspect_ratio=config.defaults.aspect_ratio,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "art_style": self.art_style.value,
            "aspect_ratio": self.aspect_ratio.value,
        }


def list_art_styles() -> List[Dict[str, str]]:
    """All styles as key/label pairs, in display order."""
    return [{"key": s.value, "label": s.label} for s in ArtStyle]


def list_aspect_ratios() -> List[Dict[str, str]]:
    """All aspect ratios as key/label pairs, in display order."""
    return [{"key": r.value, "label": r.label} for r in AspectRatio]
