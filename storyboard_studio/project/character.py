"""
Character Models
================

Characters and their optional reference images, reused across panels for
visual consistency.
"""

import uuid
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Union

from ..utils.image_utils import encode_image, parse_data_url, to_data_url

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate a stable identifier for a character or scene."""
    return uuid.uuid4().hex[:12]


@dataclass
class ReferenceImage:
    """An inline image: base64 data (no data-URL prefix) plus its MIME type."""

    data: str
    mime_type: str

    @classmethod
    def from_data_url(cls, data_url: str) -> "ReferenceImage":
        """Create from a ``data:<mime>;base64,<data>`` string."""
        data, mime_type = parse_data_url(data_url)
        return cls(data=data, mime_type=mime_type)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReferenceImage":
        """Create by reading and encoding an image file."""
        data, mime_type = encode_image(path)
        return cls(data=data, mime_type=mime_type)

    def to_data_url(self) -> str:
        """Render back to a data URL."""
        return to_data_url(self.data, self.mime_type)

    @property
    def size_bytes(self) -> int:
        """Approximate decoded size of the image."""
        padding = self.data.count("=", max(len(self.data) - 2, 0))
        return (len(self.data) * 3) // 4 - padding


@dataclass
class Character:
    """
    A named entity with a visual description.

    Scenes reference characters by ``id`` only; the store owns them.
    """

    name: str = ""
    description: str = ""
    reference_image: Optional[ReferenceImage] = None
    id: str = field(default_factory=new_id)

    @property
    def has_reference_image(self) -> bool:
        return self.reference_image is not None and bool(self.reference_image.data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "reference_image": (
                {"data": self.reference_image.data, "mime_type": self.reference_image.mime_type}
                if self.reference_image else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Character":
        """Create from dictionary."""
        ref = data.get("reference_image")
        return cls(
            id=data.get("id") or new_id(),
            name=data.get("name", ""),
            description=data.get("description", ""),
            reference_image=ReferenceImage(**ref) if ref else None,
        )
