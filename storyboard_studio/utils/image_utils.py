"""
Image Utilities
===============

Helper functions for moving images between files, base64 and data URLs.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Tuple, Union

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def get_mime_type(image_path: Union[str, Path]) -> str:
    """Get MIME type from file extension."""
    return MIME_TYPES.get(Path(image_path).suffix.lower(), "image/jpeg")


def encode_image(image_path: Union[str, Path]) -> Tuple[str, str]:
    """
    Encode an image to base64.

    Args:
        image_path: Path to the image file

    Returns:
        Tuple of (base64_data, mime_type)
    """
    path = Path(image_path)

    if not path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    with open(path, "rb") as f:
        data = base64.b64encode(f.read()).decode("utf-8")

    return data, get_mime_type(path)


def to_data_url(data: str, mime_type: str) -> str:
    """Wrap base64 data in a data URL."""
    return f"data:{mime_type};base64,{data}"


def parse_data_url(data_url: str) -> Tuple[str, str]:
    """
    Split a base64 data URL into its parts.

    Args:
        data_url: String of the form ``data:<mime>;base64,<data>``

    Returns:
        Tuple of (base64_data, mime_type)

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Not a data URL")

    header, data = data_url.split(",", 1)
    mime_type, _, encoding = header[len("data:"):].partition(";")
    if encoding != "base64" or not data:
        raise ValueError("Only non-empty base64 data URLs are supported")

    return data, mime_type or "application/octet-stream"


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """Decode a base64 data URL to raw bytes and its MIME type."""
    data, mime_type = parse_data_url(data_url)
    try:
        return base64.b64decode(data, validate=True), mime_type
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}")


def save_data_url(data_url: str, output_path: Union[str, Path]) -> Path:
    """
    Write a data URL image to disk.

    The file extension is taken from the MIME type when the path has none.

    Returns:
        Path of the written file
    """
    raw, mime_type = decode_data_url(data_url)

    output_path = Path(output_path)
    if not output_path.suffix:
        output_path = output_path.with_suffix(EXTENSIONS.get(mime_type, ".bin"))
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "wb") as f:
        f.write(raw)

    logger.debug(f"Saved {len(raw)} bytes to {output_path}")
    return output_path
