"""
Utilities
=========

Helper functions for Storyboard Studio.
"""

from .image_utils import (
    encode_image,
    get_mime_type,
    to_data_url,
    parse_data_url,
    decode_data_url,
    save_data_url,
)

__all__ = [
    "encode_image",
    "get_mime_type",
    "to_data_url",
    "parse_data_url",
    "decode_data_url",
    "save_data_url",
]
