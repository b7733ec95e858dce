# Utility Functions
from .image_io import (
    load_image,
    load_image_with_alpha,
    image_to_bytes,
    to_data_uri,
    normalize_media_type,
    check_pixel_count,
)
from .timing import Timer

__all__ = [
    "load_image",
    "load_image_with_alpha",
    "image_to_bytes",
    "to_data_uri",
    "normalize_media_type",
    "check_pixel_count",
    "Timer",
]
