"""Image I/O utilities for the Dress Try-On service."""

import base64
import io
from typing import Optional, Tuple
import numpy as np
import cv2
from PIL import Image

# Decoding is refused above this many pixels; a small PNG can expand to gigabytes
MAX_PIXELS = 24_000_000


def check_pixel_count(source: bytes, max_pixels: Optional[int] = None) -> None:
    """
    Read the image header and refuse images with too many pixels.

    Only the header is parsed, so this is cheap even for huge images.
    Unrecognized data is left for the decoder to reject.

    Raises:
        ValueError: if width * height exceeds max_pixels
    """
    if max_pixels is None:
        max_pixels = MAX_PIXELS

    try:
        with Image.open(io.BytesIO(source)) as img:
            width, height = img.size
    except Image.DecompressionBombError as e:
        raise ValueError(f"Image too large to decode: {e}") from e
    except OSError:
        return

    if width * height > max_pixels:
        raise ValueError(f"Image too large to decode: {width}x{height}")


def _decode(source: bytes, max_size: Optional[int] = None) -> np.ndarray:
    check_pixel_count(source)

    nparr = np.frombuffer(source, np.uint8)
    img = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if img is None:
        raise ValueError("Failed to load image")

    # 16-bit PNGs decode as uint16
    if img.dtype != np.uint8:
        img = (img / 257).astype(np.uint8)

    # Resize if needed
    if max_size is not None:
        h, w = img.shape[:2]
        if max(h, w) > max_size:
            scale = max_size / max(h, w)
            new_w = max(1, int(round(w * scale)))
            new_h = max(1, int(round(h * scale)))
            img = cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_AREA)

    return img


def load_image(source: bytes, max_size: Optional[int] = None) -> np.ndarray:
    """
    Decode image bytes and return as RGB numpy array.

    Args:
        source: Encoded image bytes
        max_size: Maximum dimension (will resize if larger, preserving aspect ratio)

    Returns:
        RGB image as numpy array (H, W, 3), dtype uint8

    Raises:
        ValueError: if the data cannot be decoded or has too many pixels
    """
    img = _decode(source, max_size)

    # Handle alpha channel - convert to RGB
    if len(img.shape) == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    elif img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    else:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    return img.astype(np.uint8)


def load_image_with_alpha(
    source: bytes,
    max_size: Optional[int] = None,
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Load an image and extract alpha channel if present.

    Args:
        source: Encoded image bytes
        max_size: Maximum dimension, as in load_image

    Returns:
        Tuple of (RGB image, alpha mask or None)
    """
    img = _decode(source, max_size)

    alpha = None

    if len(img.shape) == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    elif img.shape[2] == 4:
        # BGRA - extract alpha
        alpha = img[:, :, 3]
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    else:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    return img.astype(np.uint8), alpha


def image_to_bytes(image: np.ndarray, format: str = "JPEG", quality: int = 90) -> bytes:
    """
    Convert an RGB image to bytes.

    Args:
        image: RGB image as numpy array
        format: Output format ("PNG" or "JPEG")
        quality: JPEG quality, ignored for PNG

    Returns:
        Image as bytes
    """
    pil_image = Image.fromarray(image)

    buffer = io.BytesIO()
    if format.upper() == "JPEG":
        pil_image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    else:
        pil_image.save(buffer, format=format)

    return buffer.getvalue()


def to_data_uri(data: bytes, media_type: str) -> str:
    """Wrap raw image bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def normalize_media_type(content_type: Optional[str]) -> str:
    """Lowercase a declared content type and drop parameters; image/jpg becomes image/jpeg."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == "image/jpg":
        return "image/jpeg"
    return media_type
