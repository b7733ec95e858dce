"""Validation of the uploaded user photo."""

import logging
from typing import Optional

from tryon.errors import ErrorCode, UploadValidationError
from tryon.types import UploadedImage
from utils.image_io import normalize_media_type

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}

HEIC_AVIF_MARKERS = ("heic", "heif", "avif")
HEIC_AVIF_SUFFIXES = (".heic", ".heif", ".avif")

# ISO-BMFF major brands used by HEIC/HEIF/AVIF files
HEIC_AVIF_BRANDS = {
    b"heic", b"heix", b"hevc", b"hevx", b"heim", b"heis",
    b"hevm", b"hevs", b"mif1", b"msf1", b"avif", b"avis",
}


def has_heic_avif_signature(data: bytes) -> bool:
    """Check for an ``ftyp`` box announcing a HEIF-family brand."""
    if len(data) < 12 or data[4:8] != b"ftyp":
        return False
    return data[8:12] in HEIC_AVIF_BRANDS


def is_heic_or_avif(content_type: str, filename: str, data: bytes = b"") -> bool:
    content_type = (content_type or "").lower()
    filename = (filename or "").lower()
    if any(marker in content_type for marker in HEIC_AVIF_MARKERS):
        return True
    if filename.endswith(HEIC_AVIF_SUFFIXES):
        return True
    return has_heic_avif_signature(data)


def validate_upload(
    filename: Optional[str],
    content_type: Optional[str],
    data: Optional[bytes],
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> UploadedImage:
    """
    Validate an uploaded photo before any other work is done.

    Checks run in a fixed order: presence, HEIC/AVIF detection, declared
    type allow-list, then size. The first failing check wins.

    Args:
        filename: Declared filename from the multipart part
        content_type: Declared media type from the multipart part
        data: Raw bytes (None when the field was absent)
        max_bytes: Size limit in bytes

    Returns:
        UploadedImage with a normalized content type

    Raises:
        UploadValidationError: with one of missing_user_image,
            unsupported_input_type or file_too_large
    """
    if not data:
        raise UploadValidationError(ErrorCode.MISSING_USER_IMAGE)

    if is_heic_or_avif(content_type or "", filename or "", data):
        logger.info(f"Rejected HEIC/AVIF upload: type={content_type!r}")
        raise UploadValidationError(
            ErrorCode.UNSUPPORTED_INPUT_TYPE,
            "HEIC/AVIF detected. Please convert to JPG, JPEG, PNG, or WebP.",
        )

    media_type = normalize_media_type(content_type)
    if media_type not in ALLOWED_CONTENT_TYPES:
        logger.info(f"Rejected upload with unsupported type: {content_type!r}")
        raise UploadValidationError(ErrorCode.UNSUPPORTED_INPUT_TYPE)

    if len(data) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise UploadValidationError(
            ErrorCode.FILE_TOO_LARGE,
            f"Images must be {limit_mb:g}MB or smaller.",
        )

    return UploadedImage(data=data, content_type=media_type, filename=filename or "")
