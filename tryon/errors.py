"""Error taxonomy for the try-on pipeline.

Every failure a caller can see carries a stable string code and an HTTP
status. Messages are fixed per code and never include file-system paths or
upstream payloads.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable error codes returned in the ``code`` field."""
    MISSING_USER_IMAGE = "missing_user_image"
    UNSUPPORTED_INPUT_TYPE = "unsupported_input_type"
    FILE_TOO_LARGE = "file_too_large"
    INVALID_DRESS_ID = "invalid_dress_id"
    INVALID_DRESS_PATH = "invalid_dress_path"
    INVALID_DRESS_EXT = "invalid_dress_ext"
    DRESS_NOT_FOUND = "dress_not_found"
    EMPTY_DRESS_IMAGE = "empty_dress_image"
    OPENAI_NOT_CONFIGURED = "openai_not_configured"
    NO_IMAGE = "no_image"
    OPENAI_ERROR = "openai_error"
    INVALID_REQUEST = "invalid_request"
    INTERNAL_ERROR = "internal_error"


MESSAGES = {
    ErrorCode.MISSING_USER_IMAGE: "Please upload a photo to continue.",
    ErrorCode.UNSUPPORTED_INPUT_TYPE: "Please upload a JPG, JPEG, PNG, or WebP image.",
    ErrorCode.FILE_TOO_LARGE: "Images must be 5MB or smaller.",
    ErrorCode.INVALID_DRESS_ID: "Selected dress could not be found.",
    ErrorCode.INVALID_DRESS_PATH: "Selected dress path is invalid.",
    ErrorCode.INVALID_DRESS_EXT: "The selected dress file type is not supported.",
    ErrorCode.DRESS_NOT_FOUND: "We could not find that dress. Please pick another one.",
    ErrorCode.EMPTY_DRESS_IMAGE: "The selected dress file seems empty.",
    ErrorCode.OPENAI_NOT_CONFIGURED: "Real try-on is not available right now.",
    ErrorCode.NO_IMAGE: "The try-on did not return an image. Please try again.",
    ErrorCode.OPENAI_ERROR: "We had trouble generating your try-on. Please try again in a moment.",
    ErrorCode.INVALID_REQUEST: "The request form could not be read.",
    ErrorCode.INTERNAL_ERROR: "Something went wrong. Please try again.",
}


class TryOnError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code = 500

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or MESSAGES[code]
        super().__init__(f"{code.value}: {self.message}")


class UploadValidationError(TryOnError):
    status_code = 400


class GarmentResolutionError(TryOnError):
    status_code = 400


class GenerationUnavailableError(TryOnError):
    status_code = 503

    def __init__(self):
        super().__init__(ErrorCode.OPENAI_NOT_CONFIGURED)


class GenerationError(TryOnError):
    """External generation failed. ``upstream_code`` is kept for logs only."""

    status_code = 502

    def __init__(self, code: ErrorCode = ErrorCode.OPENAI_ERROR, upstream_code: Optional[str] = None):
        self.upstream_code = upstream_code
        super().__init__(code)
