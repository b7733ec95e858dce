"""Request-scoped data types for the try-on pipeline."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class TryOnMode(str, Enum):
    """Which branch a request takes after garment resolution."""
    DEMO_OVERLAY = "demo_overlay"  # Local composite
    DEMO_ECHO = "demo_echo"        # Original upload returned as-is
    REAL = "real"                  # External image generation
    UNAVAILABLE = "unavailable"    # Real mode requested, generation not configured


class TryOnStatus(str, Enum):
    """Status label returned to the caller."""
    DEMO_OVERLAY = "demo_overlay"
    DEMO_ORIGINAL = "demo_original"
    DEMO_FALLBACK = "demo_fallback"
    GENERATED = "generated"


@dataclass
class UploadedImage:
    """User photo as received in the multipart body."""
    data: bytes
    content_type: str  # Normalized, e.g. "image/jpeg"
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class GarmentFile:
    """A garment image resolved inside the trusted directory."""
    dress_id: str
    path: Path
    data: bytes
    media_type: str


@dataclass
class TryOnRequest:
    upload: UploadedImage
    dress_id: Optional[str] = None
    dress_src: Optional[str] = None
    demo_mode: bool = False
    demo_overlay: bool = True


@dataclass
class TryOnResult:
    status: TryOnStatus
    image: str  # Data URI
    dress_id: str
    dress_src: Optional[str] = None
    warning: Optional[str] = None
