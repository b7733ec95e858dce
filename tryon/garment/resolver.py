"""Resolve a garment reference to a file inside the trusted garment directory."""

import logging
import re
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from tryon.errors import ErrorCode, GarmentResolutionError
from tryon.types import GarmentFile

logger = logging.getLogger(__name__)

# Probe order for identifier lookups
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

DRESS_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

DEFAULT_URL_PREFIX = "/assets/dresses/"


def is_descendant_of(path: Union[str, Path], root: Union[str, Path]) -> bool:
    """
    Check that ``path`` lies strictly below ``root``.

    Both paths are resolved first, so ``..`` segments and symlinks are
    followed before comparing. The root itself is not a descendant.
    """
    resolved = Path(path).resolve()
    resolved_root = Path(root).resolve()
    if resolved == resolved_root:
        return False
    return resolved_root in resolved.parents


def _find_by_id(root: Path, dress_id: str) -> Optional[Path]:
    for ext in ALLOWED_EXTENSIONS:
        for variant in (ext, ext.upper()):
            candidate = (root / f"{dress_id}{variant}").resolve()
            if candidate.is_file() and is_descendant_of(candidate, root):
                return candidate
    return None


def _find_by_hint(root: Path, dress_src: str, url_prefix: str) -> Optional[Path]:
    hint = unquote(dress_src).strip()

    # Rejected before any filesystem access
    if ".." in hint or "\\" in hint or "\x00" in hint:
        raise GarmentResolutionError(ErrorCode.INVALID_DRESS_PATH)

    hint = hint.lstrip("/")
    prefix = url_prefix.strip("/")
    if prefix and hint.startswith(prefix + "/"):
        hint = hint[len(prefix) + 1:]
    if not hint:
        return None

    candidate = (root / hint).resolve()
    if not is_descendant_of(candidate, root):
        raise GarmentResolutionError(ErrorCode.INVALID_DRESS_PATH)

    if candidate.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise GarmentResolutionError(ErrorCode.INVALID_DRESS_EXT)

    if not candidate.is_file():
        return None
    return candidate


def resolve_garment(
    root: Union[str, Path],
    dress_id: Optional[str] = None,
    dress_src: Optional[str] = None,
    url_prefix: str = DEFAULT_URL_PREFIX,
) -> GarmentFile:
    """
    Resolve a garment identifier and/or path hint to a single file.

    The identifier is tried first (``<root>/<id><ext>`` for each allowed
    extension). The path hint is only consulted when no identifier match
    exists. Every candidate must resolve to a descendant of ``root``.

    Args:
        root: Trusted garment directory
        dress_id: Identifier restricted to letters, digits, ``-`` and ``_``
        dress_src: Relative path hint, optionally carrying the public URL prefix
        url_prefix: Public URL prefix stripped from hints

    Returns:
        GarmentFile with the file's bytes

    Raises:
        GarmentResolutionError: invalid_dress_id, invalid_dress_path,
            invalid_dress_ext, dress_not_found or empty_dress_image
    """
    root = Path(root).resolve()
    dress_id = (dress_id or "").strip()
    dress_src = (dress_src or "").strip()

    path = None
    if dress_id:
        if not DRESS_ID_PATTERN.fullmatch(dress_id):
            raise GarmentResolutionError(ErrorCode.INVALID_DRESS_ID)
        path = _find_by_id(root, dress_id)

    if path is None and dress_src:
        path = _find_by_hint(root, dress_src, url_prefix)

    if path is None:
        logger.info(f"Garment not found: id={dress_id!r}")
        raise GarmentResolutionError(ErrorCode.DRESS_NOT_FOUND)

    data = path.read_bytes()
    if not data:
        logger.warning(f"Garment file is empty: {path.name}")
        raise GarmentResolutionError(ErrorCode.EMPTY_DRESS_IMAGE)

    return GarmentFile(
        dress_id=dress_id or path.stem,
        path=path,
        data=data,
        media_type=MEDIA_TYPES[path.suffix.lower()],
    )
