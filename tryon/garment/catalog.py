"""Listing of the garments available in the garment directory."""

import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Union

from tryon.garment.resolver import ALLOWED_EXTENSIONS, DEFAULT_URL_PREFIX

logger = logging.getLogger(__name__)


@dataclass
class GarmentEntry:
    id: str
    title: str
    description: str
    src: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def humanize_filename(stem: str) -> str:
    """Turn ``linen-blue_dress`` into ``Linen Blue Dress``."""
    spaced = re.sub(r"[-_]+", " ", stem)
    spaced = re.sub(r"\s+", " ", spaced).strip()
    return " ".join(part[:1].upper() + part[1:] for part in spaced.split(" ") if part)


def list_garments(
    root: Union[str, Path],
    url_prefix: str = DEFAULT_URL_PREFIX,
) -> List[GarmentEntry]:
    """List garment images in ``root``, sorted by filename."""
    root = Path(root)
    try:
        files = sorted(p for p in root.iterdir() if p.is_file())
    except OSError as e:
        logger.error(f"Error loading dresses from {root}: {e}")
        return []

    entries = []
    for path in files:
        if path.name.startswith("."):
            continue
        if path.suffix.lower() not in ALLOWED_EXTENSIONS:
            continue
        title = humanize_filename(path.stem)
        entries.append(GarmentEntry(
            id=path.stem,
            title=title,
            description=f"Reconstructed dress: {title}",
            src=f"{url_prefix}{path.name}",
        ))
    return entries
