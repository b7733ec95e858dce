# Garment Lookup Module
from .resolver import resolve_garment, is_descendant_of, ALLOWED_EXTENSIONS
from .catalog import list_garments, humanize_filename, GarmentEntry

__all__ = [
    "resolve_garment",
    "is_descendant_of",
    "ALLOWED_EXTENSIONS",
    "list_garments",
    "humanize_filename",
    "GarmentEntry",
]
