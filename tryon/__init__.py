# Dress Try-On Pipeline
from .pipeline import TryOnPipeline, select_mode
from .validation import validate_upload

__all__ = ["TryOnPipeline", "select_mode", "validate_upload"]
